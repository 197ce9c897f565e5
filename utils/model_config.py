"""
Default model configuration for every AI feature.
Code-first defaults used whenever the model-config table is unreachable.
"""

import os
from typing import Dict, Any

from models.learning_models import FeatureType, ModelConfig, ProviderName


# Change the model across all feature types in one place.
DEFAULT_PRIMARY_MODEL = os.getenv("DEFAULT_AI_MODEL", "x-ai/grok-code-fast-1")
DEFAULT_FALLBACK_MODEL = os.getenv("FALLBACK_AI_MODEL", "openai/gpt-4o-mini")

MODEL_CONFIG_TTL_SECONDS = int(os.getenv("MODEL_CONFIG_TTL_SECONDS", "300"))
MODEL_CONFIG_TABLE = "ai_model_configs"

# Per-feature defaults
DEFAULT_MODEL_CONFIGS: Dict[str, Dict[str, Any]] = {
    FeatureType.CONTENT_GENERATION.value: {
        "provider": ProviderName.OPENROUTER,
        "model": DEFAULT_PRIMARY_MODEL,
        "max_tokens": 2500,
        "fallback_model": DEFAULT_FALLBACK_MODEL,
        "temperature": 0.7
    },
    FeatureType.QUICK_INSIGHTS.value: {
        "provider": ProviderName.OPENROUTER,
        "model": DEFAULT_PRIMARY_MODEL,
        "max_tokens": 500,
        "fallback_model": DEFAULT_FALLBACK_MODEL,
        "temperature": 0.7
    },
    FeatureType.DEEP_ANALYSIS.value: {
        "provider": ProviderName.OPENROUTER,
        "model": DEFAULT_PRIMARY_MODEL,
        "max_tokens": 2000,
        "fallback_model": "openai/gpt-4o",
        "temperature": 0.7
    },
    FeatureType.STRUCTURED_EXTRACTION.value: {
        "provider": ProviderName.OPENROUTER,
        "model": DEFAULT_PRIMARY_MODEL,
        "max_tokens": 1000,
        "fallback_model": DEFAULT_FALLBACK_MODEL,
        "temperature": 0.2
    },
    FeatureType.RELATED_TOPICS.value: {
        "provider": ProviderName.OPENROUTER,
        "model": DEFAULT_PRIMARY_MODEL,
        "max_tokens": 800,
        "fallback_model": DEFAULT_FALLBACK_MODEL,
        "temperature": 0.7
    },
    FeatureType.CHAT_TUTOR.value: {
        "provider": ProviderName.OPENROUTER,
        "model": DEFAULT_PRIMARY_MODEL,
        "max_tokens": 1500,
        "fallback_model": DEFAULT_FALLBACK_MODEL,
        "temperature": 0.8
    },
    FeatureType.TOPIC_RECOMMENDATIONS.value: {
        "provider": ProviderName.OPENROUTER,
        "model": DEFAULT_PRIMARY_MODEL,
        "max_tokens": 1000,
        "fallback_model": DEFAULT_FALLBACK_MODEL,
        "temperature": 0.7
    },
}


def feature_key(feature_type) -> str:
    """Normalize a FeatureType or raw string to the table key"""
    if isinstance(feature_type, FeatureType):
        return feature_type.value
    return str(feature_type)


def build_default_configs() -> Dict[str, ModelConfig]:
    """Hardcoded table as ModelConfig objects"""
    return {key: ModelConfig(**cfg) for key, cfg in DEFAULT_MODEL_CONFIGS.items()}


def row_to_model_config(row: Dict[str, Any]) -> ModelConfig:
    """
    Map one row of the model-config table to a ModelConfig.
    Columns: function_type, provider, model, max_tokens, fallback_model, temperature
    """
    return ModelConfig(
        provider=row.get("provider") or ProviderName.OPENROUTER,
        model=row["model"],
        max_tokens=int(row["max_tokens"]),
        fallback_model=row["fallback_model"],
        temperature=row.get("temperature")
    )


def strip_provider_prefix(model: str) -> str:
    """'openai/gpt-4o-mini' -> 'gpt-4o-mini'; bare names pass through"""
    return model.split("/", 1)[1] if "/" in model else model
