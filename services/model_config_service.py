"""
Per-feature model configuration with a time-boxed in-process cache.

The whole table is read from the store on a cache miss and replaced
wholesale. A failed or empty read falls back to the hardcoded defaults
without populating the cache, so the next call retries the store.
"""

import time
import asyncio
import logging
from typing import Callable, Dict, Optional, Union

from models.learning_models import FeatureType, ModelConfig
from utils.model_config import (
    MODEL_CONFIG_TTL_SECONDS,
    build_default_configs,
    feature_key,
)

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], Dict[str, ModelConfig]]


def _load_from_supabase() -> Dict[str, ModelConfig]:
    from clients.supabase_client import fetch_model_configs
    return fetch_model_configs()


class ModelConfigService:
    """Resolves ModelConfig per feature type"""

    def __init__(
        self,
        loader: Optional[ConfigLoader] = None,
        ttl_seconds: float = MODEL_CONFIG_TTL_SECONDS,
        defaults: Optional[Dict[str, ModelConfig]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader or _load_from_supabase
        self._ttl_seconds = ttl_seconds
        self._defaults = defaults if defaults is not None else build_default_configs()
        self._clock = clock
        self._cache: Optional[Dict[str, ModelConfig]] = None
        self._expires_at: float = 0.0

    @property
    def is_cached(self) -> bool:
        return self._cache is not None and self._clock() < self._expires_at

    def get_config(self, feature_type: Union[FeatureType, str]) -> ModelConfig:
        key = feature_key(feature_type)

        if self.is_cached:
            return self._lookup(self._cache, key)

        try:
            table = self.load()
        except Exception as e:
            logger.warning(f"Model config store unavailable, using code defaults for {key}: {e}")
            return self._lookup(self._defaults, key)

        return self._lookup(table, key)

    async def get_config_async(self, feature_type: Union[FeatureType, str]) -> ModelConfig:
        """
        Same as get_config. A cache miss runs the store read in a worker thread.
        """
        if self.is_cached:
            return self._lookup(self._cache, feature_key(feature_type))
        return await asyncio.to_thread(self.get_config, feature_type)

    def load(self) -> Dict[str, ModelConfig]:
        """Read the full table and replace the cache. Raises on failure or empty result."""
        table = self._loader()
        if not table:
            raise ValueError("Model config store returned no rows")

        self._cache = dict(table)
        self._expires_at = self._clock() + self._ttl_seconds
        logger.info(f"Loaded {len(table)} model configs from store (ttl={self._ttl_seconds}s)")
        return self._cache

    def invalidate(self) -> None:
        self._cache = None
        self._expires_at = 0.0

    def _lookup(self, table: Dict[str, ModelConfig], key: str) -> ModelConfig:
        if key in table:
            return table[key]
        # Store may lag behind newly added feature types
        if key in self._defaults:
            logger.warning(f"Feature {key} missing from store table, using code default")
            return self._defaults[key]
        raise ValueError(f"Unknown feature type: {key}. Available: {sorted(self._defaults.keys())}")
