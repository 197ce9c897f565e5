# LearnFlow utilities
from .model_config import (
    DEFAULT_MODEL_CONFIGS,
    DEFAULT_PRIMARY_MODEL,
    DEFAULT_FALLBACK_MODEL,
    build_default_configs,
    strip_provider_prefix
)

from .json_repair import try_repair_json, validate_and_sanitize_json
from .slide_formatter import split_into_slides
from .content_utils import clean_meta_commentary, match_notes_to_paragraphs

__all__ = [
    'DEFAULT_MODEL_CONFIGS',
    'DEFAULT_PRIMARY_MODEL',
    'DEFAULT_FALLBACK_MODEL',
    'build_default_configs',
    'strip_provider_prefix',
    'try_repair_json',
    'validate_and_sanitize_json',
    'split_into_slides',
    'clean_meta_commentary',
    'match_notes_to_paragraphs'
]
