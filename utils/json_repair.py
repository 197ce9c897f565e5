"""
Best-effort JSON repair for model output.
Providers sometimes wrap JSON in prose or markdown code fences.
"""

import json
import re
import logging
from typing import Optional

from utils.exceptions import InvalidJSONResponseError

logger = logging.getLogger(__name__)

# First '{' to last '}' or first '[' to last ']'
JSON_BLOCK_PATTERN = re.compile(r"\{[\s\S]*\}|\[[\s\S]*\]")


def try_repair_json(text: Optional[str]) -> Optional[str]:
    """
    Return a string that parses as JSON, or None.

    Valid input is returned trimmed and otherwise unchanged. Input that does
    not start with '{' or '[' gets the first bracketed span extracted.
    """
    if not text or not text.strip():
        return None

    sanitized = text.strip()

    if not sanitized.startswith("{") and not sanitized.startswith("["):
        match = JSON_BLOCK_PATTERN.search(sanitized)
        if match:
            sanitized = match.group(0)
            logger.debug("Extracted JSON block from wrapped response")

    try:
        json.loads(sanitized)
    except (json.JSONDecodeError, ValueError):
        return None
    return sanitized


def validate_and_sanitize_json(content: Optional[str], provider: str = "unknown") -> str:
    """Raise InvalidJSONResponseError unless the content can be repaired"""
    if not content or not content.strip():
        raise InvalidJSONResponseError("Empty content received", provider=provider)

    repaired = try_repair_json(content)
    if repaired is None:
        logger.error(f"JSON validation failed. Problematic content: {content.strip()[:500]}")
        raise InvalidJSONResponseError(
            "Invalid JSON response",
            provider=provider,
            context={"preview": content.strip()[:200]},
        )
    return repaired
