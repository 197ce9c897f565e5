"""
Unified exception hierarchy for LearnFlow.

All domain exceptions inherit from LearnFlowError and carry:
- error_code: machine-readable string (e.g. "MISSING_PARAMETER")
- status_code: HTTP status code
- message: human-readable description
- context: optional structured metadata dict
"""

from typing import Optional, Dict, Any


class LearnFlowError(Exception):
    """Base exception for all LearnFlow domain errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class ValidationError(LearnFlowError):
    """400-level validation / bad-request errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "MISSING_PARAMETER",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=400, context=context)


class NotFoundError(LearnFlowError):
    """404 resource-not-found errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "STEP_NOT_FOUND",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=404, context=context)


class GenerationError(LearnFlowError):
    """500-level generation failures."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERATION_FAILED",
        context: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(message, error_code=error_code, status_code=status_code, context=context)


class ProviderError(GenerationError):
    """A single provider call failed (network, timeout, bad status, malformed body)."""

    def __init__(self, provider: str, message: str, context: Optional[Dict[str, Any]] = None):
        self.provider = provider
        ctx = {"provider": provider}
        if context:
            ctx.update(context)
        super().__init__(message, error_code="PROVIDER_FAILED", context=ctx, status_code=502)


class InvalidJSONResponseError(ProviderError):
    """Provider answered, but the content could not be repaired into valid JSON."""

    def __init__(self, message: str, provider: str = "unknown", context: Optional[Dict[str, Any]] = None):
        super().__init__(provider, message, context=context)
        self.error_code = "INVALID_JSON_RESPONSE"


class AllProvidersFailedError(GenerationError):
    """Every tier of the fallback chain failed."""

    def __init__(self, last_error: str, context: Optional[Dict[str, Any]] = None):
        self.last_error = last_error
        super().__init__(
            f"All AI providers failed. Last error: {last_error}",
            error_code="ALL_PROVIDERS_FAILED",
            context=context,
            status_code=503,
        )


class StorageError(LearnFlowError):
    """500-level database / storage failures."""

    def __init__(
        self,
        message: str,
        error_code: str = "STORAGE_ERROR",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)
