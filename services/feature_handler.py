"""
Shared request flow for AI-backed features.

validate -> prepare -> build messages -> chat -> parse -> FeatureResult,
with a same-shaped hardcoded fallback whenever generation or parsing fails.
Missing inputs raise ValidationError before any model call.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from models.learning_models import (
    ChatMessage,
    ChatRequest,
    FeatureResult,
    FeatureType,
    ResponseFormat,
)
from services.ai_client import AIClient
from utils.exceptions import GenerationError, ValidationError

logger = logging.getLogger(__name__)

# Failures that mean "use the fallback" rather than "the request was bad"
RECOVERABLE_ERRORS = (GenerationError, ValueError, KeyError, TypeError)


class FeatureHandler:
    name: str = "feature"
    feature_type: FeatureType = FeatureType.QUICK_INSIGHTS
    response_format: ResponseFormat = ResponseFormat.TEXT
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    required_fields: List[str] = []

    def __init__(self, ai_client: AIClient):
        self.ai_client = ai_client

    async def run(self, request: BaseModel) -> FeatureResult:
        self.validate(request)
        context = self.prepare(request)
        return await self.generate(request, context)

    def validate(self, request: BaseModel) -> None:
        for field in self.required_fields:
            value = getattr(request, field, None)
            if value is None or (isinstance(value, str) and not value.strip()) or (
                isinstance(value, list) and not value
            ):
                raise ValidationError(
                    f"Missing required {field} parameter",
                    context={"feature": self.name, "field": field},
                )

    def prepare(self, request: BaseModel) -> Dict[str, Any]:
        """Load anything the prompt and fallback need. Default: nothing."""
        return {}

    def build_messages(self, request: BaseModel, context: Dict[str, Any]) -> List[ChatMessage]:
        raise NotImplementedError

    def parse(self, content: str, request: BaseModel, context: Dict[str, Any]) -> Any:
        """Turn model output into the domain shape. Raise ValueError on wrong shape."""
        return content

    def fallback(self, request: BaseModel, context: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def chat_options(self, request: BaseModel) -> Dict[str, Any]:
        """Per-call max_tokens and temperature; None defers to the model config"""
        return {"max_tokens": self.max_tokens, "temperature": self.temperature}

    async def generate(self, request: BaseModel, context: Dict[str, Any]) -> FeatureResult:
        chat_request = ChatRequest(
            feature_type=self.feature_type,
            messages=self.build_messages(request, context),
            response_format=self.response_format,
            **self.chat_options(request),
        )

        try:
            result = await self.ai_client.chat(chat_request)
            data = self.parse(result.content, request, context)
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"{self.name}: generation failed, using fallback: {e}")
            return FeatureResult(
                data=self.fallback(request, context),
                used_fallback=True,
                error=str(e),
            )

        return FeatureResult(data=data, model=result.model, provider=result.provider)


def load_json(content: str) -> Any:
    """Parse already-sanitized JSON model output"""
    return json.loads(content)


def json_list(content: str, *keys: str) -> list:
    """
    Accept either a bare JSON array or an object holding the array under
    one of the given keys.
    """
    data = load_json(content)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                return data[key]
    raise ValueError(f"Expected a JSON array under one of {list(keys)}")
