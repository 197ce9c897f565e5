import os
import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from openai import AsyncOpenAI

from models.learning_models import ChatResult, ProviderName, ProviderRequest, ResponseFormat
from utils.exceptions import ProviderError

load_dotenv()

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """
    Direct OpenAI chat completions, used as the last-resort provider.
    Expects bare model names ("gpt-4o-mini"), not OpenRouter ids.
    """
    name = ProviderName.OPENAI

    def __init__(self, api_key: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        self.api_key = api_key if api_key is not None else os.getenv("OPENAI_API_KEY", "")
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def send(self, request: ProviderRequest) -> ChatResult:
        if not self.api_key and self._client is None:
            raise ProviderError(self.name.value, "OPENAI_API_KEY not configured")

        params: Dict[str, Any] = {
            "model": request.model,
            "messages": [m.model_dump() for m in request.messages],
            "max_tokens": request.max_tokens,
        }
        if request.temperature is not None:
            params["temperature"] = request.temperature
        if request.response_format == ResponseFormat.JSON:
            params["response_format"] = {"type": "json_object"}

        try:
            completion = await self._get_client().chat.completions.create(**params)
        except Exception as e:
            raise ProviderError(self.name.value, f"OpenAI request failed: {e}")

        if not completion.choices or completion.choices[0].message.content is None:
            raise ProviderError(self.name.value, "No content in OpenAI response")

        usage = getattr(completion, "usage", None)
        return ChatResult(
            content=completion.choices[0].message.content,
            model=completion.model or request.model,
            provider=self.name,
            tokens_used=usage.total_tokens if usage else None,
        )
