"""
OpenRouter chat-completions client (primary provider).
OpenRouter is OpenAI-compatible over plain HTTP; model ids carry a vendor
prefix such as "openai/gpt-4o-mini".
"""

import os
import logging
from typing import Any, Dict, Optional

import httpx
from dotenv import load_dotenv

from models.learning_models import ChatResult, ProviderName, ProviderRequest, ResponseFormat
from utils.exceptions import ProviderError

load_dotenv()

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
SITE_URL = os.getenv("SITE_URL", "https://learnflow.app")
SITE_NAME = os.getenv("SITE_NAME", "LearnFlow")
DEFAULT_TIMEOUT_SECONDS = float(os.getenv("AI_REQUEST_TIMEOUT_SECONDS", "60"))


class OpenRouterProvider:
    name = ProviderName.OPENROUTER

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("OPENROUTER_API_KEY", "")
        self.timeout = httpx.Timeout(connect=10.0, read=timeout_seconds, write=30.0, pool=10.0)
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": SITE_URL,
            "X-Title": SITE_NAME,
            "Content-Type": "application/json",
        }

    def _payload(self, request: ProviderRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.model,
            "messages": [m.model_dump() for m in request.messages],
            "max_tokens": request.max_tokens,
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.response_format == ResponseFormat.JSON:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def send(self, request: ProviderRequest) -> ChatResult:
        if not self.api_key:
            raise ProviderError(self.name.value, "OPENROUTER_API_KEY not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(OPENROUTER_URL, headers=self._headers(), json=self._payload(request))
        except httpx.TimeoutException as e:
            raise ProviderError(self.name.value, f"OpenRouter API request timed out: {e}")
        except httpx.HTTPError as e:
            raise ProviderError(self.name.value, f"OpenRouter request failed: {e}")

        if resp.status_code >= 400:
            raise ProviderError(
                self.name.value,
                f"OpenRouter API error ({resp.status_code}): {resp.text[:500]}",
                context={"status": resp.status_code},
            )

        try:
            data = resp.json()
        except ValueError:
            raise ProviderError(self.name.value, "OpenRouter returned a non-JSON body")

        choices = data.get("choices") if isinstance(data, dict) else None
        message = (choices[0] or {}).get("message") if choices else None
        if not message or message.get("content") is None:
            raise ProviderError(self.name.value, "Invalid response structure from OpenRouter")

        usage = data.get("usage") or {}
        return ChatResult(
            content=message["content"],
            model=data.get("model") or request.model,
            provider=self.name,
            tokens_used=usage.get("total_tokens"),
        )
