"""
Chat invocation client with a three-tier provider fallback chain.

Tier order per call:
    1. primary provider (OpenRouter) with config.model
    2. primary provider with config.fallback_model
    3. secondary provider (OpenAI direct) with the fallback model, vendor prefix stripped

Attempts are strictly sequential; the first success wins.
"""

import os
import asyncio
import logging
from typing import List, Optional, Protocol, Tuple

from models.learning_models import (
    ChatMessage,
    ChatRequest,
    ChatResult,
    ModelConfig,
    ProviderRequest,
    ResponseFormat,
)
from services.model_config_service import ModelConfigService
from utils.exceptions import AllProvidersFailedError
from utils.json_repair import validate_and_sanitize_json
from utils.model_config import strip_provider_prefix

logger = logging.getLogger(__name__)

AI_REQUEST_TIMEOUT_SECONDS = float(os.getenv("AI_REQUEST_TIMEOUT_SECONDS", "60"))

JSON_SYSTEM_INSTRUCTION = (
    "\n\nYOU MUST RESPOND WITH VALID JSON IN THE EXACT FORMAT SPECIFIED. "
    "Do not include markdown formatting, code blocks, or any text outside the JSON object. "
    "The response must be parseable by JSON.parse()."
)
JSON_USER_INSTRUCTION = (
    "\n\nIMPORTANT: Respond with ONLY a valid JSON object. "
    "No explanations, no markdown, just pure JSON."
)


class ModelProvider(Protocol):
    """Anything that can serve one chat completion attempt"""
    name: object

    async def send(self, request: ProviderRequest) -> ChatResult: ...


def with_json_instructions(messages: List[ChatMessage]) -> List[ChatMessage]:
    """
    Copy of messages with the JSON instruction appended to the first message
    (if system) and the last message (if user). Input is not mutated.
    """
    out = [m.model_copy() for m in messages]
    if out and out[0].role == "system":
        out[0] = ChatMessage(role="system", content=out[0].content + JSON_SYSTEM_INSTRUCTION)
    if out and out[-1].role == "user":
        out[-1] = ChatMessage(role="user", content=out[-1].content + JSON_USER_INSTRUCTION)
    return out


class AIClient:
    def __init__(
        self,
        config_service: ModelConfigService,
        primary: ModelProvider,
        secondary: ModelProvider,
        timeout_seconds: float = AI_REQUEST_TIMEOUT_SECONDS,
    ):
        self.config_service = config_service
        self.primary = primary
        self.secondary = secondary
        self.timeout_seconds = timeout_seconds

    def build_chain(self, config: ModelConfig) -> List[Tuple[ModelProvider, str]]:
        return [
            (self.primary, config.model),
            (self.primary, config.fallback_model),
            (self.secondary, strip_provider_prefix(config.fallback_model)),
        ]

    async def chat(self, request: ChatRequest) -> ChatResult:
        """
        Run the request through the fallback chain.
        Returns:
            ChatResult naming the model and provider that actually answered.
        Raises:
            AllProvidersFailedError when every tier failed.
        """
        config = await self.config_service.get_config_async(request.feature_type)
        json_mode = request.response_format == ResponseFormat.JSON

        messages = with_json_instructions(request.messages) if json_mode else list(request.messages)
        max_tokens = request.max_tokens if request.max_tokens is not None else config.max_tokens
        temperature = request.temperature if request.temperature is not None else config.temperature

        chain = self.build_chain(config)
        last_error: Optional[Exception] = None

        for attempt, (provider, model) in enumerate(chain, start=1):
            provider_name = getattr(provider.name, "value", provider.name)
            provider_request = ProviderRequest(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                response_format=request.response_format,
            )
            try:
                result = await asyncio.wait_for(provider.send(provider_request), timeout=self.timeout_seconds)
                if json_mode:
                    content = validate_and_sanitize_json(result.content, provider=str(provider_name))
                    result = result.model_copy(update={"content": content})
            except asyncio.TimeoutError:
                last_error = TimeoutError(f"{provider_name} request timed out after {self.timeout_seconds}s")
                logger.warning(
                    f"AI attempt {attempt}/{len(chain)} failed: feature={request.feature_type.value} "
                    f"provider={provider_name} model={model} error=timeout"
                )
                continue
            except Exception as e:
                last_error = e
                logger.warning(
                    f"AI attempt {attempt}/{len(chain)} failed: feature={request.feature_type.value} "
                    f"provider={provider_name} model={model} error={e}"
                )
                continue

            logger.info(
                f"AI attempt {attempt}/{len(chain)} succeeded: feature={request.feature_type.value} "
                f"provider={provider_name} model={result.model} tokens={result.tokens_used}"
            )
            return result.model_copy(update={"attempt": attempt})

        raise AllProvidersFailedError(
            str(last_error),
            context={"feature_type": request.feature_type.value, "attempts": len(chain)},
        ) from last_error
