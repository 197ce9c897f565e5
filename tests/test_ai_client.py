import asyncio
import unittest

from models.learning_models import (
    ChatMessage,
    ChatRequest,
    ChatResult,
    FeatureType,
    ModelConfig,
    ProviderName,
    ResponseFormat,
)
from services.ai_client import AIClient, JSON_SYSTEM_INSTRUCTION, JSON_USER_INSTRUCTION, with_json_instructions
from services.model_config_service import ModelConfigService
from utils.exceptions import AllProvidersFailedError, ProviderError

CONFIG = ModelConfig(
    model="x-ai/grok-code-fast-1",
    max_tokens=500,
    fallback_model="openai/gpt-4o-mini",
    temperature=0.7,
)


class FakeProvider:
    """
    Answers from a per-model script; records every request.
    Providers sharing a calls list log (provider, model) in global order.
    """

    def __init__(self, name, script=None, delay=0.0, calls=None):
        self.name = name
        self.script = script or {}
        self.delay = delay
        self.requests = []
        self.calls = calls if calls is not None else []

    async def send(self, request):
        self.requests.append(request)
        self.calls.append((self.name, request.model))
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.script.get(request.model, ProviderError(self.name.value, f"{request.model} unavailable"))
        if isinstance(outcome, Exception):
            raise outcome
        return ChatResult(content=outcome, model=request.model, provider=self.name)


def make_client(primary, secondary, timeout_seconds=60):
    config_service = ModelConfigService(loader=lambda: {}, defaults={f.value: CONFIG for f in FeatureType})
    return AIClient(config_service, primary=primary, secondary=secondary, timeout_seconds=timeout_seconds)


def text_request(**overrides):
    fields = dict(
        feature_type=FeatureType.QUICK_INSIGHTS,
        messages=[ChatMessage(role="system", content="sys"), ChatMessage(role="user", content="hi")],
    )
    fields.update(overrides)
    return ChatRequest(**fields)


class TestAIClientFallbackChain(unittest.IsolatedAsyncioTestCase):
    async def test_primary_success_short_circuits(self):
        primary = FakeProvider(ProviderName.OPENROUTER, {"x-ai/grok-code-fast-1": "hello"})
        secondary = FakeProvider(ProviderName.OPENAI, {"gpt-4o-mini": "unused"})

        result = await make_client(primary, secondary).chat(text_request())

        self.assertEqual(result.content, "hello")
        self.assertEqual(result.model, "x-ai/grok-code-fast-1")
        self.assertEqual(result.provider, ProviderName.OPENROUTER)
        self.assertEqual(result.attempt, 1)
        self.assertEqual(len(primary.requests), 1)
        self.assertEqual(secondary.requests, [])

    async def test_falls_back_to_secondary_with_stripped_model(self):
        primary = FakeProvider(ProviderName.OPENROUTER)
        secondary = FakeProvider(ProviderName.OPENAI, {"gpt-4o-mini": "from openai"})

        result = await make_client(primary, secondary).chat(text_request())

        self.assertEqual([r.model for r in primary.requests], ["x-ai/grok-code-fast-1", "openai/gpt-4o-mini"])
        self.assertEqual([r.model for r in secondary.requests], ["gpt-4o-mini"])
        self.assertEqual(result.content, "from openai")
        self.assertEqual(result.provider, ProviderName.OPENAI)
        self.assertEqual(result.model, "gpt-4o-mini")
        self.assertEqual(result.attempt, 3)

    async def test_attempts_run_in_tier_order_across_providers(self):
        calls = []
        primary = FakeProvider(ProviderName.OPENROUTER, calls=calls)
        secondary = FakeProvider(ProviderName.OPENAI, {"gpt-4o-mini": "from openai"}, calls=calls)

        await make_client(primary, secondary).chat(text_request())

        self.assertEqual(calls, [
            (ProviderName.OPENROUTER, "x-ai/grok-code-fast-1"),
            (ProviderName.OPENROUTER, "openai/gpt-4o-mini"),
            (ProviderName.OPENAI, "gpt-4o-mini"),
        ])

    async def test_second_tier_uses_fallback_model_on_primary(self):
        primary = FakeProvider(ProviderName.OPENROUTER, {"openai/gpt-4o-mini": "tier two"})
        secondary = FakeProvider(ProviderName.OPENAI)

        result = await make_client(primary, secondary).chat(text_request())

        self.assertEqual(result.model, "openai/gpt-4o-mini")
        self.assertEqual(result.attempt, 2)
        self.assertEqual(secondary.requests, [])

    async def test_all_tiers_failing_raises_with_last_error(self):
        primary = FakeProvider(ProviderName.OPENROUTER)
        secondary = FakeProvider(ProviderName.OPENAI, {"gpt-4o-mini": ProviderError("openai", "quota exceeded")})

        with self.assertRaises(AllProvidersFailedError) as ctx:
            await make_client(primary, secondary).chat(text_request())

        self.assertIn("quota exceeded", ctx.exception.last_error)
        self.assertIsInstance(ctx.exception.__cause__, ProviderError)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(len(primary.requests) + len(secondary.requests), 3)

    async def test_timeout_counts_as_attempt_failure(self):
        primary = FakeProvider(ProviderName.OPENROUTER, {"x-ai/grok-code-fast-1": "slow"}, delay=0.2)
        secondary = FakeProvider(ProviderName.OPENAI, {"gpt-4o-mini": "fast"})

        result = await make_client(primary, secondary, timeout_seconds=0.05).chat(text_request())

        self.assertEqual(result.content, "fast")
        self.assertEqual(len(primary.requests), 2)

    async def test_request_overrides_config_budget(self):
        primary = FakeProvider(ProviderName.OPENROUTER, {"x-ai/grok-code-fast-1": "ok"})
        client = make_client(primary, FakeProvider(ProviderName.OPENAI))

        await client.chat(text_request(max_tokens=42, temperature=0.1))
        await client.chat(text_request())

        self.assertEqual(primary.requests[0].max_tokens, 42)
        self.assertEqual(primary.requests[0].temperature, 0.1)
        self.assertEqual(primary.requests[1].max_tokens, 500)
        self.assertEqual(primary.requests[1].temperature, 0.7)


class TestAIClientJsonMode(unittest.IsolatedAsyncioTestCase):
    async def test_json_instructions_and_sanitized_content(self):
        primary = FakeProvider(ProviderName.OPENROUTER, {"x-ai/grok-code-fast-1": 'Sure! {"a": 1}'})
        client = make_client(primary, FakeProvider(ProviderName.OPENAI))

        result = await client.chat(text_request(response_format=ResponseFormat.JSON))

        sent = primary.requests[0]
        self.assertEqual(sent.response_format, ResponseFormat.JSON)
        self.assertTrue(sent.messages[0].content.endswith(JSON_SYSTEM_INSTRUCTION))
        self.assertTrue(sent.messages[-1].content.endswith(JSON_USER_INSTRUCTION))
        self.assertEqual(result.content, '{"a": 1}')

    async def test_invalid_json_advances_to_next_tier(self):
        primary = FakeProvider(ProviderName.OPENROUTER, {
            "x-ai/grok-code-fast-1": "not json",
            "openai/gpt-4o-mini": '{"b": 2}',
        })
        client = make_client(primary, FakeProvider(ProviderName.OPENAI))

        result = await client.chat(text_request(response_format=ResponseFormat.JSON))

        self.assertEqual(result.content, '{"b": 2}')
        self.assertEqual(result.attempt, 2)

    async def test_text_mode_leaves_messages_untouched(self):
        primary = FakeProvider(ProviderName.OPENROUTER, {"x-ai/grok-code-fast-1": "plain"})
        await make_client(primary, FakeProvider(ProviderName.OPENAI)).chat(text_request())

        self.assertEqual(primary.requests[0].messages[0].content, "sys")
        self.assertEqual(primary.requests[0].messages[1].content, "hi")


class TestWithJsonInstructions(unittest.TestCase):
    def test_only_user_message(self):
        messages = [ChatMessage(role="user", content="prompt")]
        out = with_json_instructions(messages)

        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].content, "prompt" + JSON_USER_INSTRUCTION)
        self.assertEqual(messages[0].content, "prompt")

    def test_last_message_not_user_is_unchanged(self):
        messages = [
            ChatMessage(role="system", content="s"),
            ChatMessage(role="assistant", content="a"),
        ]
        out = with_json_instructions(messages)

        self.assertEqual(out[0].content, "s" + JSON_SYSTEM_INSTRUCTION)
        self.assertEqual(out[1].content, "a")


if __name__ == "__main__":
    unittest.main()
