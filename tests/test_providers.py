import json
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx

from clients.openai_client import OpenAIProvider
from clients.openrouter_client import OPENROUTER_URL, OpenRouterProvider
from models.learning_models import ChatMessage, ProviderName, ProviderRequest, ResponseFormat
from utils.exceptions import ProviderError


def provider_request(response_format=ResponseFormat.TEXT):
    return ProviderRequest(
        model="x-ai/grok-code-fast-1",
        messages=[ChatMessage(role="user", content="hello")],
        max_tokens=100,
        temperature=0.5,
        response_format=response_format,
    )


class TestOpenRouterProvider(unittest.IsolatedAsyncioTestCase):
    async def test_successful_completion(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "model": "x-ai/grok-code-fast-1",
                "choices": [{"message": {"content": "hi there"}}],
                "usage": {"total_tokens": 17},
            })

        provider = OpenRouterProvider(api_key="test-key", transport=httpx.MockTransport(handler))
        result = await provider.send(provider_request(ResponseFormat.JSON))

        self.assertEqual(result.content, "hi there")
        self.assertEqual(result.provider, ProviderName.OPENROUTER)
        self.assertEqual(result.tokens_used, 17)
        self.assertEqual(seen["url"], OPENROUTER_URL)
        self.assertEqual(seen["headers"]["authorization"], "Bearer test-key")
        self.assertIn("http-referer", seen["headers"])
        self.assertIn("x-title", seen["headers"])
        self.assertEqual(seen["body"]["response_format"], {"type": "json_object"})
        self.assertEqual(seen["body"]["max_tokens"], 100)

    async def test_model_defaults_to_requested_model(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "x"}}]})
        )
        result = await OpenRouterProvider(api_key="k", transport=transport).send(provider_request())

        self.assertEqual(result.model, "x-ai/grok-code-fast-1")
        self.assertIsNone(result.tokens_used)

    async def test_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(429, text="rate limited"))
        with self.assertRaises(ProviderError) as ctx:
            await OpenRouterProvider(api_key="k", transport=transport).send(provider_request())
        self.assertIn("429", ctx.exception.message)

    async def test_null_content_raises(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": {"content": None}}]})
        )
        with self.assertRaises(ProviderError):
            await OpenRouterProvider(api_key="k", transport=transport).send(provider_request())

    async def test_missing_choices_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []}))
        with self.assertRaises(ProviderError):
            await OpenRouterProvider(api_key="k", transport=transport).send(provider_request())

    async def test_missing_api_key_raises(self):
        with self.assertRaises(ProviderError):
            await OpenRouterProvider(api_key="").send(provider_request())


class TestOpenAIProvider(unittest.IsolatedAsyncioTestCase):
    def make_client(self, content="answer", model="gpt-4o-mini"):
        completion = SimpleNamespace(
            model=model,
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(total_tokens=9),
        )
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=completion)
        return client

    async def test_successful_completion(self):
        client = self.make_client()
        provider = OpenAIProvider(api_key="k", client=client)

        result = await provider.send(provider_request(ResponseFormat.JSON))

        self.assertEqual(result.content, "answer")
        self.assertEqual(result.provider, ProviderName.OPENAI)
        self.assertEqual(result.model, "gpt-4o-mini")
        self.assertEqual(result.tokens_used, 9)
        kwargs = client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["response_format"], {"type": "json_object"})
        self.assertEqual(kwargs["messages"], [{"role": "user", "content": "hello"}])

    async def test_null_content_raises(self):
        provider = OpenAIProvider(api_key="k", client=self.make_client(content=None))
        with self.assertRaises(ProviderError):
            await provider.send(provider_request())

    async def test_sdk_error_becomes_provider_error(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("boom"))
        with self.assertRaises(ProviderError) as ctx:
            await OpenAIProvider(api_key="k", client=client).send(provider_request())
        self.assertEqual(ctx.exception.provider, "openai")

    async def test_missing_api_key_raises(self):
        with self.assertRaises(ProviderError):
            await OpenAIProvider(api_key="").send(provider_request())


if __name__ == "__main__":
    unittest.main()
