import threading
import unittest

from models.learning_models import FeatureType, ModelConfig, ProviderName
from services.model_config_service import ModelConfigService
from utils.model_config import DEFAULT_MODEL_CONFIGS, build_default_configs, row_to_model_config, strip_provider_prefix


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def store_table(model="store/model"):
    return {
        key: ModelConfig(model=model, max_tokens=123, fallback_model="openai/gpt-4o-mini")
        for key in DEFAULT_MODEL_CONFIGS
    }


class CountingLoader:
    def __init__(self, result=None, error=None):
        self.calls = 0
        self.result = result
        self.error = error

    def __call__(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.result


class TestModelConfigService(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()

    def test_loads_from_store_and_caches(self):
        loader = CountingLoader(result=store_table())
        service = ModelConfigService(loader=loader, ttl_seconds=300, clock=self.clock)

        first = service.get_config(FeatureType.CONTENT_GENERATION)
        second = service.get_config("quick-insights")

        self.assertEqual(first.model, "store/model")
        self.assertEqual(second.max_tokens, 123)
        self.assertEqual(loader.calls, 1)
        self.assertTrue(service.is_cached)

    def test_cache_expires_after_ttl(self):
        loader = CountingLoader(result=store_table())
        service = ModelConfigService(loader=loader, ttl_seconds=300, clock=self.clock)

        service.get_config(FeatureType.CHAT_TUTOR)
        self.clock.now += 299
        service.get_config(FeatureType.CHAT_TUTOR)
        self.assertEqual(loader.calls, 1)

        self.clock.now += 2
        service.get_config(FeatureType.CHAT_TUTOR)
        self.assertEqual(loader.calls, 2)

    def test_store_failure_returns_defaults_without_caching(self):
        loader = CountingLoader(error=ConnectionError("network down"))
        service = ModelConfigService(loader=loader, clock=self.clock)

        config = service.get_config(FeatureType.STRUCTURED_EXTRACTION)

        self.assertEqual(config, build_default_configs()["structured-extraction"])
        self.assertFalse(service.is_cached)

        service.get_config(FeatureType.STRUCTURED_EXTRACTION)
        self.assertEqual(loader.calls, 2)

    def test_empty_store_result_falls_back_to_defaults(self):
        loader = CountingLoader(result={})
        service = ModelConfigService(loader=loader, clock=self.clock)

        config = service.get_config(FeatureType.RELATED_TOPICS)

        self.assertEqual(config.max_tokens, 800)
        self.assertFalse(service.is_cached)

    def test_feature_missing_from_store_uses_default(self):
        table = {"content-generation": ModelConfig(model="a/b", max_tokens=10, fallback_model="c/d")}
        service = ModelConfigService(loader=CountingLoader(result=table), clock=self.clock)

        config = service.get_config(FeatureType.DEEP_ANALYSIS)

        self.assertEqual(config.fallback_model, "openai/gpt-4o")

    def test_unknown_feature_raises(self):
        service = ModelConfigService(loader=CountingLoader(result=store_table()), clock=self.clock)
        with self.assertRaises(ValueError):
            service.get_config("not-a-feature")

    def test_invalidate_forces_reload(self):
        loader = CountingLoader(result=store_table())
        service = ModelConfigService(loader=loader, clock=self.clock)

        service.get_config(FeatureType.QUICK_INSIGHTS)
        service.invalidate()
        self.assertFalse(service.is_cached)
        service.get_config(FeatureType.QUICK_INSIGHTS)

        self.assertEqual(loader.calls, 2)

    def test_instances_do_not_share_cache(self):
        first = ModelConfigService(loader=CountingLoader(result=store_table("one/model")), clock=self.clock)
        second = ModelConfigService(loader=CountingLoader(result=store_table("two/model")), clock=self.clock)

        self.assertEqual(first.get_config(FeatureType.CHAT_TUTOR).model, "one/model")
        self.assertEqual(second.get_config(FeatureType.CHAT_TUTOR).model, "two/model")


class TestModelConfigDefaults(unittest.TestCase):
    def test_every_feature_has_a_default(self):
        defaults = build_default_configs()
        for feature in FeatureType:
            self.assertIn(feature.value, defaults)

    def test_default_token_budgets(self):
        defaults = build_default_configs()
        self.assertEqual(defaults["content-generation"].max_tokens, 2500)
        self.assertEqual(defaults["quick-insights"].max_tokens, 500)
        self.assertEqual(defaults["structured-extraction"].temperature, 0.2)

    def test_row_to_model_config(self):
        config = row_to_model_config({
            "function_type": "quick-insights",
            "provider": "openrouter",
            "model": "x-ai/grok",
            "max_tokens": "400",
            "fallback_model": "openai/gpt-4o-mini",
            "temperature": None,
        })
        self.assertEqual(config.provider, ProviderName.OPENROUTER)
        self.assertEqual(config.max_tokens, 400)
        self.assertIsNone(config.temperature)

    def test_strip_provider_prefix(self):
        self.assertEqual(strip_provider_prefix("openai/gpt-4o-mini"), "gpt-4o-mini")
        self.assertEqual(strip_provider_prefix("gpt-4o"), "gpt-4o")


class TestModelConfigServiceAsync(unittest.IsolatedAsyncioTestCase):
    async def test_store_read_runs_off_the_event_loop(self):
        loop_thread = threading.get_ident()
        loader_threads = []

        def loader():
            loader_threads.append(threading.get_ident())
            return store_table()

        service = ModelConfigService(loader=loader, ttl_seconds=300, clock=FakeClock())

        config = await service.get_config_async(FeatureType.CHAT_TUTOR)

        self.assertEqual(config.model, "store/model")
        self.assertEqual(len(loader_threads), 1)
        self.assertNotEqual(loader_threads[0], loop_thread)

    async def test_cached_config_skips_the_loader(self):
        loader = CountingLoader(result=store_table())
        service = ModelConfigService(loader=loader, ttl_seconds=300, clock=FakeClock())

        await service.get_config_async(FeatureType.CHAT_TUTOR)
        await service.get_config_async(FeatureType.QUICK_INSIGHTS)

        self.assertEqual(loader.calls, 1)

    async def test_store_failure_falls_back_to_defaults(self):
        loader = CountingLoader(error=RuntimeError("db down"))
        service = ModelConfigService(loader=loader, clock=FakeClock())

        config = await service.get_config_async(FeatureType.DEEP_ANALYSIS)

        self.assertEqual(config, build_default_configs()["deep-analysis"])


if __name__ == "__main__":
    unittest.main()
