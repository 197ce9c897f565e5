import json
import unittest

from utils.exceptions import InvalidJSONResponseError
from utils.json_repair import try_repair_json, validate_and_sanitize_json


class TestTryRepairJson(unittest.TestCase):
    def test_valid_json_is_returned_trimmed(self):
        self.assertEqual(try_repair_json('  {"a": 1}\n'), '{"a": 1}')

    def test_extracts_object_from_prose(self):
        repaired = try_repair_json('Here you go: {"a": 1} hope this helps')
        self.assertEqual(json.loads(repaired), {"a": 1})

    def test_extracts_object_from_markdown_fence(self):
        text = '```json\n{"steps": [{"title": "x", "description": "y"}]}\n```'
        repaired = try_repair_json(text)
        self.assertEqual(json.loads(repaired)["steps"][0]["title"], "x")

    def test_extracts_array(self):
        repaired = try_repair_json('Result:\n["one", "two"]')
        self.assertEqual(json.loads(repaired), ["one", "two"])

    def test_unparseable_returns_none(self):
        self.assertIsNone(try_repair_json("no json here at all"))
        self.assertIsNone(try_repair_json('{"a": 1,'))

    def test_empty_returns_none(self):
        self.assertIsNone(try_repair_json(""))
        self.assertIsNone(try_repair_json("   "))
        self.assertIsNone(try_repair_json(None))


class TestValidateAndSanitizeJson(unittest.TestCase):
    def test_returns_sanitized_content(self):
        self.assertEqual(validate_and_sanitize_json('text {"ok": true}'), '{"ok": true}')

    def test_empty_content_raises(self):
        with self.assertRaises(InvalidJSONResponseError) as ctx:
            validate_and_sanitize_json("", provider="openrouter")
        self.assertEqual(ctx.exception.provider, "openrouter")
        self.assertEqual(ctx.exception.error_code, "INVALID_JSON_RESPONSE")

    def test_invalid_content_raises_with_preview(self):
        with self.assertRaises(InvalidJSONResponseError) as ctx:
            validate_and_sanitize_json("definitely not json")
        self.assertIn("preview", ctx.exception.context)


if __name__ == "__main__":
    unittest.main()
