import unittest

from buzz.llm import SYSTEM_PROMPT, LLMResponseError, get_system_prompt, parse_llm_response

FULL_RESPONSE = """Here is the post:
```json
{
  "post_text": "【速報】ビットコインが$100K突破\\n\\nフォローで続報を",
  "template_type": "URG_BREAKING",
  "emotion_triggers": ["urgency", "fomo"],
  "trend_score": 82,
  "risk_flags": {"hype_level": "high", "info_certainty": "low", "notes": "未確認情報"}
}
```"""


class ParseLLMResponseTests(unittest.TestCase):
    def test_extracts_json_from_surrounding_text(self):
        draft = parse_llm_response(FULL_RESPONSE)
        self.assertEqual(draft.post_text, "【速報】ビットコインが$100K突破\n\nフォローで続報を")
        self.assertEqual(draft.template_type, "URG_BREAKING")
        self.assertEqual(draft.emotion_triggers, ["urgency", "fomo"])
        self.assertEqual(draft.trend_score, 82)
        self.assertEqual(draft.risk_flags.hype_level, "high")
        self.assertEqual(draft.risk_flags.info_certainty, "low")
        self.assertEqual(draft.risk_flags.notes, "未確認情報")

    def test_defaults_for_missing_fields(self):
        draft = parse_llm_response('{"post_text": "本文"}')
        self.assertEqual(draft.template_type, "unknown")
        self.assertEqual(draft.emotion_triggers, [])
        self.assertEqual(draft.trend_score, 50)
        self.assertEqual(draft.risk_flags.hype_level, "medium")
        self.assertEqual(draft.risk_flags.info_certainty, "medium")
        self.assertEqual(draft.risk_flags.notes, "")

    def test_wrong_types_fall_back(self):
        draft = parse_llm_response('{"post_text": "本文", "emotion_triggers": "fomo", "trend_score": true}')
        self.assertEqual(draft.emotion_triggers, [])
        self.assertEqual(draft.trend_score, 50)

    def test_rejects_unusable_responses(self):
        for response in ("no json here", "{not valid json}", '{"template_type": "x"}', '{"post_text": 5}', ""):
            with self.assertRaises(LLMResponseError):
                parse_llm_response(response)

    def test_error_carries_snippet(self):
        response = "x" * 300
        with self.assertRaises(LLMResponseError) as ctx:
            parse_llm_response(response)
        self.assertEqual(ctx.exception.snippet, "x" * 100)
        self.assertIsInstance(ctx.exception, ValueError)

    def test_system_prompt(self):
        self.assertIs(get_system_prompt(), SYSTEM_PROMPT)
        self.assertIn("感情70% / 情報30%", SYSTEM_PROMPT)
        self.assertIn('"post_text"', SYSTEM_PROMPT)

    def test_exported_from_package(self):
        import buzz

        self.assertIs(buzz.parse_llm_response, parse_llm_response)
        self.assertIs(buzz.get_system_prompt(), SYSTEM_PROMPT)
        self.assertIn("LLMResponseError", buzz.__all__)


if __name__ == "__main__":
    unittest.main()
