"""Tests for core.providers.guards -- JSON output enforcement."""

import pytest

from core.providers.base import LLMEmptyResponseError, LLMJSONError
from core.providers.guards import JSONOutputGuard


class TestEnforce:
    def test_plain_object(self):
        assert JSONOutputGuard.enforce('{"a": 1}') == {"a": 1}

    def test_top_level_array_accepted(self):
        assert JSONOutputGuard.enforce('["p", "a"]') == ["p", "a"]

    def test_code_fence_stripped(self):
        raw = '```json\n{"translation": "pa"}\n```'
        assert JSONOutputGuard.enforce(raw) == {"translation": "pa"}

    def test_leading_prose_skipped(self):
        raw = 'Sure! Here is your language:\n{"description": "soft"}'
        assert JSONOutputGuard.enforce(raw) == {"description": "soft"}

    def test_non_ascii_preserved(self):
        assert JSONOutputGuard.enforce('{"native": "ˈpʰa.tu"}')["native"] == "ˈpʰa.tu"

    @pytest.mark.parametrize("raw", [None, "", "   \n"])
    def test_empty_raises(self, raw):
        with pytest.raises(LLMEmptyResponseError):
            JSONOutputGuard.enforce(raw)

    def test_prose_only_raises(self):
        with pytest.raises(LLMJSONError) as exc_info:
            JSONOutputGuard.enforce("I am unable to design that language.")
        assert "unable" in exc_info.value.raw_text

    def test_broken_json_raises(self):
        with pytest.raises(LLMJSONError):
            JSONOutputGuard.enforce('{"vocabulary": [{"id": "1", "native": }')


class TestTruncationRepair:
    def test_repairs_at_last_complete_element(self):
        raw = (
            '{"vocabulary": [{"id": "1", "native": "pa", "meaning": "I", "pronunciation": "pa"}, '
            '{"id": "2'
        )
        result = JSONOutputGuard.enforce(raw, stop_reason="max_tokens")
        assert result == {
            "vocabulary": [{"id": "1", "native": "pa", "meaning": "I", "pronunciation": "pa"}]
        }

    def test_gemini_stop_reason_spelling(self):
        raw = '{"phonemes": ["p", "a", "t", "k'
        result = JSONOutputGuard.enforce(raw, stop_reason="MAX_TOKENS")
        assert result == {"phonemes": ["p", "a", "t"]}

    def test_no_repair_without_truncation_signal(self):
        raw = '{"phonemes": ["p", "a", "t", "k'
        with pytest.raises(LLMJSONError):
            JSONOutputGuard.enforce(raw, stop_reason="end_turn")


class TestSystemPromptSuffix:
    def test_mentions_json_only(self):
        suffix = JSONOutputGuard.system_prompt_suffix()
        assert "JSON" in suffix
        assert "```" in suffix
