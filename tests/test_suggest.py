"""
Tests for the suggestion engine and its Ollama collaborator.
"""

import pytest
from unittest.mock import MagicMock, patch

from src.agents.ollama_agent import OllamaSuggestionAgent, SuggestionProviderError, check_ollama_health
from src.core.suggest import (
    CONFIDENCE_AI,
    CONFIDENCE_EXACT,
    CONFIDENCE_FUZZY,
    CONFIDENCE_TEMPLATE,
    suggest,
    suggest_selection,
)


@pytest.fixture
def resources(make_resource):
    return [
        make_resource("로그인", "Log in", key="auth.login",
                      product_specific={"knoxTeams": {"ko-KR": "Knox 로그인", "en-US": "Sign in to Knox"}}),
        make_resource("저장", "Save", key="common.save"),
    ]


class TestSuggest:
    """Confidence tiers and rationales."""

    def test_confidence_ordering(self, resources):
        exact = suggest("저장", resources, "ko-KR")
        fuzzy = suggest("저장 버튼", resources, "ko-KR")
        fallback = suggest("환경설정", resources, "ko-KR")

        assert (exact.source, fuzzy.source, fallback.source) == ("exact", "fuzzy", "template")
        assert exact.confidence > fuzzy.confidence > fallback.confidence
        assert CONFIDENCE_EXACT > CONFIDENCE_FUZZY > CONFIDENCE_AI > CONFIDENCE_TEMPLATE

    def test_exact_match(self, resources):
        result = suggest("Save", resources, "en-US")

        assert result.source == "exact"
        assert result.confidence == CONFIDENCE_EXACT
        assert result.suggestion == "Save"
        assert result.matched_key == "common.save"

    def test_fuzzy_match_names_key(self, resources):
        result = suggest("로그인 하기", resources, "ko-KR")

        assert result.source == "fuzzy"
        assert result.confidence == CONFIDENCE_FUZZY
        assert result.suggestion == "로그인"
        assert '"auth.login"' in result.rationale

    def test_fuzzy_uses_product_variant(self, resources):
        result = suggest("Log in now", resources, "en-US", product="knox")

        assert result.suggestion == "Sign in to Knox"
        assert "Knox Teams" in result.rationale
        assert "Considered Knox product tone and manner." in result.rationale

    def test_template_fallback_korean(self, resources):
        result = suggest("  환경설정  ", resources, "ko-KR", style_guide="간결하게")

        assert result.source == "template"
        assert result.confidence == CONFIDENCE_TEMPLATE
        assert result.suggestion == "환경설정 (개선 제안)"
        assert result.rationale.startswith("더 명확하고 일관된 표현으로 개선했습니다.")
        assert '스타일 가이드 "간결하게"' in result.rationale
        assert result.degraded is False

    @pytest.mark.parametrize("locale,marker", [
        ("en-US", "(suggested)"),
        ("zh-CN", "(建议)"),
        ("ja-JP", "(改善案)"),
        ("vi-VN", "(đề xuất)"),
    ])
    def test_template_markers(self, locale, marker):
        assert suggest("Preferences", [], locale).suggestion == f"Preferences {marker}"

    def test_empty_text_rejected(self, resources):
        with pytest.raises(ValueError):
            suggest("   ", resources, "ko-KR")

    def test_ai_suggestion(self, resources):
        generator = MagicMock()
        generator.generate.return_value = "Open preferences"

        result = suggest("Preferences", resources, "en-US", use_ai=True, generator=generator)

        assert result.source == "ai"
        assert result.confidence == CONFIDENCE_AI
        assert result.suggestion == "Open preferences"
        generator.generate.assert_called_once()

    def test_ai_not_used_when_resource_matches(self, resources):
        generator = MagicMock()

        result = suggest("Save", resources, "en-US", use_ai=True, generator=generator)

        assert result.source == "exact"
        generator.generate.assert_not_called()

    def test_ai_failure_degrades_to_template(self, resources):
        generator = MagicMock()
        generator.generate.side_effect = SuggestionProviderError("timed out")

        result = suggest("Preferences", resources, "en-US", use_ai=True, generator=generator)

        assert result.source == "template"
        assert result.degraded is True
        assert result.confidence == CONFIDENCE_TEMPLATE
        assert "(AI suggestion unavailable)" in result.rationale

    def test_ai_without_generator_is_degraded(self, resources):
        result = suggest("Preferences", resources, "en-US", use_ai=True, generator=None)

        assert result.degraded is True


class TestSuggestSelection:
    """Suggestions for a design-tool selection."""

    def test_selection_items(self, resources):
        selection = [
            {"id": "1:1", "name": "Title", "type": "TEXT", "text": "로그인"},
            {"id": "1:2", "name": "Hint", "type": "TEXT", "text": "로그인 하기"},
            {"id": "1:3", "name": "Tiny", "type": "TEXT", "text": "Q"},
        ]

        items = suggest_selection(selection, resources, "ko-KR")

        assert [(i.id, i.priority) for i in items] == [
            ("1:2-resource", "medium"),
            ("1:3-unregistered", "high"),
            ("1:3-short", "low"),
        ]
        assert items[0].after == "로그인"
        assert items[2].after is None
        assert items[0].to_dict()["nodeId"] == "1:2"


class TestOllamaAgent:
    """OllamaSuggestionAgent with the client mocked out."""

    def test_generate_returns_first_line(self):
        agent = OllamaSuggestionAgent(model_name="test-model", host="http://ollama:11434", timeout=2)
        client = MagicMock()
        client.chat.return_value = {"message": {"content": '"Open settings"\nBecause it is clearer.'}}
        agent._client = client

        assert agent.generate("Settings", "en-US", product="knox") == "Open settings"

        kwargs = client.chat.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"][-1] == {"role": "user", "content": "Settings"}

    def test_generate_wraps_client_errors(self):
        agent = OllamaSuggestionAgent(model_name="test-model")
        client = MagicMock()
        client.chat.side_effect = ConnectionError("refused")
        agent._client = client

        with pytest.raises(SuggestionProviderError):
            agent.generate("Settings", "en-US")

    def test_empty_output_is_an_error(self):
        agent = OllamaSuggestionAgent(model_name="test-model")
        client = MagicMock()
        client.chat.return_value = {"message": {"content": "   "}}
        agent._client = client

        with pytest.raises(SuggestionProviderError):
            agent.generate("Settings", "en-US")

    def test_client_uses_configured_timeout(self):
        with patch("src.agents.ollama_agent.ollama.Client") as client_cls:
            agent = OllamaSuggestionAgent(host="http://ollama:11434", timeout=3.5)
            agent.client

        client_cls.assert_called_once_with(host="http://ollama:11434", timeout=3.5)

    def test_health_check_never_raises(self):
        with patch("src.agents.ollama_agent.ollama.Client") as client_cls:
            client_cls.return_value.list.side_effect = ConnectionError("refused")
            health = check_ollama_health("http://ollama:11434")

        assert health["status"] == "error"
        assert "refused" in health["message"]
