"""Tests for LLM-backed moderation."""

import json
from typing import Any

import pytest

from llm_recipes.core.errors import OutputParsingError
from llm_recipes.moderation import LLMModerationModel, Moderation, ModerationModel, RiskLevel
from llm_recipes.providers.base import Message, Role

VIOLATION = json.dumps(
    {
        "is_violation": True,
        "risk_level": "HIGH",
        "violation_categories": ["violence"],
        "detailed_reason": "Threatens harm",
        "suggestions": [],
    }
)
CLEAN = json.dumps({"is_violation": False, "risk_level": "LOW"})


class TestLLMModerationModel:
    """Tests for LLMModerationModel."""

    def test_flags_violation(self, make_provider: Any) -> None:
        """Test a violating verdict flags the text."""
        provider = make_provider(responses=[VIOLATION])
        moderation = LLMModerationModel(provider).moderate("I will hurt you")

        assert moderation.flagged is True
        assert moderation.flagged_text == "I will hurt you"
        assert moderation.verdict is not None
        assert moderation.verdict.risk_level is RiskLevel.HIGH

    def test_clean_content(self, make_provider: Any) -> None:
        """Test a clean verdict does not flag."""
        moderation = LLMModerationModel(make_provider(responses=[CLEAN])).moderate("Hello")

        assert moderation.flagged is False
        assert moderation.flagged_text is None

    def test_review_request(self, make_provider: Any) -> None:
        """Test the reviewer gets the system prompt, the content and JSON mode."""
        provider = make_provider(responses=[CLEAN])
        LLMModerationModel(provider, system_prompt="Review strictly.").moderate("Hello there")

        call = provider.calls[0]
        assert call["messages"][0] == Message.system("Review strictly.")
        assert "Hello there" in call["messages"][1].text
        assert call["temperature"] == 0.0
        assert call["response_format"] == {"type": "json_object"}

    def test_unparseable_verdict(self, make_provider: Any) -> None:
        """Test a non-JSON verdict raises OutputParsingError."""
        with pytest.raises(OutputParsingError):
            LLMModerationModel(make_provider(responses=["I cannot help"])).moderate("Hello")


class TestModerateMessages:
    """Tests for moderating a conversation."""

    def test_uses_last_user_message(self) -> None:
        seen: list[str] = []

        class Recorder(ModerationModel):
            def moderate(self, text: str) -> Moderation:
                seen.append(text)
                return Moderation.not_flagged()

        Recorder().moderate_messages(
            [Message.user("first"), Message.assistant("reply"), Message.user("second"), Message.assistant("again")]
        )

        assert seen == ["second"]

    def test_no_user_message(self) -> None:
        class Never(ModerationModel):
            def moderate(self, text: str) -> Moderation:
                raise AssertionError("should not be called")

        result = Never().moderate_messages([Message(role=Role.SYSTEM, content="Be brief.")])

        assert result.flagged is False
