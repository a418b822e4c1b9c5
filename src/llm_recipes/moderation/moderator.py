"""Input moderation backed by a chat model.

Endpoints such as DeepSeek have no moderation API, so a chat model is asked
to review the text and answer with a structured verdict.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

from llm_recipes.core.logging import get_logger
from llm_recipes.providers.base import BaseLLMProvider, Message, Role
from llm_recipes.utils.structured import format_instructions, parse_model
from llm_recipes.utils.templates import load_prompt, render_template

logger = get_logger(__name__)


class RiskLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ModerationVerdict(BaseModel):
    """Structured review of one piece of user content."""

    is_violation: bool = Field(description="Whether the content violates the content policy")
    risk_level: RiskLevel = Field(default=RiskLevel.LOW, description="Risk level: HIGH, MEDIUM or LOW")
    violation_categories: list[str] = Field(default_factory=list, description="Violated categories, if any")
    detailed_reason: str = Field(default="", description="Why the content was or was not flagged")
    suggestions: list[str] = Field(default_factory=list, description="How the content could be rewritten")


@dataclass
class Moderation:
    """Outcome of moderating a text."""

    flagged: bool
    flagged_text: str | None = None
    verdict: ModerationVerdict | None = None

    @classmethod
    def not_flagged(cls, verdict: ModerationVerdict | None = None) -> "Moderation":
        return cls(flagged=False, verdict=verdict)


class ModerationModel(ABC):
    """Decides whether user input may be sent to the chat model."""

    @abstractmethod
    def moderate(self, text: str) -> Moderation:
        ...

    def moderate_messages(self, messages: list[Message]) -> Moderation:
        """Moderate the most recent user message of a conversation."""
        last_user = next((m for m in reversed(messages) if m.role == Role.USER), None)
        if last_user is None:
            return Moderation.not_flagged()
        return self.moderate(last_user.text)


class LLMModerationModel(ModerationModel):
    """Moderation by asking a chat model for a ``ModerationVerdict``.

    Args:
        provider: Chat model used as the reviewer.
        system_prompt: Reviewer instructions. Defaults to the packaged prompt.
        temperature: Sampling temperature; low values keep verdicts stable.
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        system_prompt: str | None = None,
        temperature: float = 0.0,
    ) -> None:
        self.provider = provider
        self.system_prompt = system_prompt or load_prompt("moderation_system.txt")
        self.temperature = temperature

    def review(self, text: str) -> ModerationVerdict:
        """Ask the reviewer model for a verdict on ``text``.

        Raises:
            OutputParsingError: If the reviewer's answer is not a valid verdict.
        """
        user_prompt = render_template(
            "Review the following content: {{content}}\n\n{{instructions}}",
            {"content": text, "instructions": format_instructions(ModerationVerdict)},
        )
        response = self.provider.complete(
            [Message.system(self.system_prompt), Message.user(user_prompt)],
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        return parse_model(response.content or "", ModerationVerdict)

    def moderate(self, text: str) -> Moderation:
        verdict = self.review(text)
        if verdict.is_violation:
            logger.warning(
                "content_flagged",
                risk_level=verdict.risk_level.value,
                categories=verdict.violation_categories,
                reason=verdict.detailed_reason,
            )
            return Moderation(flagged=True, flagged_text=text, verdict=verdict)
        return Moderation.not_flagged(verdict)
