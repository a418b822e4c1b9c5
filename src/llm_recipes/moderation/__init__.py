"""Content moderation for user input."""

from llm_recipes.moderation.moderator import (
    LLMModerationModel,
    Moderation,
    ModerationModel,
    ModerationVerdict,
    RiskLevel,
)

__all__ = [
    "LLMModerationModel",
    "Moderation",
    "ModerationModel",
    "ModerationVerdict",
    "RiskLevel",
]
