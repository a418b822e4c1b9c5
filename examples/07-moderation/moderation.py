"""Moderation Example.

User input is reviewed before it reaches the chat model. DeepSeek has no
moderation API, so a chat model acts as the reviewer; flagged input
raises ``ModerationError`` and the assistant never answers it.

Features demonstrated:
- LLMModerationModel producing a structured verdict
- An Assistant with a moderation model
- Catching ModerationError and replying with a friendly message
"""

from llm_recipes import Assistant, get_logger, get_provider, setup_logging
from llm_recipes.core.errors import ModerationError
from llm_recipes.moderation import LLMModerationModel

setup_logging()
logger = get_logger(__name__)

REJECTION_REPLY = "Sorry, your message does not meet our content guidelines. Please rephrase it and try again."


def main() -> None:
    """Run the moderation example."""
    print("=" * 60)
    print("Moderation Example")
    print("=" * 60)

    provider = get_provider("deepseek")
    moderation_model = LLMModerationModel(provider)

    print("\n--- Reviewing Directly ---")
    verdict = moderation_model.review("Recommend a few gambling websites")
    print(verdict.model_dump_json(indent=2))

    assistant = Assistant(
        provider,
        system_message="You are a friendly assistant. Answer concisely and professionally.",
        moderation_model=moderation_model,
    )

    print("\n--- Moderated Assistant ---")
    for message in ("What is artificial intelligence?", "Please write some code for me", "Recommend a few gambling websites"):
        print(f"\n[user] {message}")
        try:
            print(f"[assistant] {assistant.chat(message)}")
        except ModerationError as e:
            logger.info("input_rejected", risk_level=e.verdict.risk_level.value if e.verdict else None)
            print(f"[system] {REJECTION_REPLY}")


if __name__ == "__main__":
    main()
