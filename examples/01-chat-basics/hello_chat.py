"""Hello Chat Model Example.

This example shows the first calls most applications make: a single
question, then a conversation whose history is resent on every turn.

Features demonstrated:
- The public demo endpoint (no API key needed, gpt-4o-mini only)
- A DeepSeek client configured from DEEPSEEK_API_KEY
- Multi-turn conversations with manually kept history
- Usage statistics from the response
"""

from llm_recipes import LLMRecipesError, Message, OpenAIProvider, get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


def hello_demo_key() -> str:
    """Ask one question through the demo endpoint.

    Returns:
        The model's answer.
    """
    provider = OpenAIProvider(endpoint="demo")
    response = provider.complete([Message.user("Say 'Hello World'")])
    logger.info("demo_answered", model=response.model)
    return response.content or ""


def hello_deepseek() -> str:
    """Ask one question through DeepSeek and log token usage.

    Returns:
        The model's answer.
    """
    provider = OpenAIProvider(endpoint="deepseek")
    response = provider.complete(
        [
            Message.system("You are a helpful assistant. Keep answers under 100 words."),
            Message.user("What is LangChain4j, in one paragraph?"),
        ],
        temperature=0.7,
    )

    if response.usage:
        logger.info(
            "completion_finished",
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            total_tokens=response.usage.total_tokens,
        )
    return response.content or ""


def multi_turn_conversation() -> list[str]:
    """Hold a conversation by resending the whole history each turn.

    Chat models are stateless: the second question only makes sense
    because the first exchange is sent along with it.

    Returns:
        The assistant's answers, one per turn.
    """
    provider = OpenAIProvider(endpoint="deepseek")
    messages = [Message.user("Hello, my name is Klaus")]
    answers: list[str] = []

    response = provider.complete(messages)
    answers.append(response.content or "")
    messages.append(Message.assistant(response.content))

    messages.append(Message.user("What is my name?"))
    response = provider.complete(messages)
    answers.append(response.content or "")

    logger.info("conversation_finished", turns=len(answers), messages=len(messages))
    return answers


def main() -> None:
    """Run the hello examples."""
    print("=" * 60)
    print("Hello Chat Model Example")
    print("=" * 60)

    print("\n--- Demo Key ---")
    try:
        print(hello_demo_key())
    except LLMRecipesError as e:
        print(f"Demo endpoint unavailable: {e.message}")

    print("\n--- DeepSeek ---")
    print(hello_deepseek())

    print("\n--- Multi-Turn Conversation ---")
    for i, answer in enumerate(multi_turn_conversation(), 1):
        print(f"\nTurn {i}:\n{answer}")


if __name__ == "__main__":
    main()
