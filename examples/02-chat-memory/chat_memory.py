"""Chat Memory Example.

A chat memory keeps the recent part of a conversation so it can be resent
to the model, bounded either by message count or by token count.

Features demonstrated:
- MessageWindowChatMemory: keep the last N messages
- TokenWindowChatMemory: keep as many messages as fit a token budget
- The system message is kept first and never evicted
"""

from llm_recipes import (
    Message,
    MessageWindowChatMemory,
    TokenWindowChatMemory,
    get_logger,
    get_provider,
    setup_logging,
)
from llm_recipes.memory import ChatMemory
from llm_recipes.providers import BaseLLMProvider

setup_logging()
logger = get_logger(__name__)


def chat_turn(provider: BaseLLMProvider, memory: ChatMemory, text: str) -> str:
    """Send one user message with the remembered history and store the answer."""
    memory.add(Message.user(text))
    response = provider.complete(memory.messages())
    memory.add(Message.assistant(response.content))
    return response.content or ""


def message_window_example(provider: BaseLLMProvider) -> list[str]:
    """Remember the last 10 messages of a conversation.

    Returns:
        The assistant's answers.
    """
    memory = MessageWindowChatMemory(max_messages=10)
    memory.add(Message.system("You are a friendly assistant. Keep answers short."))

    answers = [
        chat_turn(provider, memory, "Hello, my name is Klaus"),
        chat_turn(provider, memory, "What is my name?"),
    ]
    logger.info("message_window_state", messages=len(memory.messages()))
    return answers


def token_window_example(provider: BaseLLMProvider) -> list[str]:
    """Remember as much of the conversation as fits 1000 tokens.

    Returns:
        The assistant's answers.
    """
    memory = TokenWindowChatMemory(max_tokens=1000, model="gpt-3.5-turbo")

    answers = []
    for question in (
        "Hello, my name is Klaus",
        "Explain what a token is in two sentences.",
        "And what is my name?",
    ):
        answers.append(chat_turn(provider, memory, question))
        logger.info("token_window_state", tokens=memory.token_count(), messages=len(memory.messages()))
    return answers


def eviction_example() -> list[str]:
    """Show the window dropping old messages while keeping the system message.

    Returns:
        The texts left in a 3-message window after 5 additions.
    """
    memory = MessageWindowChatMemory(max_messages=3)
    memory.add(Message.system("You are a helpful assistant."))
    for i in range(1, 5):
        memory.add(Message.user(f"message {i}"))
    return [m.text for m in memory.messages()]


def main() -> None:
    """Run the chat memory examples."""
    print("=" * 60)
    print("Chat Memory Example")
    print("=" * 60)

    print("\n--- Eviction (no model call) ---")
    for text in eviction_example():
        print(f"  {text}")

    provider = get_provider()

    print("\n--- Message Window ---")
    for answer in message_window_example(provider):
        print(f"\n{answer}")

    print("\n--- Token Window ---")
    for answer in token_window_example(provider):
        print(f"\n{answer}")


if __name__ == "__main__":
    main()
