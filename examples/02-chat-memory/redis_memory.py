"""Redis Chat Memory Example.

Conversations stored in Redis survive restarts and can be shared by
several application instances. Each conversation is one Redis list under
``langchain4j:chat-memory:<memory id>`` holding JSON messages.

Requires a running Redis (LLM_RECIPES_REDIS_URL, default
redis://localhost:6379/0).

Features demonstrated:
- RedisChatMemoryStore behind a message window
- One memory per user id sharing the same store
- Reading the stored conversation back after "restarting"
"""

from llm_recipes import (
    ChatMemoryRegistry,
    Message,
    RedisChatMemoryStore,
    get_logger,
    get_provider,
    setup_logging,
)
from llm_recipes.services import Assistant

setup_logging()
logger = get_logger(__name__)


def remember_across_restarts(store: RedisChatMemoryStore) -> str:
    """Talk to one assistant, then ask a fresh one that shares the store.

    Returns:
        The second assistant's answer.
    """
    provider = get_provider()

    first = Assistant(provider, memory_registry=ChatMemoryRegistry.message_window(10, store=store))
    first.chat("Hello, my name is Klaus", memory_id="klaus")

    # A new registry, as after a restart; the history comes from Redis
    second = Assistant(provider, memory_registry=ChatMemoryRegistry.message_window(10, store=store))
    return second.chat("What is my name?", memory_id="klaus")


def inspect_store(store: RedisChatMemoryStore, memory_id: str) -> list[Message]:
    """Read a conversation straight from the store."""
    messages = store.get_messages(memory_id)
    logger.info("stored_conversation", key=store.key_for(memory_id), messages=len(messages))
    return messages


def main() -> None:
    """Run the Redis memory example."""
    print("=" * 60)
    print("Redis Chat Memory Example")
    print("=" * 60)

    with RedisChatMemoryStore() as store:
        if not store.ping():
            print("Redis is not reachable; start it or set LLM_RECIPES_REDIS_URL.")
            return

        print(f"\nAnswer after restart: {remember_across_restarts(store)}")

        print("\n--- Stored Messages ---")
        for message in inspect_store(store, "klaus"):
            print(f"  [{message.role.value}] {message.text[:80]}")

        store.delete_messages("klaus")


if __name__ == "__main__":
    main()
