"""Per-User Chat Memory Example.

An assistant with a memory registry keeps one conversation per memory id,
so several users can talk to it without seeing each other's history.

Features demonstrated:
- ChatMemoryRegistry with a message window per user
- Reading a user's memory through the assistant
- Evicting a user's memory
"""

from llm_recipes import Assistant, ChatMemoryRegistry, get_logger, get_provider, setup_logging

setup_logging()
logger = get_logger(__name__)


def main() -> None:
    """Run the per-user memory example."""
    print("=" * 60)
    print("Per-User Chat Memory Example")
    print("=" * 60)

    assistant = Assistant(
        get_provider(),
        memory_registry=ChatMemoryRegistry.message_window(max_messages=10),
    )

    turns = [
        ("1", "Hello, my name is Klaus"),
        ("2", "Hi, my name is Francine"),
        ("1", "What is my name?"),
        ("2", "What is my name?"),
    ]
    for memory_id, message in turns:
        print(f"\n[user {memory_id}] {message}")
        print(f"[assistant] {assistant.chat(message, memory_id=memory_id)}")

    print("\n--- Stored Conversations ---")
    for memory_id in ("1", "2"):
        memory = assistant.get_chat_memory(memory_id)
        messages = memory.messages() if memory else []
        print(f"user {memory_id}: {len(messages)} messages")
        for message in messages:
            print(f"  {message.role.value}: {message.text}")

    print("\n--- Evicting User 1 ---")
    evicted = assistant.evict_chat_memory("1")
    logger.info("memory_evicted", memory_id="1", evicted=evicted)
    print(f"\n[user 1] What is my name?\n[assistant] {assistant.chat('What is my name?', memory_id='1')}")


if __name__ == "__main__":
    main()
