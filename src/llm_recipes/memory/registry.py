"""One chat memory per memory id, created on first use."""

import threading
from collections.abc import Callable

from llm_recipes.core.logging import get_logger
from llm_recipes.memory.chat_memory import ChatMemory, MessageWindowChatMemory, TokenWindowChatMemory
from llm_recipes.memory.store import ChatMemoryStore

logger = get_logger(__name__)

ChatMemoryFactory = Callable[[str], ChatMemory]


class ChatMemoryRegistry:
    """Maps memory ids (users, sessions) to their own chat memory.

    Example:
        registry = ChatMemoryRegistry.message_window(max_messages=10)
        registry.get_or_create("user-1").add(Message.user("Hi, I'm Klaus"))
    """

    def __init__(self, factory: ChatMemoryFactory) -> None:
        self._factory = factory
        self._memories: dict[str, ChatMemory] = {}
        self._lock = threading.Lock()

    @classmethod
    def message_window(cls, max_messages: int | None = None, store: ChatMemoryStore | None = None) -> "ChatMemoryRegistry":
        """Registry of ``MessageWindowChatMemory`` sharing one store."""
        return cls(lambda memory_id: MessageWindowChatMemory(max_messages, memory_id=memory_id, store=store))

    @classmethod
    def token_window(
        cls,
        max_tokens: int | None = None,
        model: str | None = None,
        store: ChatMemoryStore | None = None,
    ) -> "ChatMemoryRegistry":
        """Registry of ``TokenWindowChatMemory`` sharing one store."""
        return cls(lambda memory_id: TokenWindowChatMemory(max_tokens, model, memory_id=memory_id, store=store))

    def get_or_create(self, memory_id: str) -> ChatMemory:
        """Return the memory for ``memory_id``, creating it if needed."""
        with self._lock:
            memory = self._memories.get(memory_id)
            if memory is None:
                memory = self._factory(memory_id)
                self._memories[memory_id] = memory
                logger.debug("chat_memory_created", memory_id=memory_id)
            return memory

    def get(self, memory_id: str) -> ChatMemory | None:
        """Return the memory for ``memory_id`` if one was created."""
        with self._lock:
            return self._memories.get(memory_id)

    def evict(self, memory_id: str) -> bool:
        """Drop a memory and clear its stored messages.

        Returns:
            True if a memory existed for ``memory_id``.
        """
        with self._lock:
            memory = self._memories.pop(memory_id, None)
        if memory is None:
            return False
        memory.clear()
        logger.info("chat_memory_evicted", memory_id=memory_id)
        return True

    def ids(self) -> list[str]:
        """Memory ids currently held."""
        with self._lock:
            return list(self._memories)
