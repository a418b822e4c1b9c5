"""Chat memory persistence interface and the default in-process store."""

import threading
from abc import ABC, abstractmethod

from llm_recipes.providers.base import Message


class ChatMemoryStore(ABC):
    """Persists the message list of each conversation, keyed by memory id.

    A store only replaces whole lists; windowing and eviction happen in the
    ``ChatMemory`` that owns it.
    """

    @abstractmethod
    def get_messages(self, memory_id: str) -> list[Message]:
        """Return the stored messages in order (empty if none)."""
        ...

    @abstractmethod
    def update_messages(self, memory_id: str, messages: list[Message]) -> None:
        """Replace the stored messages for ``memory_id``."""
        ...

    @abstractmethod
    def delete_messages(self, memory_id: str) -> None:
        """Remove everything stored for ``memory_id``."""
        ...


class InMemoryChatMemoryStore(ChatMemoryStore):
    """Dict-backed store; contents are lost when the process exits."""

    def __init__(self) -> None:
        self._messages: dict[str, list[Message]] = {}
        self._lock = threading.Lock()

    def get_messages(self, memory_id: str) -> list[Message]:
        with self._lock:
            return list(self._messages.get(memory_id, []))

    def update_messages(self, memory_id: str, messages: list[Message]) -> None:
        with self._lock:
            self._messages[memory_id] = list(messages)

    def delete_messages(self, memory_id: str) -> None:
        with self._lock:
            self._messages.pop(memory_id, None)

    def memory_ids(self) -> list[str]:
        """Ids that currently hold messages."""
        with self._lock:
            return list(self._messages)
