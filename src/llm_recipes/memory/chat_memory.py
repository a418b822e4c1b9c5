"""Windowed chat memories.

A chat memory keeps the part of a conversation that is sent back to the
model on the next turn. Both windows follow the same rules:

- At most one system message is kept, always first. Adding an identical
  system message is a no-op; adding a different one replaces it.
- When the window overflows, the oldest non-system message is evicted.
  Evicting an assistant message that requested tools also evicts the tool
  results answering it, so the model never sees an orphaned result.
- The system message is never evicted.
- Every change is written through to the backing ``ChatMemoryStore``.
"""

from abc import ABC, abstractmethod

from llm_recipes.core.config import get_settings
from llm_recipes.core.errors import ValidationError
from llm_recipes.core.logging import get_logger
from llm_recipes.memory.store import ChatMemoryStore, InMemoryChatMemoryStore
from llm_recipes.providers.base import Message, Role
from llm_recipes.utils.tokens import count_message_tokens

logger = get_logger(__name__)

DEFAULT_MEMORY_ID = "default"


class ChatMemory(ABC):
    """Base class for windowed chat memories.

    Args:
        memory_id: Conversation identifier used as the store key.
        store: Backing store. Defaults to a private in-process store.
    """

    def __init__(self, memory_id: str = DEFAULT_MEMORY_ID, store: ChatMemoryStore | None = None) -> None:
        self.id = memory_id
        self.store = store or InMemoryChatMemoryStore()

    @abstractmethod
    def _exceeds_capacity(self, messages: list[Message]) -> bool:
        """Whether ``messages`` overflow the window."""
        ...

    def add(self, message: Message) -> None:
        """Append a message, evict overflow and persist the result."""
        messages = self.store.get_messages(self.id)

        if message.role == Role.SYSTEM:
            existing = next((m for m in messages if m.role == Role.SYSTEM), None)
            if existing is not None:
                if existing.content == message.content:
                    return
                messages.remove(existing)
            messages.insert(0, message)
        else:
            messages.append(message)

        self._ensure_capacity(messages)
        self.store.update_messages(self.id, messages)

    def add_all(self, messages: list[Message]) -> None:
        """Append several messages in order."""
        for message in messages:
            self.add(message)

    def messages(self) -> list[Message]:
        """Return the current window (a copy, safe to mutate)."""
        messages = self.store.get_messages(self.id)
        self._ensure_capacity(messages)
        return messages

    def clear(self) -> None:
        """Delete the conversation from the store."""
        self.store.delete_messages(self.id)

    def _ensure_capacity(self, messages: list[Message]) -> None:
        while self._exceeds_capacity(messages):
            index = next((i for i, m in enumerate(messages) if m.role != Role.SYSTEM), None)
            if index is None:
                break

            evicted = messages.pop(index)
            evicted_count = 1
            if evicted.tool_calls:
                answered = set(evicted.requested_tool_call_ids())
                while (
                    index < len(messages)
                    and messages[index].role == Role.TOOL
                    and messages[index].tool_call_id in answered
                ):
                    messages.pop(index)
                    evicted_count += 1

            logger.debug(
                "memory_evicted",
                memory_id=self.id,
                role=evicted.role.value,
                evicted=evicted_count,
                remaining=len(messages),
            )


class MessageWindowChatMemory(ChatMemory):
    """Keeps the most recent ``max_messages`` messages, system message included."""

    def __init__(
        self,
        max_messages: int | None = None,
        memory_id: str = DEFAULT_MEMORY_ID,
        store: ChatMemoryStore | None = None,
    ) -> None:
        max_messages = max_messages if max_messages is not None else get_settings().memory_max_messages
        if max_messages < 1:
            raise ValidationError("max_messages must be at least 1", field="max_messages", value=max_messages)
        super().__init__(memory_id, store)
        self.max_messages = max_messages

    def _exceeds_capacity(self, messages: list[Message]) -> bool:
        return len(messages) > self.max_messages


class TokenWindowChatMemory(ChatMemory):
    """Keeps the most recent messages whose combined size fits ``max_tokens``.

    Sizes are measured with the tokenizer of ``model`` (see
    ``count_message_tokens``), which only approximates non-OpenAI models.
    """

    def __init__(
        self,
        max_tokens: int | None = None,
        model: str | None = None,
        memory_id: str = DEFAULT_MEMORY_ID,
        store: ChatMemoryStore | None = None,
    ) -> None:
        settings = get_settings()
        max_tokens = max_tokens if max_tokens is not None else settings.memory_max_tokens
        if max_tokens < 1:
            raise ValidationError("max_tokens must be at least 1", field="max_tokens", value=max_tokens)
        super().__init__(memory_id, store)
        self.max_tokens = max_tokens
        self.model = model or settings.token_count_model

    def token_count(self, messages: list[Message] | None = None) -> int:
        """Total tokens of ``messages`` (defaults to the current window)."""
        messages = self.messages() if messages is None else messages
        return sum(count_message_tokens(m, self.model) for m in messages)

    def _exceeds_capacity(self, messages: list[Message]) -> bool:
        return self.token_count(messages) > self.max_tokens
