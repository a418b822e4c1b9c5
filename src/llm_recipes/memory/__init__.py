"""Chat memory: windows, stores and per-id registries."""

from llm_recipes.memory.chat_memory import (
    ChatMemory,
    MessageWindowChatMemory,
    TokenWindowChatMemory,
)
from llm_recipes.memory.redis_store import RedisChatMemoryStore
from llm_recipes.memory.registry import ChatMemoryRegistry
from llm_recipes.memory.serialization import (
    message_from_json,
    message_to_json,
    messages_from_json,
    messages_to_json,
)
from llm_recipes.memory.store import ChatMemoryStore, InMemoryChatMemoryStore

__all__ = [
    "ChatMemory",
    "ChatMemoryRegistry",
    "ChatMemoryStore",
    "InMemoryChatMemoryStore",
    "MessageWindowChatMemory",
    "RedisChatMemoryStore",
    "TokenWindowChatMemory",
    "message_from_json",
    "message_to_json",
    "messages_from_json",
    "messages_to_json",
]
