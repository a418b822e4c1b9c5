"""Assistant composition and multi-service routing."""

from llm_recipes.services.assistant import (
    Assistant,
    AssistantResult,
    RequestTransformer,
    SystemMessageSource,
)
from llm_recipes.services.routing import (
    CHAT_BOT_SYSTEM_MESSAGE,
    EMPTY_MESSAGE_REPLY,
    GREETING_REPLY,
    AssistantChatBot,
    AssistantGreetingExpert,
    ChatBot,
    GreetingExpert,
    GreetingRouter,
)

__all__ = [
    "CHAT_BOT_SYSTEM_MESSAGE",
    "EMPTY_MESSAGE_REPLY",
    "GREETING_REPLY",
    "Assistant",
    "AssistantChatBot",
    "AssistantGreetingExpert",
    "AssistantResult",
    "ChatBot",
    "GreetingExpert",
    "GreetingRouter",
    "RequestTransformer",
    "SystemMessageSource",
]
