"""llm-recipes - runnable recipes for building LLM applications.

The toolkit wraps OpenAI-compatible chat endpoints (OpenAI, DeepSeek,
Qwen/DashScope) with the building blocks the recipes demonstrate: chat
memory, tool calling, RAG, moderation and streaming.

Quick start:
    from llm_recipes import Message, get_provider

    provider = get_provider("deepseek")
    response = provider.complete([
        Message.system("You are a helpful assistant."),
        Message.user("Hello!"),
    ])
    print(response.content)
"""

__version__ = "0.1.0"

from llm_recipes.core import (
    LLMRecipesError,
    Settings,
    get_logger,
    get_settings,
    setup_logging,
)
from llm_recipes.memory import (
    ChatMemoryRegistry,
    InMemoryChatMemoryStore,
    MessageWindowChatMemory,
    RedisChatMemoryStore,
    TokenWindowChatMemory,
)
from llm_recipes.providers import (
    CompletionResponse,
    Message,
    OpenAIProvider,
    Role,
    ToolCall,
    ToolDefinition,
    Usage,
    get_provider,
)
from llm_recipes.services import Assistant, AssistantResult
from llm_recipes.tools import ToolRegistry, tool
from llm_recipes.utils import count_tokens

__all__ = [
    # Version
    "__version__",
    # Core
    "LLMRecipesError",
    "Settings",
    "get_logger",
    "get_settings",
    "setup_logging",
    # Providers
    "CompletionResponse",
    "Message",
    "OpenAIProvider",
    "Role",
    "ToolCall",
    "ToolDefinition",
    "Usage",
    "get_provider",
    # Memory
    "ChatMemoryRegistry",
    "InMemoryChatMemoryStore",
    "MessageWindowChatMemory",
    "RedisChatMemoryStore",
    "TokenWindowChatMemory",
    # Services
    "Assistant",
    "AssistantResult",
    # Tools
    "ToolRegistry",
    "tool",
    # Utils
    "count_tokens",
]
