"""Chat model clients and message types.

Every endpoint the recipes target speaks the OpenAI protocol, so a single
client class is configured per endpoint preset.
"""

from llm_recipes.providers.base import (
    BaseLLMProvider,
    CompletionChunk,
    CompletionResponse,
    ContentPart,
    Message,
    Role,
    ToolCall,
    ToolDefinition,
    Usage,
    image_part,
    image_part_from_bytes,
    image_part_from_file,
    text_part,
    video_part,
)
from llm_recipes.providers.endpoints import ENDPOINTS, Endpoint, get_endpoint
from llm_recipes.providers.openai_provider import OpenAIProvider

__all__ = [
    # Base classes
    "BaseLLMProvider",
    "CompletionChunk",
    "CompletionResponse",
    "ContentPart",
    "Message",
    "Role",
    "ToolCall",
    "ToolDefinition",
    "Usage",
    # Content parts
    "image_part",
    "image_part_from_bytes",
    "image_part_from_file",
    "text_part",
    "video_part",
    # Endpoints
    "ENDPOINTS",
    "Endpoint",
    "get_endpoint",
    # Providers
    "OpenAIProvider",
    # Factory function
    "get_provider",
]


def get_provider(endpoint: str | None = None, **kwargs: object) -> BaseLLMProvider:
    """Factory function to get a configured chat model client.

    Args:
        endpoint: Endpoint preset name. Defaults to the configured default.
        **kwargs: Additional arguments passed to ``OpenAIProvider``.

    Returns:
        A client for the requested endpoint.

    Raises:
        ValueError: If the endpoint name is not recognized.
        ConfigurationError: If the endpoint's API key is not configured.
    """
    if endpoint is not None:
        get_endpoint(endpoint)
    return OpenAIProvider(endpoint=endpoint, **kwargs)  # type: ignore[arg-type]
