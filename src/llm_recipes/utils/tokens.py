"""Token counting utilities using tiktoken.

Used by the token-window chat memory to size conversations, and by
recipes that need to check prompts against a model's context window.
DeepSeek and Qwen tokenizers are not published for tiktoken, so their
counts are approximated with ``cl100k_base``.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

import tiktoken

if TYPE_CHECKING:
    from llm_recipes.providers.base import Message

# Model to encoding mapping
MODEL_ENCODINGS: dict[str, str] = {
    "gpt-4o": "o200k_base",
    "gpt-4o-mini": "o200k_base",
    "gpt-4": "cl100k_base",
    "gpt-3.5-turbo": "cl100k_base",
    # Approximations
    "deepseek-chat": "cl100k_base",
    "qwen-plus": "cl100k_base",
    "qwen-vl-plus": "cl100k_base",
}

MODEL_CONTEXT_WINDOWS: dict[str, int] = {
    "gpt-4o": 128000,
    "gpt-4o-mini": 128000,
    "gpt-4": 8192,
    "gpt-3.5-turbo": 16385,
    "deepseek-chat": 64000,
    "qwen-plus": 131072,
    "qwen-vl-plus": 8192,
}

# Per-message framing overhead (<|start|>role<|sep|>)
TOKENS_PER_MESSAGE = 3
TOKENS_PER_NAME = 1


@lru_cache(maxsize=10)
def get_encoding(encoding_name: str) -> tiktoken.Encoding:
    """Get a cached tiktoken encoding by name."""
    return tiktoken.get_encoding(encoding_name)


@lru_cache(maxsize=20)
def get_encoding_for_model(model: str) -> tiktoken.Encoding:
    """Get the tiktoken encoding for a model, defaulting to cl100k_base."""
    if model in MODEL_ENCODINGS:
        return get_encoding(MODEL_ENCODINGS[model])
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return get_encoding("cl100k_base")


def count_tokens(text: str, model: str = "gpt-4o") -> int:
    """Count the number of tokens in a text string.

    Args:
        text: The text to count tokens for.
        model: The model whose tokenizer to use.

    Returns:
        The number of tokens in the text.
    """
    return len(get_encoding_for_model(model).encode(text))


def encode(text: str, model: str = "gpt-4o") -> list[int]:
    """Encode text into token IDs."""
    return get_encoding_for_model(model).encode(text)


def decode(tokens: list[int], model: str = "gpt-4o") -> str:
    """Decode token IDs back to text."""
    return get_encoding_for_model(model).decode(tokens)


def truncate_to_token_limit(
    text: str,
    max_tokens: int,
    model: str = "gpt-4o",
    truncation_marker: str = "...",
) -> str:
    """Truncate text to fit within a token limit.

    Args:
        text: The text to truncate.
        max_tokens: Maximum number of tokens allowed, marker included.
        model: The model whose tokenizer to use.
        truncation_marker: Marker to append if truncated.

    Returns:
        The truncated text, or the original if within the limit.
    """
    encoding = get_encoding_for_model(model)
    tokens = encoding.encode(text)
    if len(tokens) <= max_tokens:
        return text

    available_tokens = max_tokens - len(encoding.encode(truncation_marker))
    if available_tokens <= 0:
        return truncation_marker
    return encoding.decode(tokens[:available_tokens]) + truncation_marker


def count_message_tokens(message: "Message", model: str = "gpt-3.5-turbo") -> int:
    """Count the tokens one chat message contributes to a prompt.

    Only text is counted for multimodal messages; image and video parts are
    billed separately by the endpoints.

    Args:
        message: The message to size.
        model: The model whose tokenizer to use.

    Returns:
        Framing overhead plus content, name and tool-call tokens.
    """
    encoding = get_encoding_for_model(model)
    total = TOKENS_PER_MESSAGE + len(encoding.encode(message.text))
    if message.name:
        total += TOKENS_PER_NAME + len(encoding.encode(message.name))
    for tool_call in message.tool_calls or []:
        function = tool_call.get("function", {})
        total += len(encoding.encode(function.get("name", "")))
        total += len(encoding.encode(function.get("arguments", "")))
    return total


def estimate_message_tokens(messages: list["Message"], model: str = "gpt-4o") -> int:
    """Estimate the prompt size of a conversation, reply priming included."""
    return sum(count_message_tokens(m, model) for m in messages) + 3


def get_context_window(model: str) -> int:
    """Get the context window size for a model (8192 if unknown)."""
    return MODEL_CONTEXT_WINDOWS.get(model, 8192)


def check_context_fit(
    text: str,
    model: str = "gpt-4o",
    max_output_tokens: int = 4096,
) -> tuple[bool, int, int]:
    """Check if text fits within a model's context window.

    Args:
        text: The input text.
        model: The model to check against.
        max_output_tokens: Reserved tokens for output.

    Returns:
        Tuple of (fits, input_tokens, available_tokens).
    """
    input_tokens = count_tokens(text, model)
    available = get_context_window(model) - max_output_tokens
    return input_tokens <= available, input_tokens, available
