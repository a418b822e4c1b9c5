"""Utility functions for token accounting."""

from llm_recipes.utils.tokens import (
    check_context_fit,
    count_message_tokens,
    count_tokens,
    decode,
    encode,
    estimate_message_tokens,
    get_context_window,
    get_encoding_for_model,
    truncate_to_token_limit,
)

__all__ = [
    "check_context_fit",
    "count_message_tokens",
    "count_tokens",
    "decode",
    "encode",
    "estimate_message_tokens",
    "get_context_window",
    "get_encoding_for_model",
    "truncate_to_token_limit",
]
