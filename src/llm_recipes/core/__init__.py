"""Core utilities shared by every recipe.

This module exports:
- Configuration management
- The error hierarchy
- Structured logging
- Retry utilities
"""

from llm_recipes.core.config import Settings, get_settings
from llm_recipes.core.errors import (
    AuthenticationError,
    ConfigurationError,
    ContentFilterError,
    ContextLengthError,
    LLMRecipesError,
    MemoryStoreError,
    ModelNotFoundError,
    ModerationError,
    OutputParsingError,
    ProviderError,
    RateLimitError,
    RequestTimeoutError,
    RetryableError,
    ServiceUnavailableError,
    ToolLoopError,
    ValidationError,
)
from llm_recipes.core.logging import LogContext, get_logger, log_llm_call, setup_logging
from llm_recipes.core.retry import create_retry_decorator, with_retry

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "AuthenticationError",
    "ConfigurationError",
    "ContentFilterError",
    "ContextLengthError",
    "LLMRecipesError",
    "MemoryStoreError",
    "ModelNotFoundError",
    "ModerationError",
    "OutputParsingError",
    "ProviderError",
    "RateLimitError",
    "RequestTimeoutError",
    "RetryableError",
    "ServiceUnavailableError",
    "ToolLoopError",
    "ValidationError",
    # Logging
    "LogContext",
    "get_logger",
    "log_llm_call",
    "setup_logging",
    # Retry
    "create_retry_decorator",
    "with_retry",
]
