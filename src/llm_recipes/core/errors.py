"""Exception hierarchy for llm-recipes.

Provider SDK errors are translated into these types at the provider
boundary, so recipes only ever catch ``LLMRecipesError`` subclasses:
- ``RetryableError`` and ``RateLimitError`` are retried automatically
- ``ModerationError`` is raised before a flagged input reaches the model
- ``OutputParsingError`` carries the raw model text for debugging
"""

from typing import Any


class LLMRecipesError(Exception):
    """Base exception for all llm-recipes errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(LLMRecipesError):
    """Raised when configuration is invalid or missing."""

    pass


class ProviderError(LLMRecipesError):
    """Base exception for errors returned by a model endpoint."""

    def __init__(
        self,
        message: str,
        provider: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.provider = provider
        super().__init__(message, {"provider": provider, **(details or {})})


class AuthenticationError(ProviderError):
    """Raised when the API key is rejected (HTTP 401)."""

    pass


class RateLimitError(ProviderError):
    """Raised when the endpoint throttles the caller (HTTP 429).

    This error is retryable.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(
            message,
            provider,
            {"retry_after": retry_after, **(details or {})},
        )


class ModelNotFoundError(ProviderError):
    """Raised when the requested model is not served by the endpoint."""

    def __init__(
        self,
        model: str,
        provider: str,
        available_models: list[str] | None = None,
    ) -> None:
        self.model = model
        self.available_models = available_models
        super().__init__(
            f"Model '{model}' not found",
            provider,
            {"model": model, "available_models": available_models},
        )


class ContextLengthError(ProviderError):
    """Raised when the prompt exceeds the model's context window."""

    def __init__(
        self,
        message: str,
        provider: str,
        max_tokens: int | None = None,
        requested_tokens: int | None = None,
    ) -> None:
        self.max_tokens = max_tokens
        self.requested_tokens = requested_tokens
        super().__init__(
            message,
            provider,
            {"max_tokens": max_tokens, "requested_tokens": requested_tokens},
        )


class ContentFilterError(ProviderError):
    """Raised when the endpoint's own safety filter blocks a request."""

    pass


class RetryableError(LLMRecipesError):
    """Base class for transient errors."""

    pass


class RequestTimeoutError(RetryableError):
    """Raised when a request to the endpoint times out."""

    pass


class ServiceUnavailableError(RetryableError):
    """Raised when the endpoint answers with a 5xx status."""

    pass


class ValidationError(LLMRecipesError):
    """Raised when caller input is invalid."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message, {"field": field, "value": value})


class ModerationError(LLMRecipesError):
    """Raised when a moderation model flags the user's input."""

    def __init__(
        self,
        message: str,
        flagged_text: str | None = None,
        verdict: Any = None,
    ) -> None:
        self.flagged_text = flagged_text
        self.verdict = verdict
        super().__init__(message, {"flagged_text": flagged_text})


class OutputParsingError(LLMRecipesError):
    """Raised when model output cannot be parsed into the requested type."""

    def __init__(self, message: str, raw_output: str, target: str | None = None) -> None:
        self.raw_output = raw_output
        self.target = target
        super().__init__(message, {"target": target, "raw_output": raw_output[:200]})


class ToolLoopError(LLMRecipesError):
    """Raised when the model keeps requesting tools past the round limit."""

    def __init__(self, max_rounds: int) -> None:
        self.max_rounds = max_rounds
        super().__init__(
            f"Model still requesting tools after {max_rounds} rounds",
            {"max_rounds": max_rounds},
        )


class MemoryStoreError(LLMRecipesError):
    """Raised when a chat memory store backend fails."""

    def __init__(self, message: str, memory_id: str | None = None) -> None:
        self.memory_id = memory_id
        super().__init__(message, {"memory_id": memory_id})
