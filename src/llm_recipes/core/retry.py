"""Retries for endpoint calls, built on tenacity.

Only transient failures are retried: timeouts, 5xx answers, rate limits
and dropped connections. Authentication and validation errors fail fast.
A rate limit that carries ``retry_after`` waits that long (capped at
``max_wait``) instead of the exponential backoff.
"""

from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

from tenacity import (  # type: ignore[attr-defined]
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from llm_recipes.core.config import get_settings
from llm_recipes.core.errors import RateLimitError, RetryableError
from llm_recipes.core.logging import get_logger

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    RetryableError,
    RateLimitError,
    ConnectionError,
)


class wait_retry_after:
    """Wait strategy preferring the endpoint's ``retry-after`` hint.

    Args:
        fallback: Strategy used when the error carries no hint.
        max_wait: Upper bound for hinted waits, in seconds.
    """

    def __init__(self, fallback: Callable[[RetryCallState], float], max_wait: float) -> None:
        self.fallback = fallback
        self.max_wait = max_wait

    def __call__(self, retry_state: RetryCallState) -> float:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exception, RateLimitError) and exception.retry_after is not None:
            return min(max(exception.retry_after, 0.0), self.max_wait)
        return self.fallback(retry_state)


def create_retry_decorator(
    max_retries: int | None = None,
    min_wait: float | None = None,
    max_wait: float | None = None,
    retryable_exceptions: tuple[type[Exception], ...] = RETRYABLE_EXCEPTIONS,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Create a retry decorator.

    Args:
        max_retries: Retries after the first attempt. Defaults to config value.
        min_wait: Initial backoff in seconds. Defaults to config value.
        max_wait: Longest wait between attempts. Defaults to config value.
        retryable_exceptions: Exception types that trigger a retry.

    Returns:
        A decorator that adds retry logic to functions.
    """
    settings = get_settings()

    max_retries = max_retries if max_retries is not None else settings.max_retries
    min_wait = min_wait if min_wait is not None else settings.retry_min_wait
    max_wait = max_wait if max_wait is not None else settings.retry_max_wait

    def log_retry(retry_state: Any) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "retry_attempt",
            attempt=retry_state.attempt_number,
            max_attempts=max_retries + 1,
            wait_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
            exception_type=type(exception).__name__ if exception else None,
            exception_message=str(exception) if exception else None,
        )

    backoff = wait_exponential_jitter(initial=min_wait, max=max_wait, jitter=min_wait)
    return retry(
        stop=stop_after_attempt(max_retries + 1),  # type: ignore[no-untyped-call]
        wait=wait_retry_after(backoff, max_wait),
        retry=retry_if_exception_type(retryable_exceptions),  # type: ignore[no-untyped-call]
        before_sleep=log_retry,
        reraise=True,
    )


# Settings are read once, when the provider module is imported
with_retry = create_retry_decorator()
