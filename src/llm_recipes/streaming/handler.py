"""Callback-driven consumption of streamed chat responses.

``stream_chat`` delivers partial text to ``on_partial`` as it arrives and
reports the end of the stream to ``on_complete`` or ``on_error``. Any
callback can stop generation through the ``StreamingHandle`` it receives.

Example:
    def on_partial(text, context):
        print(text, end="", flush=True)
        if too_long():
            context.handle.cancel()

    outcome = stream_chat(provider, messages, on_partial=on_partial)
"""

import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from llm_recipes.core.config import get_settings
from llm_recipes.core.errors import (
    AuthenticationError,
    LLMRecipesError,
    RateLimitError,
    RequestTimeoutError,
)
from llm_recipes.core.logging import get_logger
from llm_recipes.providers.base import BaseLLMProvider, Message, Usage

logger = get_logger(__name__)


class StreamingHandle:
    """Cancellation flag shared between a stream and whoever may stop it.

    Safe to cancel from any thread; the stream stops before delivering the
    next partial response.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        if not self._cancelled.is_set():
            self._cancelled.set()
            logger.info("stream_cancel_requested")

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()


@dataclass
class PartialResponseContext:
    """Passed to ``on_partial`` alongside each piece of text."""

    handle: StreamingHandle


@dataclass
class StreamOutcome:
    """How a stream ended and what it produced."""

    content: str
    finish_reason: str | None = None
    usage: Usage | None = None
    cancelled: bool = False
    error: LLMRecipesError | None = None
    partial_count: int = field(default=0, repr=False)


PartialCallback = Callable[[str, PartialResponseContext], None]
CompleteCallback = Callable[[StreamOutcome], None]
ErrorCallback = Callable[[LLMRecipesError], None]


def stream_chat(
    provider: BaseLLMProvider,
    messages: list[Message],
    *,
    on_partial: PartialCallback | None = None,
    on_complete: CompleteCallback | None = None,
    on_error: ErrorCallback | None = None,
    handle: StreamingHandle | None = None,
    **kwargs: Any,
) -> StreamOutcome:
    """Stream a chat response through callbacks.

    Args:
        provider: Chat model client.
        messages: Conversation to send.
        on_partial: Called with each piece of text and a context holding
            the streaming handle.
        on_complete: Called once when the stream finishes normally. Not
            called when the stream is cancelled or fails.
        on_error: Called with the error if the stream fails. Without it,
            the error is raised.
        handle: Handle to cancel the stream with. A new one is created if
            not given (reachable from ``on_partial``'s context).
        **kwargs: Extra parameters for ``provider.stream``.

    Returns:
        The outcome, including the text received before any cancellation.
    """
    handle = handle or StreamingHandle()
    context = PartialResponseContext(handle)
    parts: list[str] = []
    finish_reason: str | None = None
    usage: Usage | None = None

    stream = provider.stream(messages, **kwargs)
    try:
        for chunk in stream:
            if handle.is_cancelled:
                break
            if chunk.usage is not None:
                usage = chunk.usage
            if chunk.finish_reason:
                finish_reason = chunk.finish_reason
            if chunk.content:
                parts.append(chunk.content)
                if on_partial is not None:
                    on_partial(chunk.content, context)
    except LLMRecipesError as e:
        logger.warning("stream_failed", error_type=type(e).__name__, error=e.message)
        if on_error is None:
            raise
        on_error(e)
        return StreamOutcome("".join(parts), finish_reason, usage, cancelled=False, error=e, partial_count=len(parts))
    finally:
        close = getattr(stream, "close", None)
        if close is not None:
            close()

    outcome = StreamOutcome(
        content="".join(parts),
        finish_reason=finish_reason,
        usage=usage,
        cancelled=handle.is_cancelled,
        partial_count=len(parts),
    )
    if outcome.cancelled:
        logger.info("stream_cancelled", received_chars=len(outcome.content))
    else:
        logger.info(
            "stream_completed",
            chars=len(outcome.content),
            finish_reason=finish_reason,
            total_tokens=usage.total_tokens if usage else None,
        )
        if on_complete is not None:
            on_complete(outcome)
    return outcome


_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=get_settings().stream_max_workers,
                thread_name_prefix="llm-stream",
            )
        return _executor


def start_stream(
    provider: BaseLLMProvider,
    messages: list[Message],
    executor: Executor | None = None,
    **kwargs: Any,
) -> tuple[StreamingHandle, "Future[StreamOutcome]"]:
    """Run ``stream_chat`` on a background worker thread.

    Accepts the same keyword arguments as ``stream_chat``; callbacks run on
    the worker thread.

    Args:
        provider: Chat model client.
        messages: The conversation to send.
        executor: Pool to run on. Defaults to a shared pool of
            ``stream_max_workers`` threads.

    Returns:
        The handle to cancel the stream with, and a future for its outcome.
    """
    handle = kwargs.pop("handle", None) or StreamingHandle()
    future = (executor or _get_executor()).submit(stream_chat, provider, messages, handle=handle, **kwargs)
    return handle, future


def explain_stream_error(error: BaseException) -> str:
    """A human-readable hint for common streaming failures."""
    if isinstance(error, AuthenticationError):
        return "Authentication failed: check that the API key is set and valid"
    if isinstance(error, RateLimitError):
        return "Rate limit exceeded: slow down or retry later"
    if isinstance(error, RequestTimeoutError):
        return "Request timed out: check the network or raise the timeout"
    return f"Streaming failed: {error}"
