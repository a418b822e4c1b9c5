"""Streaming Chat Example.

Streaming shows the answer while it is being generated. This example
consumes streams through callbacks and stops them early when needed.

Features demonstrated:
- on_partial / on_complete / on_error callbacks
- Human-readable hints for authentication, rate-limit and timeout errors
- Cancelling from inside a callback once enough text has arrived
- Cancelling from another thread after a delay
- Running a stream in the background and waiting on its future
- Taking only the first pieces of an assistant's token stream
"""

import itertools
import threading

from llm_recipes import Message, get_logger, get_provider, setup_logging
from llm_recipes.core.errors import LLMRecipesError
from llm_recipes.providers import BaseLLMProvider
from llm_recipes.services import Assistant
from llm_recipes.streaming import (
    PartialResponseContext,
    StreamOutcome,
    explain_stream_error,
    start_stream,
    stream_chat,
)

setup_logging()
logger = get_logger(__name__)

LONG_STORY = [Message.user("Tell me a very long story about a lighthouse keeper.")]


def print_partial(text: str, _context: PartialResponseContext) -> None:
    print(text, end="", flush=True)


def callback_streaming(provider: BaseLLMProvider) -> StreamOutcome:
    """Stream a short answer through the three callbacks."""

    def on_complete(outcome: StreamOutcome) -> None:
        usage = outcome.usage.total_tokens if outcome.usage else "n/a"
        print(f"\n\n[complete] finish_reason={outcome.finish_reason} total_tokens={usage}")

    def on_error(error: LLMRecipesError) -> None:
        print(f"\n[error] {explain_stream_error(error)}")

    return stream_chat(
        provider,
        [Message.user("Write a haiku about the sea.")],
        on_partial=print_partial,
        on_complete=on_complete,
        on_error=on_error,
    )


def cancel_after_characters(provider: BaseLLMProvider, max_chars: int = 500) -> StreamOutcome:
    """Stop the stream once ``max_chars`` characters have arrived."""
    received = 0

    def on_partial(text: str, context: PartialResponseContext) -> None:
        nonlocal received
        print(text, end="", flush=True)
        received += len(text)
        if received >= max_chars:
            print("\n\n--- Length limit reached, cancelling ---")
            context.handle.cancel()

    outcome = stream_chat(provider, LONG_STORY, on_partial=on_partial)
    logger.info("stream_stopped", cancelled=outcome.cancelled, chars=len(outcome.content))
    return outcome


def cancel_after_delay(provider: BaseLLMProvider, seconds: float = 3.0) -> StreamOutcome:
    """Cancel from a timer thread, as a user pressing "stop" would."""
    handle, future = start_stream(provider, LONG_STORY, on_partial=print_partial)

    def user_cancels() -> None:
        print("\n\n--- User cancelled ---")
        handle.cancel()

    timer = threading.Timer(seconds, user_cancels)
    timer.start()
    try:
        return future.result()
    finally:
        timer.cancel()


def background_stream(provider: BaseLLMProvider) -> str:
    """Stream on a worker thread while the caller does other work."""
    _, future = start_stream(provider, [Message.user("List three uses of Redis.")])
    logger.info("stream_started_in_background")
    outcome = future.result(timeout=120)
    return outcome.content


def first_pieces(provider: BaseLLMProvider, count: int = 10) -> list[str]:
    """Take only the first ``count`` pieces of an assistant's stream.

    Closing the generator early ends the request; the partial answer is
    not stored in memory.
    """
    stream = Assistant(provider).stream("Count from 1 to 100, one number per line.")
    try:
        return list(itertools.islice(stream, count))
    finally:
        stream.close()


def main() -> None:
    """Run the streaming examples."""
    print("=" * 60)
    print("Streaming Chat Example")
    print("=" * 60)

    provider = get_provider()

    print("\n--- Callbacks ---")
    callback_streaming(provider)

    print("\n--- Cancel by Length ---")
    cancel_after_characters(provider)

    print("\n--- Cancel by Timer ---")
    outcome = cancel_after_delay(provider)
    print(f"\nReceived {len(outcome.content)} characters before cancelling")

    print("\n--- Background Stream ---")
    print(background_stream(provider))

    print("\n--- First Pieces Only ---")
    print(first_pieces(provider))


if __name__ == "__main__":
    main()
