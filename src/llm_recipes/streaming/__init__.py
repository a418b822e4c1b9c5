"""Streaming chat responses with callbacks and cancellation."""

from llm_recipes.streaming.handler import (
    PartialResponseContext,
    StreamingHandle,
    StreamOutcome,
    explain_stream_error,
    start_stream,
    stream_chat,
)
from llm_recipes.streaming.registry import StreamRegistry

__all__ = [
    "PartialResponseContext",
    "StreamOutcome",
    "StreamRegistry",
    "StreamingHandle",
    "explain_stream_error",
    "start_stream",
    "stream_chat",
]
