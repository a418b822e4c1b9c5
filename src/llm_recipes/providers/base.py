"""Chat-model interface and message types.

This module defines the provider-agnostic types every recipe works with:
messages (including multimodal content parts), tool definitions and calls,
token usage, and the ``BaseLLMProvider`` interface.
"""

import base64
import json
import mimetypes
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

ContentPart = dict[str, Any]


class Role(str, Enum):
    """Message roles in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


def text_part(text: str) -> ContentPart:
    """Build a text content part."""
    return {"type": "text", "text": text}


def image_part(url: str, detail: str = "auto") -> ContentPart:
    """Build an image content part from an http(s) or data URL."""
    return {"type": "image_url", "image_url": {"url": url, "detail": detail}}


def image_part_from_bytes(data: bytes, mime_type: str = "image/png", detail: str = "auto") -> ContentPart:
    """Build an image content part from raw bytes (sent base64-encoded)."""
    encoded = base64.b64encode(data).decode("ascii")
    return image_part(f"data:{mime_type};base64,{encoded}", detail=detail)


def image_part_from_file(path: str | Path, detail: str = "auto") -> ContentPart:
    """Build an image content part from a local file."""
    path = Path(path)
    mime_type = mimetypes.guess_type(path.name)[0] or "image/png"
    return image_part_from_bytes(path.read_bytes(), mime_type=mime_type, detail=detail)


def video_part(url: str) -> ContentPart:
    """Build a video content part (supported by Qwen-VL style endpoints)."""
    return {"type": "video_url", "video_url": {"url": url}}


@dataclass
class ToolCall:
    """A tool call made by the model."""

    id: str
    name: str
    arguments: str  # JSON string

    def parsed_arguments(self) -> dict[str, Any]:
        """Decode the JSON arguments (empty string means no arguments)."""
        return json.loads(self.arguments) if self.arguments.strip() else {}

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to the assistant-message ``tool_calls`` entry format."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class Message:
    """A message in a conversation.

    ``content`` is plain text, a list of content parts for multimodal user
    messages, or None for an assistant message that only requests tools.
    """

    role: Role
    content: str | list[ContentPart] | None
    name: str | None = None
    tool_call_id: str | None = None
    tool_calls: list[dict[str, Any]] | None = None

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str, name: str | None = None) -> "Message":
        """Create a user message."""
        return cls(role=Role.USER, content=content, name=name)

    @classmethod
    def user_parts(cls, *parts: ContentPart | str) -> "Message":
        """Create a multimodal user message; strings become text parts."""
        return cls(
            role=Role.USER,
            content=[text_part(p) if isinstance(p, str) else p for p in parts],
        )

    @classmethod
    def assistant(cls, content: str | None) -> "Message":
        """Create an assistant message."""
        return cls(role=Role.ASSISTANT, content=content)

    @classmethod
    def assistant_tool_calls(cls, tool_calls: list[ToolCall], content: str | None = None) -> "Message":
        """Create the assistant message that carries tool requests."""
        return cls(
            role=Role.ASSISTANT,
            content=content,
            tool_calls=[tc.to_openai_format() for tc in tool_calls],
        )

    @classmethod
    def tool(cls, content: str, tool_call_id: str, name: str | None = None) -> "Message":
        """Create a tool result message."""
        return cls(role=Role.TOOL, content=content, tool_call_id=tool_call_id, name=name)

    @property
    def text(self) -> str:
        """Text content, joining the text parts of a multimodal message."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(p.get("text", "") for p in self.content if p.get("type") == "text")

    def requested_tool_call_ids(self) -> list[str]:
        """Ids of the tool calls this assistant message requested."""
        return [tc["id"] for tc in self.tool_calls or []]


@dataclass
class ToolDefinition:
    """Definition of a tool/function the model can call."""

    name: str
    description: str
    parameters: dict[str, Any]

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI tools API format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass
class Usage:
    """Token usage statistics."""

    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        """Total tokens used."""
        return self.input_tokens + self.output_tokens

    def __add__(self, other: "Usage | None") -> "Usage":
        if other is None:
            return self
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )


@dataclass
class CompletionResponse:
    """Response from a completion request."""

    content: str | None
    model: str
    usage: Usage | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
    raw_response: Any = None


@dataclass
class CompletionChunk:
    """A chunk from a streaming completion response.

    The final chunk may carry ``usage`` when the endpoint reports it.
    """

    content: str | None
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
    usage: Usage | None = None


class BaseLLMProvider(ABC):
    """Interface for chat-model clients.

    Recipes and the toolkit depend on this interface only, which keeps them
    testable with scripted fakes.
    """

    provider_name: str = "base"
    default_model: str = ""

    @abstractmethod
    def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> CompletionResponse:
        """Generate a completion for the given messages.

        Args:
            messages: The conversation history.
            model: The model to use. Defaults to provider's default.
            temperature: Sampling temperature (0-2).
            max_tokens: Maximum tokens to generate.
            tools: Available tools for function calling.
            **kwargs: Additional request parameters (e.g. response_format).

        Returns:
            The completion response.
        """
        ...

    @abstractmethod
    async def complete_async(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> CompletionResponse:
        """Async version of complete()."""
        ...

    @abstractmethod
    def stream(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> Iterator[CompletionChunk]:
        """Stream a completion for the given messages.

        Yields:
            Completion chunks as they arrive.
        """
        ...

    @abstractmethod
    def stream_async(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[CompletionChunk]:
        """Async version of stream()."""
        ...

    @abstractmethod
    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Embed texts, returning one vector per input in input order."""
        ...

    @abstractmethod
    def list_models(self) -> list[str]:
        """List model identifiers served by the endpoint."""
        ...
