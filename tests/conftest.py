"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator, Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest

from llm_recipes.core.errors import LLMRecipesError
from llm_recipes.providers.base import (
    BaseLLMProvider,
    CompletionChunk,
    CompletionResponse,
    Message,
    ToolCall,
    ToolDefinition,
    Usage,
)


@pytest.fixture(autouse=True)
def mock_env() -> None:
    """Clear cached settings between tests."""
    from llm_recipes.core.config import get_settings

    get_settings.cache_clear()


class ScriptedProvider(BaseLLMProvider):
    """Chat model fake that replays queued responses and records requests."""

    provider_name = "scripted"
    default_model = "scripted-model"

    def __init__(
        self,
        responses: list[CompletionResponse | str] | None = None,
        stream_parts: list[str] | None = None,
        stream_error: LLMRecipesError | None = None,
        embeddings: dict[str, list[float]] | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.stream_parts = stream_parts or []
        self.stream_error = stream_error
        self.embeddings = embeddings or {}
        self.calls: list[dict[str, Any]] = []
        self.chunks_delivered = 0

    def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> CompletionResponse:
        self.calls.append(
            {
                "messages": list(messages),
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "tools": tools,
                **kwargs,
            }
        )
        response = self.responses.pop(0) if self.responses else "ok"
        if isinstance(response, str):
            return CompletionResponse(
                content=response,
                model=self.default_model,
                usage=Usage(input_tokens=10, output_tokens=5),
                finish_reason="stop",
            )
        return response

    async def complete_async(self, messages: list[Message], **kwargs: Any) -> CompletionResponse:  # type: ignore[override]
        return self.complete(messages, **kwargs)

    def stream(self, messages: list[Message], **kwargs: Any) -> Iterator[CompletionChunk]:  # type: ignore[override]
        self.calls.append({"messages": list(messages), **kwargs})
        for part in self.stream_parts:
            self.chunks_delivered += 1
            yield CompletionChunk(content=part)
        if self.stream_error is not None:
            raise self.stream_error
        yield CompletionChunk(content=None, finish_reason="stop", usage=Usage(input_tokens=7, output_tokens=len(self.stream_parts)))

    async def stream_async(self, messages: list[Message], **kwargs: Any) -> AsyncIterator[CompletionChunk]:  # type: ignore[override]
        for chunk in self.stream(messages, **kwargs):
            yield chunk

    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        self.calls.append({"embed": list(texts), "model": model})
        return [self.embeddings.get(text, [0.0, 0.0, 1.0]) for text in texts]

    def list_models(self) -> list[str]:
        return [self.default_model]


def tool_call_response(*calls: tuple[str, str, str]) -> CompletionResponse:
    """A response that requests tools, given (id, name, arguments) tuples."""
    return CompletionResponse(
        content=None,
        model="scripted-model",
        usage=Usage(input_tokens=20, output_tokens=8),
        tool_calls=[ToolCall(id=i, name=n, arguments=a) for i, n, a in calls],
        finish_reason="tool_calls",
    )


@pytest.fixture
def scripted_provider() -> ScriptedProvider:
    """A scripted provider with no queued responses (answers "ok")."""
    return ScriptedProvider()


@pytest.fixture
def make_provider() -> type[ScriptedProvider]:
    """The scripted provider class, for tests that queue responses."""
    return ScriptedProvider


@pytest.fixture(name="tool_call_response")
def tool_call_response_fixture() -> Any:
    """Builder for responses that request tools."""
    return tool_call_response


@pytest.fixture
def mock_openai_client() -> MagicMock:
    """Create a mock OpenAI client."""
    mock_client = MagicMock()

    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = "Mock response"
    mock_response.choices[0].message.tool_calls = None
    mock_response.choices[0].finish_reason = "stop"
    mock_response.usage.prompt_tokens = 10
    mock_response.usage.completion_tokens = 20
    mock_response.model = "deepseek-chat"
    mock_client.chat.completions.create.return_value = mock_response

    mock_models = MagicMock()
    mock_models.data = [MagicMock(id="deepseek-chat"), MagicMock(id="deepseek-reasoner")]
    mock_client.models.list.return_value = mock_models

    return mock_client


@pytest.fixture
def mock_redis() -> MagicMock:
    """A MagicMock Redis client backed by a dict of lists."""
    lists: dict[str, list[str]] = {}
    client = MagicMock()

    client.lrange.side_effect = lambda key, start, end: list(lists.get(key, []))
    client.delete.side_effect = lambda key: int(lists.pop(key, None) is not None)

    pipe = MagicMock()
    ops: list[tuple[str, tuple[Any, ...]]] = []
    pipe.delete.side_effect = lambda key: ops.append(("delete", (key,)))
    pipe.rpush.side_effect = lambda key, *values: ops.append(("rpush", (key, *values)))

    def execute() -> list[Any]:
        for name, args in ops:
            if name == "delete":
                lists.pop(args[0], None)
            else:
                lists.setdefault(args[0], []).extend(args[1:])
        ops.clear()
        return []

    pipe.execute.side_effect = execute
    client.pipeline.return_value = pipe
    client.lists = lists
    return client
