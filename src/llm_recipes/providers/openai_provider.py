"""OpenAI-compatible chat model client.

One client class serves every endpoint the recipes use (OpenAI, DeepSeek,
Qwen/DashScope and the public demo proxy), since they all speak the OpenAI
chat-completions protocol. SDK exceptions are translated into the
llm-recipes error hierarchy, including errors raised mid-stream.
"""

import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from collections.abc import AsyncIterator, Iterator
from typing import Any, NoReturn, cast

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI, OpenAI
from openai import RateLimitError as OpenAIRateLimitError

from llm_recipes.core.config import get_settings
from llm_recipes.core.errors import (
    AuthenticationError,
    ConfigurationError,
    ContentFilterError,
    ContextLengthError,
    LLMRecipesError,
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    RequestTimeoutError,
    ServiceUnavailableError,
)
from llm_recipes.core.logging import get_logger, log_llm_call
from llm_recipes.core.retry import with_retry
from llm_recipes.providers.base import (
    BaseLLMProvider,
    CompletionChunk,
    CompletionResponse,
    Message,
    ToolCall,
    ToolDefinition,
    Usage,
)
from llm_recipes.providers.endpoints import get_endpoint

logger = get_logger(__name__)


def _retry_after_seconds(value: str | None) -> float | None:
    """Parse a ``retry-after`` header given as seconds or as an HTTP date."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)


class OpenAIProvider(BaseLLMProvider):  # type: ignore[misc]
    """Client for any OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        endpoint: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Preset name ("openai", "deepseek", "qwen", "demo").
                Defaults to the configured default endpoint.
            api_key: API key. Defaults to the key configured for the endpoint.
            base_url: Override the preset's base URL.
            default_model: Model used when a call does not name one.
            timeout: Request timeout in seconds.

        Raises:
            ConfigurationError: If no API key is available for the endpoint.
        """
        settings = get_settings()
        preset = get_endpoint(endpoint or settings.default_endpoint)

        self.provider_name = preset.name
        self.preset = preset
        self.base_url = base_url or preset.base_url
        self.api_key = api_key or settings.api_key_for(preset.name)
        if not self.api_key:
            raise ConfigurationError(
                f"{preset.api_key_env} is not set",
                {"endpoint": preset.name},
            )

        if default_model:
            self.default_model = default_model
        elif endpoint is None and settings.default_model:
            self.default_model = settings.default_model
        else:
            self.default_model = preset.default_model

        self.default_temperature = settings.default_temperature
        self.default_max_tokens = settings.default_max_tokens
        self.timeout = timeout if timeout is not None else settings.request_timeout

        self._client = OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        self._async_client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)

    def _convert_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Convert Message objects to OpenAI API format."""
        result = []
        for msg in messages:
            converted: dict[str, Any] = {
                "role": msg.role.value,
                "content": msg.content,
            }
            # "name" on a tool message is our bookkeeping, not part of the protocol
            if msg.name and msg.tool_call_id is None:
                converted["name"] = msg.name
            if msg.tool_call_id:
                converted["tool_call_id"] = msg.tool_call_id
            if msg.tool_calls:
                converted["tool_calls"] = msg.tool_calls
            result.append(converted)
        return result

    def _convert_tools(self, tools: list[ToolDefinition] | None) -> list[dict[str, Any]] | None:
        if not tools:
            return None
        return [tool.to_openai_format() for tool in tools]

    def _request_params(
        self,
        messages: list[Message],
        model: str | None,
        temperature: float | None,
        max_tokens: int | None,
        tools: list[ToolDefinition] | None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": self._convert_messages(messages),
            "temperature": temperature if temperature is not None else self.default_temperature,
            "max_tokens": max_tokens or self.default_max_tokens,
            **kwargs,
        }
        converted_tools = self._convert_tools(tools)
        if converted_tools:
            params["tools"] = converted_tools
        return params

    def _handle_error(self, error: Exception, model: str | None = None) -> NoReturn:
        """Convert an OpenAI SDK error into an llm-recipes error."""
        if isinstance(error, LLMRecipesError):
            raise error
        if isinstance(error, OpenAIRateLimitError):
            retry_after = error.response.headers.get("retry-after") if error.response is not None else None
            raise RateLimitError(
                str(error),
                provider=self.provider_name,
                retry_after=_retry_after_seconds(retry_after),
            ) from error
        if isinstance(error, APIStatusError):
            text = str(error).lower()
            if error.status_code == 401:
                raise AuthenticationError(str(error), provider=self.provider_name) from error
            if error.status_code == 404:
                raise ModelNotFoundError(model=model or "unknown", provider=self.provider_name) from error
            if error.status_code == 400 and ("context_length" in text or "maximum context" in text):
                raise ContextLengthError(str(error), provider=self.provider_name) from error
            if error.status_code == 400 and ("content_filter" in text or "content exists risk" in text):
                raise ContentFilterError(str(error), provider=self.provider_name) from error
            if error.status_code >= 500:
                raise ServiceUnavailableError(
                    str(error),
                    {"provider": self.provider_name, "status_code": error.status_code},
                ) from error
            raise ProviderError(str(error), provider=self.provider_name, details={"status_code": error.status_code}) from error
        if isinstance(error, APITimeoutError):
            raise RequestTimeoutError(
                f"Request timed out after {self.timeout}s",
                {"provider": self.provider_name},
            ) from error
        if isinstance(error, APIConnectionError):
            raise ProviderError(f"Connection error: {error}", provider=self.provider_name) from error
        raise ProviderError(str(error), provider=self.provider_name) from error

    def _parse_response(self, response: Any, model: str, start_time: float) -> CompletionResponse:
        latency_ms = (time.time() - start_time) * 1000
        choice = response.choices[0]

        tool_calls = [
            ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or "")
            for tc in choice.message.tool_calls or []
            if getattr(tc, "function", None)
        ]

        usage = None
        if response.usage:
            usage = Usage(
                input_tokens=response.usage.prompt_tokens,
                output_tokens=response.usage.completion_tokens,
            )
        log_llm_call(
            logger,
            provider=self.provider_name,
            model=model,
            input_tokens=usage.input_tokens if usage else None,
            output_tokens=usage.output_tokens if usage else None,
            latency_ms=latency_ms,
            finish_reason=choice.finish_reason,
            tool_calls=len(tool_calls),
        )

        return CompletionResponse(
            content=choice.message.content,
            model=response.model,
            usage=usage,
            tool_calls=tool_calls,
            finish_reason=choice.finish_reason,
            raw_response=response,
        )

    def _parse_chunk(self, chunk: Any) -> CompletionChunk | None:
        usage = None
        if getattr(chunk, "usage", None):
            usage = Usage(
                input_tokens=chunk.usage.prompt_tokens,
                output_tokens=chunk.usage.completion_tokens,
            )
        if not chunk.choices:
            return CompletionChunk(content=None, usage=usage) if usage else None

        choice = chunk.choices[0]
        delta = choice.delta
        tool_calls = [
            ToolCall(
                id=tc.id or "",
                name=tc.function.name or "",
                arguments=tc.function.arguments or "",
            )
            for tc in delta.tool_calls or []
            if tc.function
        ]
        return CompletionChunk(
            content=delta.content,
            tool_calls=tool_calls,
            finish_reason=choice.finish_reason,
            usage=usage,
        )

    @with_retry  # type: ignore[untyped-decorator]
    def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> CompletionResponse:
        """Generate a completion."""
        params = self._request_params(messages, model, temperature, max_tokens, tools, **kwargs)
        start_time = time.time()
        try:
            response = self._client.chat.completions.create(**cast(Any, params))
        except Exception as e:
            self._handle_error(e, params["model"])
        return self._parse_response(response, params["model"], start_time)

    async def complete_async(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> CompletionResponse:
        """Async completion."""
        params = self._request_params(messages, model, temperature, max_tokens, tools, **kwargs)
        start_time = time.time()
        try:
            response = await self._async_client.chat.completions.create(**cast(Any, params))
        except Exception as e:
            self._handle_error(e, params["model"])
        return self._parse_response(response, params["model"], start_time)

    def stream(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> Iterator[CompletionChunk]:
        """Stream a completion.

        Errors raised while the response is still arriving are translated
        the same way as errors raised when the request is sent.
        """
        kwargs.setdefault("stream_options", {"include_usage": True})
        params = self._request_params(messages, model, temperature, max_tokens, tools, **kwargs)
        start_time = time.time()
        chunks = 0
        response = None
        try:
            response = self._client.chat.completions.create(stream=True, **cast(Any, params))
            for raw in response:
                chunk = self._parse_chunk(raw)
                if chunk is not None:
                    chunks += 1
                    yield chunk
        except Exception as e:
            self._handle_error(e, params["model"])
        finally:
            # Also runs when the consumer stops early; frees the HTTP connection
            if response is not None:
                response.close()
        logger.debug(
            "llm_stream_finished",
            provider=self.provider_name,
            model=params["model"],
            chunks=chunks,
            latency_ms=round((time.time() - start_time) * 1000, 1),
        )

    async def stream_async(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[CompletionChunk]:
        """Async stream a completion."""
        kwargs.setdefault("stream_options", {"include_usage": True})
        params = self._request_params(messages, model, temperature, max_tokens, tools, **kwargs)
        response = None
        try:
            response = await self._async_client.chat.completions.create(stream=True, **cast(Any, params))
            async for raw in response:
                chunk = self._parse_chunk(raw)
                if chunk is not None:
                    yield chunk
        except Exception as e:
            self._handle_error(e, params["model"])
        finally:
            if response is not None:
                await response.close()

    @with_retry  # type: ignore[untyped-decorator]
    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Embed a batch of texts.

        Args:
            texts: Texts to embed.
            model: Embedding model. Defaults to the endpoint preset's model.

        Returns:
            One vector per input, in input order.
        """
        model = model or self.preset.embedding_model or get_settings().embedding_model
        start_time = time.time()
        try:
            response = self._client.embeddings.create(model=model, input=texts, encoding_format="float")
        except Exception as e:
            self._handle_error(e, model)
        logger.debug(
            "embedding_call",
            provider=self.provider_name,
            model=model,
            inputs=len(texts),
            latency_ms=round((time.time() - start_time) * 1000, 1),
        )
        return [item.embedding for item in sorted(response.data, key=lambda d: d.index)]

    def list_models(self) -> list[str]:
        """List models served by the endpoint."""
        try:
            models = self._client.models.list()
            return sorted(m.id for m in models.data)
        except Exception as e:
            logger.warning("list_models_failed", provider=self.provider_name, error=str(e))
            return [self.default_model]
