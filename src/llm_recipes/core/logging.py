"""Structured logging configuration using structlog.

Recipes call ``setup_logging()`` once at import time and then log
snake_case events (``llm_call``, ``tool_executed``, ``memory_evicted``)
with keyword context. Output is a colored console in development and
JSON lines when ``LLM_RECIPES_LOG_FORMAT=json``.
"""

import logging
import sys
from typing import Any, cast

import structlog

from llm_recipes.core.config import get_settings


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structured logging.

    Args:
        level: Log level override. Defaults to the configured level.
        log_format: "json" or "console". Defaults to the configured format.
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )
    # httpx logs every request at INFO, which drowns the recipe output
    logging.getLogger("httpx").setLevel(logging.WARNING)

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=cast(list[structlog.typing.Processor], processors),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger, optionally named after its module."""
    return structlog.get_logger(name)


class LogContext:
    """Bind context variables to every log line inside a ``with`` block.

    Example:
        with LogContext(memory_id="user-42", request_id="abc123"):
            assistant.chat("Hello")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())


def log_llm_call(
    logger: Any,
    provider: str,
    model: str,
    input_tokens: int | None = None,
    output_tokens: int | None = None,
    latency_ms: float | None = None,
    **kwargs: Any,
) -> None:
    """Log one chat-model call with token and latency metrics.

    Args:
        logger: The logger instance to use.
        provider: Endpoint name (e.g., "deepseek", "qwen").
        model: The model name used.
        input_tokens: Prompt tokens reported by the endpoint.
        output_tokens: Completion tokens reported by the endpoint.
        latency_ms: Request latency in milliseconds.
        **kwargs: Additional context to log.
    """
    total = None
    if input_tokens is not None or output_tokens is not None:
        total = (input_tokens or 0) + (output_tokens or 0)
    logger.info(
        "llm_call",
        provider=provider,
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=total,
        latency_ms=round(latency_ms, 1) if latency_ms is not None else None,
        **kwargs,
    )
