"""Tests for logging helpers."""

from unittest.mock import MagicMock

import structlog

from llm_recipes.core.logging import LogContext, log_llm_call


class TestLogContext:
    """Tests for LogContext."""

    def test_binds_and_unbinds(self) -> None:
        with LogContext(memory_id="user-42"):
            assert structlog.contextvars.get_contextvars()["memory_id"] == "user-42"
        assert "memory_id" not in structlog.contextvars.get_contextvars()


class TestLogLLMCall:
    """Tests for log_llm_call."""

    def test_total_tokens(self) -> None:
        """Test the total is derived from input and output tokens."""
        logger = MagicMock()

        log_llm_call(logger, "deepseek", "deepseek-chat", input_tokens=10, output_tokens=5, latency_ms=123.456)

        logger.info.assert_called_once_with(
            "llm_call",
            provider="deepseek",
            model="deepseek-chat",
            input_tokens=10,
            output_tokens=5,
            total_tokens=15,
            latency_ms=123.5,
        )

    def test_without_usage(self) -> None:
        logger = MagicMock()

        log_llm_call(logger, "qwen", "qwen-plus")

        assert logger.info.call_args.kwargs["total_tokens"] is None
