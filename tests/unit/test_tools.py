"""Tests for tool registration, dispatch and the tool loop."""

import json
from enum import Enum
from typing import Any, Literal

import pytest

from llm_recipes.core.errors import ToolLoopError
from llm_recipes.providers.base import Message, Role, ToolCall
from llm_recipes.tools import ToolRegistry, json_schema_for, run_tool_loop, tool


class Unit(Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


class Calculator:
    @tool("Adds two numbers")
    def add(self, a: int, b: int) -> int:
        return a + b

    @tool("Multiplies two numbers", a="first factor", b="second factor")
    def multiply(self, a: float, b: float) -> float:
        return a * b

    def not_a_tool(self) -> None:
        pass


def query_logistics(order_id: str, detailed: bool = False) -> dict[str, Any]:
    """Look up the shipping status of an order.

    Args:
        order_id: The order number, e.g. 20251216001.
        detailed: Whether to include every checkpoint.
    """
    if order_id != "20251216001":
        raise KeyError(f"No order {order_id}")
    return {"orderId": order_id, "status": "in transit"}


class TestJsonSchema:
    """Tests for type hint to JSON Schema mapping."""

    def test_primitives(self) -> None:
        assert json_schema_for(str) == {"type": "string"}
        assert json_schema_for(int) == {"type": "integer"}
        assert json_schema_for(bool) == {"type": "boolean"}

    def test_optional_and_list(self) -> None:
        assert json_schema_for(int | None) == {"type": "integer"}
        assert json_schema_for(list[str]) == {"type": "array", "items": {"type": "string"}}

    def test_enum_and_literal(self) -> None:
        assert json_schema_for(Unit) == {"type": "string", "enum": ["celsius", "fahrenheit"]}
        assert json_schema_for(Literal["a", "b"]) == {"enum": ["a", "b"], "type": "string"}


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_register_object_picks_marked_methods(self) -> None:
        """Test only @tool methods are registered, with their descriptions."""
        registry = ToolRegistry()
        definitions = registry.register_object(Calculator())

        assert sorted(d.name for d in definitions) == ["add", "multiply"]
        assert "not_a_tool" not in registry
        multiply = next(d for d in definitions if d.name == "multiply")
        assert multiply.description == "Multiplies two numbers"
        assert multiply.parameters["properties"]["a"] == {"type": "number", "description": "first factor"}
        assert multiply.parameters["required"] == ["a", "b"]

    def test_register_function_uses_docstring(self) -> None:
        """Test descriptions come from a Google-style docstring."""
        registry = ToolRegistry()
        definition = registry.register(query_logistics)

        assert definition.description == "Look up the shipping status of an order."
        assert definition.parameters["properties"]["order_id"]["description"].startswith("The order number")
        assert definition.parameters["required"] == ["order_id"]

    def test_execute(self) -> None:
        """Test a request runs the tool and JSON-encodes the result."""
        registry = ToolRegistry()
        registry.register(query_logistics)

        execution = registry.execute(ToolCall(id="c1", name="query_logistics", arguments='{"order_id": "20251216001"}'))

        assert not execution.failed
        assert json.loads(execution.result) == {"orderId": "20251216001", "status": "in transit"}

    def test_execute_reports_errors(self) -> None:
        """Test failures are returned to the model instead of raised."""
        registry = ToolRegistry()
        registry.register(query_logistics)

        unknown = registry.execute(ToolCall(id="c1", name="refund", arguments="{}"))
        bad_json = registry.execute(ToolCall(id="c2", name="query_logistics", arguments="{order"))
        raised = registry.execute(ToolCall(id="c3", name="query_logistics", arguments='{"order_id": "1"}'))

        assert json.loads(unknown.result) == {"error": "Unknown tool: refund"}
        assert bad_json.failed and "Invalid JSON arguments" in bad_json.result
        assert raised.failed and "No order 1" in raised.result


class TestToolLoop:
    """Tests for run_tool_loop."""

    def test_loop_executes_and_answers(self, make_provider: Any, tool_call_response: Any) -> None:
        """Test the request, execute and respond sequence."""
        provider = make_provider(
            responses=[
                tool_call_response(("c1", "add", '{"a": 1, "b": 2}'), ("c2", "multiply", '{"a": 3, "b": 4}')),
                "1+2 is 3 and 3*4 is 12",
            ]
        )
        registry = ToolRegistry()
        registry.register_object(Calculator())

        result = run_tool_loop(provider, [Message.user("1+2 and 3*4?")], registry)

        assert result.response.content == "1+2 is 3 and 3*4 is 12"
        assert [e.result for e in result.executions] == ["3", "12"]
        assert [m.role for m in result.new_messages] == [Role.ASSISTANT, Role.TOOL, Role.TOOL, Role.ASSISTANT]
        assert result.usage is not None
        assert result.usage.input_tokens == 30

        second_request = provider.calls[1]["messages"]
        assert [m.tool_call_id for m in second_request[-2:]] == ["c1", "c2"]
        assert {t.name for t in provider.calls[0]["tools"]} == {"add", "multiply"}

    def test_no_tool_calls(self, make_provider: Any) -> None:
        """Test a direct answer produces only the final message."""
        provider = make_provider(responses=["Hello"])
        registry = ToolRegistry()
        registry.register_object(Calculator())

        result = run_tool_loop(provider, [Message.user("Hi")], registry)

        assert result.executions == []
        assert [m.text for m in result.new_messages] == ["Hello"]

    def test_round_limit(self, make_provider: Any, tool_call_response: Any) -> None:
        """Test the loop gives up when the model keeps requesting tools."""
        provider = make_provider(responses=[tool_call_response((f"c{i}", "add", '{"a": 1, "b": 1}')) for i in range(5)])
        registry = ToolRegistry()
        registry.register_object(Calculator())

        with pytest.raises(ToolLoopError):
            run_tool_loop(provider, [Message.user("loop")], registry, max_rounds=2)
