"""Tool calling: registration, dispatch and the tool loop."""

from llm_recipes.tools.loop import ToolLoopResult, run_tool_loop
from llm_recipes.tools.registry import ToolExecution, ToolRegistry, ToolSpec, json_schema_for, tool

__all__ = [
    "ToolExecution",
    "ToolLoopResult",
    "ToolRegistry",
    "ToolSpec",
    "json_schema_for",
    "run_tool_loop",
    "tool",
]
