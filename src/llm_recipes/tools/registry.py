"""Tool registration and dispatch.

Plain Python functions become model-callable tools. The JSON Schema for
their parameters is generated from the signature and type hints, and
descriptions come from the ``@tool`` decorator or the Google-style
docstring.

Example:
    class Calculator:
        @tool("Adds two numbers")
        def add(self, a: int, b: int) -> int:
            return a + b

    registry = ToolRegistry()
    registry.register_object(Calculator())
"""

import enum
import inspect
import json
import re
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, Union, get_args, get_origin, get_type_hints

from llm_recipes.core.logging import get_logger
from llm_recipes.providers.base import ToolCall, ToolDefinition

logger = get_logger(__name__)

TOOL_MARKER = "__llm_tool__"

_JSON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    tuple: "array",
    set: "array",
    dict: "object",
}


@dataclass
class ToolSpec:
    """Metadata attached to a function by ``@tool``."""

    description: str | None = None
    name: str | None = None
    param_descriptions: dict[str, str] | None = None


@dataclass
class ToolExecution:
    """One tool request from the model and the result sent back."""

    request: ToolCall
    result: str

    @property
    def failed(self) -> bool:
        """Whether the result is an error report."""
        return self.result.startswith('{"error"')


def tool(description: str | None = None, *, name: str | None = None, **param_descriptions: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a function or method as a tool.

    Args:
        description: What the tool does. Defaults to the docstring summary.
        name: Tool name. Defaults to the function name.
        **param_descriptions: Per-parameter descriptions.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, TOOL_MARKER, ToolSpec(description, name, param_descriptions or None))
        return func

    return decorator


def _docstring_args(doc: str) -> dict[str, str]:
    """Parse the ``Args:`` section of a Google-style docstring."""
    params: dict[str, str] = {}
    in_args = False
    for line in doc.splitlines():
        stripped = line.strip()
        if stripped in ("Args:", "Arguments:"):
            in_args = True
            continue
        if in_args:
            if not stripped or (stripped.endswith(":") and " " not in stripped):
                if params:
                    break
                continue
            match = re.match(r"^(\w+)(?:\s*\([^)]*\))?:\s*(.+)$", stripped)
            if match:
                params[match.group(1)] = match.group(2)
    return params


def json_schema_for(annotation: Any) -> dict[str, Any]:
    """Map a Python type hint to a JSON Schema fragment."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return {}

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin in (Union, types.UnionType):
        non_null = [a for a in args if a is not type(None)]
        return json_schema_for(non_null[0]) if len(non_null) == 1 else {}

    if origin is Literal:
        schema: dict[str, Any] = {"enum": list(args)}
        if args and type(args[0]) in _JSON_TYPES:
            schema["type"] = _JSON_TYPES[type(args[0])]
        return schema

    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return {"type": "string", "enum": [member.value for member in annotation]}

    if origin in (list, tuple, set):
        schema = {"type": "array"}
        if args:
            schema["items"] = json_schema_for(args[0])
        return schema

    if origin is dict:
        return {"type": "object"}

    json_type = _JSON_TYPES.get(annotation)
    return {"type": json_type} if json_type else {}


@dataclass
class _RegisteredTool:
    definition: ToolDefinition
    func: Callable[..., Any]


class ToolRegistry:
    """Holds the tools offered to the model and executes its requests."""

    def __init__(self) -> None:
        self._tools: dict[str, _RegisteredTool] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register(
        self,
        func: Callable[..., Any],
        description: str | None = None,
        name: str | None = None,
        param_descriptions: dict[str, str] | None = None,
    ) -> ToolDefinition:
        """Register a callable as a tool.

        Arguments given here override those from ``@tool``, which override
        the docstring.

        Returns:
            The generated tool definition.
        """
        marker: ToolSpec = getattr(func, TOOL_MARKER, None) or ToolSpec()
        doc = inspect.getdoc(func) or ""

        tool_name = name or marker.name or func.__name__
        tool_description = description or marker.description or doc.split("\n\n")[0].strip() or tool_name
        descriptions = {**_docstring_args(doc), **(marker.param_descriptions or {}), **(param_descriptions or {})}

        try:
            hints = get_type_hints(func)
        except (NameError, TypeError):
            hints = {}

        properties: dict[str, Any] = {}
        required: list[str] = []
        for param in inspect.signature(func).parameters.values():
            if param.name in ("self", "cls") or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            schema = json_schema_for(hints.get(param.name, param.annotation))
            if param.name in descriptions:
                schema["description"] = descriptions[param.name]
            properties[param.name] = schema
            if param.default is inspect.Parameter.empty:
                required.append(param.name)

        definition = ToolDefinition(
            name=tool_name,
            description=tool_description,
            parameters={"type": "object", "properties": properties, "required": required},
        )
        self._tools[tool_name] = _RegisteredTool(definition, func)
        logger.debug("tool_registered", tool=tool_name, parameters=list(properties))
        return definition

    def register_object(self, obj: object) -> list[ToolDefinition]:
        """Register every ``@tool``-marked method of ``obj``."""
        definitions = []
        for attr_name, _ in inspect.getmembers(type(obj), predicate=callable):
            if attr_name.startswith("__"):
                continue
            bound = getattr(obj, attr_name)
            if getattr(bound, TOOL_MARKER, None) is not None:
                definitions.append(self.register(bound))
        return definitions

    def definitions(self) -> list[ToolDefinition]:
        """Tool definitions to send with a chat request."""
        return [registered.definition for registered in self._tools.values()]

    def execute(self, call: ToolCall) -> ToolExecution:
        """Run one tool request.

        Failures (unknown tool, bad JSON arguments, exceptions raised by the
        tool) are reported to the model as ``{"error": ...}`` results rather
        than raised, so it can correct itself.
        """
        registered = self._tools.get(call.name)
        if registered is None:
            result = json.dumps({"error": f"Unknown tool: {call.name}"})
            logger.warning("tool_unknown", tool=call.name)
            return ToolExecution(call, result)

        try:
            arguments = call.parsed_arguments()
        except json.JSONDecodeError as e:
            logger.warning("tool_arguments_invalid", tool=call.name, arguments=call.arguments)
            return ToolExecution(call, json.dumps({"error": f"Invalid JSON arguments: {e}"}))

        try:
            value = registered.func(**arguments)
        except Exception as e:
            logger.warning("tool_failed", tool=call.name, error=str(e))
            return ToolExecution(call, json.dumps({"error": str(e)}, ensure_ascii=False))

        result = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
        logger.info("tool_executed", tool=call.name, arguments=arguments)
        return ToolExecution(call, result)

