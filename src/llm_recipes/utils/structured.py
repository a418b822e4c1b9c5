"""Typed answers from free-text model output.

A chat model only returns text. To get a ``bool``, an ``Enum`` member, a
list of strings or a Pydantic model back, the user message is extended
with ``format_instructions(output_type)`` and the reply is parsed with
``parse_output(text, output_type)``.
"""

import json
import re
from enum import Enum
from typing import Any, TypeVar, get_args, get_origin

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from llm_recipes.core.errors import OutputParsingError

ModelT = TypeVar("ModelT", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=Enum)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)
_TRUE_WORDS = {"true", "yes", "y", "1", "是", "对"}
_FALSE_WORDS = {"false", "no", "n", "0", "否", "不是"}


def _type_name(output_type: Any) -> str:
    return getattr(output_type, "__name__", str(output_type))


def extract_json(text: str) -> Any:
    """Parse JSON from model output, tolerating code fences and chatter.

    Raises:
        OutputParsingError: If no JSON value can be decoded.
    """
    candidate = text.strip()
    fenced = _CODE_FENCE.match(candidate)
    if fenced:
        candidate = fenced.group(1)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    # Fall back to the outermost object or array embedded in prose
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = candidate.find(opener), candidate.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(candidate[start : end + 1])
            except json.JSONDecodeError:
                continue
    raise OutputParsingError("Model output is not valid JSON", raw_output=text, target="json")


def parse_bool(text: str) -> bool:
    """Parse a yes/no style answer."""
    word = text.strip().strip("`'\".!。 ").lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    first = re.split(r"[\s,.;:!?，。]+", word, maxsplit=1)[0]
    if first in _TRUE_WORDS:
        return True
    if first in _FALSE_WORDS:
        return False
    raise OutputParsingError("Model output is not a boolean", raw_output=text, target="bool")


def parse_enum(text: str, enum_type: type[EnumT]) -> EnumT:
    """Parse an enum member by name or value, case-insensitively."""
    cleaned = text.strip().strip("`'\".!。 ")
    for member in enum_type:
        if cleaned.upper() == member.name.upper() or cleaned == str(member.value):
            return member
    # First member mentioned as a whole word in a longer answer
    positions = []
    for member in enum_type:
        match = re.search(rf"\b{re.escape(member.name)}\b", text, re.IGNORECASE)
        if match:
            positions.append((match.start(), member))
    if positions:
        return min(positions, key=lambda p: p[0])[1]
    raise OutputParsingError(
        f"Model output is not one of {[m.name for m in enum_type]}",
        raw_output=text,
        target=enum_type.__name__,
    )


def parse_model(text: str, model_type: type[ModelT]) -> ModelT:
    """Validate JSON model output against a Pydantic model."""
    data = extract_json(text)
    try:
        return model_type.model_validate(data)
    except PydanticValidationError as e:
        raise OutputParsingError(
            f"Model output does not match {model_type.__name__}: {e.error_count()} error(s)",
            raw_output=text,
            target=model_type.__name__,
        ) from e


def parse_string_list(text: str) -> list[str]:
    """Parse a JSON array, or one item per line (bullets and numbering stripped)."""
    stripped = text.strip()
    if stripped.startswith("[") or stripped.startswith("```"):
        try:
            data = extract_json(stripped)
        except OutputParsingError:
            data = None
        if isinstance(data, list):
            return [str(item) for item in data]

    items = []
    for line in stripped.splitlines():
        item = re.sub(r"^\s*(?:[-*•]|\d+[.)、])\s*", "", line).strip()
        if item:
            items.append(item)
    return items


def format_instructions(output_type: Any) -> str:
    """Instructions appended to the user message for ``output_type``."""
    if output_type is bool:
        return "Answer with only 'true' or 'false'."
    if output_type is str:
        return ""
    if isinstance(output_type, type) and issubclass(output_type, Enum):
        names = ", ".join(member.name for member in output_type)
        return f"Answer with only one of these values: {names}."
    if get_origin(output_type) is list and get_args(output_type) in ((str,), ()):
        return "Answer with a JSON array of strings and nothing else."
    if isinstance(output_type, type) and issubclass(output_type, BaseModel):
        schema = json.dumps(output_type.model_json_schema(), ensure_ascii=False)
        return f"Answer with only a JSON object that matches this JSON schema:\n{schema}"
    raise TypeError(f"Unsupported output type: {_type_name(output_type)}")


def parse_output(text: str, output_type: Any) -> Any:
    """Parse model output into ``output_type``."""
    if output_type is bool:
        return parse_bool(text)
    if output_type is str:
        return text
    if isinstance(output_type, type) and issubclass(output_type, Enum):
        return parse_enum(text, output_type)
    if get_origin(output_type) is list:
        return parse_string_list(text)
    if isinstance(output_type, type) and issubclass(output_type, BaseModel):
        return parse_model(text, output_type)
    raise TypeError(f"Unsupported output type: {_type_name(output_type)}")


def wants_json(output_type: Any) -> bool:
    """Whether the request should ask the endpoint for JSON mode."""
    return isinstance(output_type, type) and issubclass(output_type, BaseModel)
