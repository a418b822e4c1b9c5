"""Tests for prompt templates and typed output parsing."""

from enum import Enum

import pytest
from pydantic import BaseModel

from llm_recipes.core.errors import OutputParsingError, ValidationError
from llm_recipes.utils.structured import (
    extract_json,
    format_instructions,
    parse_bool,
    parse_enum,
    parse_output,
    parse_string_list,
    wants_json,
)
from llm_recipes.utils.templates import load_prompt, render_template, template_variables


class Sentiment(Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Person(BaseModel):
    name: str
    age: int


class TestTemplates:
    """Tests for {{variable}} templates."""

    def test_render(self) -> None:
        template = "Translate into {{language}}: {{ text }}"

        assert template_variables(template) == {"language", "text"}
        assert render_template(template, {"language": "French", "text": "Hello"}) == "Translate into French: Hello"

    def test_missing_variable(self) -> None:
        with pytest.raises(ValidationError, match="template variable 'language' is missing"):
            render_template("Translate into {{language}}", {})

    def test_non_string_values(self) -> None:
        assert render_template("{{n}} items", {"n": 3}) == "3 items"

    def test_load_packaged_prompt(self) -> None:
        """Test prompts shipped with the package load with placeholders intact."""
        assert "{{language}}" in load_prompt("translator_system.txt")
        assert load_prompt("moderation_system.txt")


class TestParsers:
    """Tests for the individual parsers."""

    def test_extract_json_variants(self) -> None:
        assert extract_json('{"a": 1}') == {"a": 1}
        assert extract_json('```json\n{"a": 1}\n```') == {"a": 1}
        assert extract_json('Sure! Here it is: {"a": 1} Hope that helps.') == {"a": 1}

    def test_extract_json_failure(self) -> None:
        with pytest.raises(OutputParsingError):
            extract_json("no json here")

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("true", True), ("False.", False), ("Yes, it is a greeting", True), ("否", False)],
    )
    def test_parse_bool(self, text: str, expected: bool) -> None:
        assert parse_bool(text) is expected

    def test_parse_bool_failure(self) -> None:
        with pytest.raises(OutputParsingError):
            parse_bool("maybe")

    def test_parse_enum(self) -> None:
        assert parse_enum("POSITIVE", Sentiment) is Sentiment.POSITIVE
        assert parse_enum("negative", Sentiment) is Sentiment.NEGATIVE
        assert parse_enum("The sentiment is NEUTRAL overall.", Sentiment) is Sentiment.NEUTRAL

        with pytest.raises(OutputParsingError):
            parse_enum("happy", Sentiment)

    def test_parse_string_list(self) -> None:
        assert parse_string_list('["a", "b"]') == ["a", "b"]
        assert parse_string_list("1. flour\n2. eggs\n- milk") == ["flour", "eggs", "milk"]


class TestOutputTypes:
    """Tests for format instructions and dispatch by output type."""

    def test_format_instructions(self) -> None:
        assert format_instructions(bool) == "Answer with only 'true' or 'false'."
        assert format_instructions(str) == ""
        assert format_instructions(Sentiment) == "Answer with only one of these values: POSITIVE, NEUTRAL, NEGATIVE."
        assert "JSON array" in format_instructions(list[str])
        assert '"age"' in format_instructions(Person)

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            format_instructions(dict)

    def test_parse_output_model(self) -> None:
        person = parse_output('{"name": "John", "age": 42}', Person)

        assert person == Person(name="John", age=42)
        assert wants_json(Person)
        assert not wants_json(bool)

    def test_parse_output_model_mismatch(self) -> None:
        with pytest.raises(OutputParsingError) as exc_info:
            parse_output('{"name": "John"}', Person)
        assert exc_info.value.target == "Person"
