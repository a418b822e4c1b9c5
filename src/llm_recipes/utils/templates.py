"""Prompt templates with ``{{variable}}`` placeholders.

Templates can be inline strings or text files shipped in the
``llm_recipes.prompts`` package (see ``load_prompt``).
"""

import re
from collections.abc import Mapping
from functools import lru_cache
from importlib import resources
from typing import Any

from llm_recipes.core.errors import ValidationError

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def template_variables(template: str) -> set[str]:
    """Names of the placeholders used in ``template``."""
    return set(_PLACEHOLDER.findall(template))


def render_template(template: str, variables: Mapping[str, Any]) -> str:
    """Substitute ``{{name}}`` placeholders.

    Args:
        template: Template text.
        variables: Values by placeholder name; non-strings are str()-ed.

    Returns:
        The rendered text.

    Raises:
        ValidationError: If a placeholder has no value.
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            raise ValidationError(f"Value for the template variable '{name}' is missing", field=name)
        return str(variables[name])

    return _PLACEHOLDER.sub(substitute, template)


@lru_cache(maxsize=32)
def load_prompt(name: str) -> str:
    """Read a packaged prompt file, e.g. ``load_prompt("translator_system.txt")``."""
    return resources.files("llm_recipes.prompts").joinpath(name).read_text(encoding="utf-8").strip()
