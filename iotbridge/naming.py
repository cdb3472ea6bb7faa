"""Name conversions used for identifiers."""

from __future__ import annotations

import re

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def camel_to_snake_case(text: str) -> str:
    """Convert CamelCase to snake_case."""
    snake = _FIRST_CAP.sub(r"\1_\2", text)
    snake = _ALL_CAP.sub(r"\1_\2", snake)
    return snake.lower()