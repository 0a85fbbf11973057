"""Render configuration parameters as ``set`` statements."""

from __future__ import annotations

import re
from typing import Mapping, Optional

from ..models import ConfigurationParameter

# "3a", "10.5", "2nd": numeric-looking but not a number
_DIGITS_THEN_TEXT = re.compile(r"[0-9]+[^0-9]")
_VERBATIM_WORDS = frozenset({"true", "false", "nil"})
_VERBATIM_PREFIXES = (":", "%", "{", "[")


def render_parameter(
    parameter: ConfigurationParameter,
    prompt_config: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Return the ``set`` line for ``parameter`` or ``None`` to omit it.

    Prompted parameters take their value from ``prompt_config``; a prompted
    parameter without an answer contributes no line.
    """
    value = parameter.value
    if parameter.prompt():
        value = (prompt_config or {}).get(parameter.name)

    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    if is_string_literal(value):
        return set_string_parameter(parameter.name, value)
    return set_non_string_parameter(parameter.name, value)


def is_string_literal(value: str) -> bool:
    """Decide whether a trimmed raw value must be quoted."""
    if _DIGITS_THEN_TEXT.match(value):
        return True
    if value in _VERBATIM_WORDS:
        return False
    return not (value.startswith(_VERBATIM_PREFIXES) or value[0] in "0123456789")


def set_string_parameter(name: str, value: str) -> str:
    return f"set :{name}, '{value}'"


def set_non_string_parameter(name: str, value: str) -> str:
    return f"set :{name}, {value}"
