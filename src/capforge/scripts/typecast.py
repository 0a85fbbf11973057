"""Recover typed values from the raw strings stored on configuration records.

The parser is a heuristic, not a grammar: lists and hashes are split on raw
commas without tracking nesting depth, so ``[a, [b, c]]`` does not parse into
a nested list. Callers rely on that behaviour; keep it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class Symbol:
    """A bare identifier, written ``:name`` in the generated scripts."""

    name: str

    def __str__(self) -> str:
        return f":{self.name}"


TypedValue = Union[None, bool, Symbol, str, List[Any], Dict[Any, Any]]

_LIST_RE = re.compile(r"\[(.*)\]", re.DOTALL)
_HASH_RE = re.compile(r"\{(.*)\}", re.DOTALL)
_QUOTED_RE = re.compile(r"'(.*)'|\"(.*)\"", re.DOTALL)


def type_cast(raw: Optional[str]) -> TypedValue:
    """Cast ``raw`` to ``None``, a bool, a ``Symbol``, a str, a list or a dict.

    Examples:
        >>> type_cast(" true ")
        True
        >>> type_cast(":branch")
        Symbol(name='branch')
        >>> type_cast("[1,2]")
        ['1', '2']
    """
    if raw is None:
        return None

    value = raw.strip()
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "nil":
        return None

    match = _LIST_RE.fullmatch(value)
    if match:
        return [type_cast(item) for item in _split(match.group(1), ",")]

    match = _HASH_RE.fullmatch(value)
    if match:
        mapping: Dict[Any, Any] = {}
        for entry in _split(match.group(1), ","):
            parts = _split(entry, "=>")
            key = parts[0] if parts else None
            item = parts[1] if len(parts) > 1 else None
            mapping[_hashable(type_cast(key))] = type_cast(item)
        return mapping

    return _cast_atom(value)


def is_opaque_colon_string(value: str) -> bool:
    """True for values such as ``:pserver:anon@cvs.example.com:/cvsroot``."""
    return value.startswith(":") and value.count(":") > 1


def to_literal(value: TypedValue) -> str:
    """Render a typed value in the task runner's literal syntax.

    Strings are wrapped in single quotes without escaping.
    """
    if value is None:
        return "nil"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, Symbol):
        return str(value)
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_literal(item) for item in value) + "]"
    if isinstance(value, dict):
        pairs = (f"{to_literal(key)} => {to_literal(item)}" for key, item in value.items())
        return "{" + ", ".join(pairs) + "}"
    raise TypeError(f"Cannot render {type(value).__name__} as a literal")


def _cast_atom(value: str) -> TypedValue:
    if is_opaque_colon_string(value):
        return value
    if value.startswith(":"):
        return Symbol(value[1:])
    match = _QUOTED_RE.fullmatch(value)
    if match:
        return match.group(1) if match.group(1) is not None else match.group(2)
    return value


def _split(text: str, separator: str) -> List[str]:
    # trailing empty pieces are dropped and "" splits into nothing
    parts = text.split(separator)
    while parts and parts[-1] == "":
        parts.pop()
    return parts


def _hashable(value: TypedValue) -> Any:
    if isinstance(value, list):
        return tuple(_hashable(item) for item in value)
    if isinstance(value, dict):
        return tuple((key, _hashable(item)) for key, item in value.items())
    return value
