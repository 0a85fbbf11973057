"""Script generation: type casting, literal rendering and assembly."""

from .assembler import LIFECYCLE_CHECKPOINTS, ParameterNotFound, ScriptAssembler, after_flow
from .literals import render_parameter, set_non_string_parameter, set_string_parameter
from .typecast import Symbol, TypedValue, to_literal, type_cast

__all__ = [
    "LIFECYCLE_CHECKPOINTS",
    "ParameterNotFound",
    "ScriptAssembler",
    "after_flow",
    "render_parameter",
    "set_non_string_parameter",
    "set_string_parameter",
    "Symbol",
    "TypedValue",
    "to_literal",
    "type_cast",
]
