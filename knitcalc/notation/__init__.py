"""
Knitting notation: the Operation IR, the row-text parser and the shorthand
formatter.
"""

from .formatter import expand_knitting_instruction, format_knitting_instruction, format_operations
from .operations import (
    CustomStitch,
    Operation,
    PlainStitch,
    RepeatGroup,
    UnknownAction,
    WorkToEnd,
    expand_operations,
    render_operation,
    render_operations,
)
from .parser import parse_row

__all__ = [
    # operations
    "CustomStitch",
    "Operation",
    "PlainStitch",
    "RepeatGroup",
    "UnknownAction",
    "WorkToEnd",
    "expand_operations",
    "render_operation",
    "render_operations",
    # parser
    "parse_row",
    # formatter
    "expand_knitting_instruction",
    "format_knitting_instruction",
    "format_operations",
]
