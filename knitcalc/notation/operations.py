"""
Structured representation of a row's instructions.

Row text is parsed once into a tuple of Operations; calculators and the
formatter work on that tuple and only render back to shorthand text at the
edge. Operation is a closed union:

    PlainStitch    built-in stitch, optionally repeated (K4, K2tog × 3)
    CustomStitch   user-defined action from a CustomActionTable
    RepeatGroup    bracketed sequence worked ``times`` times
    WorkToEnd      "K to end" and friends, sized by the stitches left
    UnknownAction  text that resolved to nothing; no stitch effect
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from knitcalc.types import StitchEffect

_CLOSING = {"[": "]", "(": ")"}


@dataclass(frozen=True)
class PlainStitch:
    name: str
    effect: StitchEffect
    count: int = 1

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"{self.name}: count must be >= 1, got {self.count}")

    @property
    def total(self) -> StitchEffect:
        return self.effect.times(self.count)


@dataclass(frozen=True)
class CustomStitch:
    name: str
    effect: StitchEffect
    count: int = 1

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"{self.name}: count must be >= 1, got {self.count}")

    @property
    def total(self) -> StitchEffect:
        return self.effect.times(self.count)


@dataclass(frozen=True)
class RepeatGroup:
    operations: tuple[Operation, ...]
    times: int = 1
    bracket: str = "["

    def __post_init__(self) -> None:
        if self.times < 1:
            raise ValueError(f"repeat group times must be >= 1, got {self.times}")
        if self.bracket not in _CLOSING:
            raise ValueError(f"repeat group bracket must be '[' or '(', got {self.bracket!r}")


@dataclass(frozen=True)
class WorkToEnd:
    text: str
    stitch: str
    effect: StitchEffect


@dataclass(frozen=True)
class UnknownAction:
    text: str


Operation = PlainStitch | CustomStitch | RepeatGroup | WorkToEnd | UnknownAction


def _counted(name: str, count: int) -> str:
    if count == 1:
        return name
    # Single-letter stitches take the count as a suffix (K4); longer names take "× n".
    if len(name) == 1 and name.isalpha():
        return f"{name}{count}"
    return f"{name} × {count}"


def render_operation(op: Operation) -> str:
    """Render a single operation in row-builder notation."""
    match op:
        case PlainStitch(name=name, count=count) | CustomStitch(name=name, count=count):
            return _counted(name, count)
        case RepeatGroup(operations=ops, times=times, bracket=bracket):
            body = f"{bracket}{render_operations(ops)}{_CLOSING[bracket]}"
            return body if times == 1 else f"{body} × {times}"
        case WorkToEnd(text=text) | UnknownAction(text=text):
            return text
        case _:
            raise TypeError(f"Not an operation: {op!r}")


def render_operations(ops: Iterable[Operation]) -> str:
    return ", ".join(render_operation(op) for op in ops)


def expand_operations(ops: Iterable[Operation]) -> tuple[str, ...]:
    """
    Unroll repeat groups into a flat token sequence for the formatter.

    Each non-group operation becomes one token, so ``K4`` stays a single
    token and ``[K2, inc] × 3`` becomes six.
    """
    tokens: list[str] = []
    for op in ops:
        if isinstance(op, RepeatGroup):
            inner = expand_operations(op.operations)
            for _ in range(op.times):
                tokens.extend(inner)
        else:
            tokens.append(render_operation(op))
    return tuple(tokens)


def contains_work_to_end(ops: Iterable[Operation]) -> bool:
    for op in ops:
        if isinstance(op, WorkToEnd):
            return True
        if isinstance(op, RepeatGroup) and contains_work_to_end(op.operations):
            return True
    return False


def unknown_actions(ops: Iterable[Operation]) -> tuple[str, ...]:
    """Return the text of every UnknownAction, in order, including inside groups."""
    found: list[str] = []
    for op in ops:
        if isinstance(op, UnknownAction):
            found.append(op.text)
        elif isinstance(op, RepeatGroup):
            found.extend(unknown_actions(op.operations))
    return tuple(found)
