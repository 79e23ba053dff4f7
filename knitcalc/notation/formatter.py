"""
Knitting notation formatter.

Compresses a flat, fully expanded instruction into standard shorthand
without changing its meaning:

    "K4, inc, K4, inc, K4, inc, K4, inc, K4"  ->  "(K4, inc) 4 times, K4"
    "K3, K2tog, K3, K2tog, K3, K2tog, K3"     ->  "(K3, K2tog) 3 times, K3"

Detection runs in a fixed order and the first phase that matches wins.
Earlier phases are more specific:

1. multi-pattern sectional: two or more differently spaced repeat regions
   with literal edges (sleeve tapering, mirrored flat shaping);
2. leading tokens, one repeat, remainder (most even-distribution output);
3. two different 2-token repeats from the start, then a formatted tail;
4. runs of one identical token at either or both ends;
5. a simple repeat from the very start.

If nothing matches, or anything goes wrong, the input comes back verbatim.
Repeat groups inside a token (``[K2, inc] × 3``) are treated as opaque.
"""

from __future__ import annotations

import logging
import re
import warnings
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Callable

from .operations import Operation, expand_operations

logger = logging.getLogger(__name__)

_OPEN = "[("
_CLOSE = "])"


# ── Sections ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Literal:
    """Tokens written out as-is."""

    tokens: tuple[str, ...]

    def render(self) -> str:
        return ", ".join(self.tokens)

    def expand(self) -> tuple[str, ...]:
        return self.tokens


@dataclass(frozen=True)
class Repeat:
    """``(unit) N times``."""

    unit: tuple[str, ...]
    times: int

    def render(self) -> str:
        return f"({', '.join(self.unit)}) {self.times} times"

    def expand(self) -> tuple[str, ...]:
        return self.unit * self.times


@dataclass(frozen=True)
class Run:
    """One token worked consecutively: ``K2tog 3 times``."""

    token: str
    times: int

    def render(self) -> str:
        return f"{self.token} {self.times} times"

    def expand(self) -> tuple[str, ...]:
        return (self.token,) * self.times


Section = Literal | Repeat | Run
_Phase = Callable[[Sequence[str]], list[Section] | None]


# ── Tokenising ─────────────────────────────────────────────────────────────────


def split_tokens(instruction: str) -> tuple[str, ...]:
    """Split at commas that are not inside brackets; blank tokens are dropped."""
    tokens: list[str] = []
    current: list[str] = []
    depth = 0
    for ch in instruction:
        if ch in _OPEN:
            depth += 1
        elif ch in _CLOSE:
            depth = max(depth - 1, 0)
        elif ch == "," and depth == 0:
            tokens.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tokens.append("".join(current).strip())
    return tuple(t for t in tokens if t)


def _count_repeats(tokens: Sequence[str], start: int, length: int) -> int:
    """How many times tokens[start:start+length] repeats back to back from start."""
    unit = tuple(tokens[start : start + length])
    if len(unit) < length:
        return 0
    reps = 0
    index = start
    while index + length <= len(tokens) and tuple(tokens[index : index + length]) == unit:
        reps += 1
        index += length
    return reps


def _best_unit_at(tokens: Sequence[str], start: int) -> tuple[int, int]:
    """Return (unit length, repetitions) for the 2- or 3-token unit repeating most at start."""
    best_length, best_reps = 0, 0
    for length in (2, 3):
        if start + length > len(tokens):
            continue
        reps = _count_repeats(tokens, start, length)
        if reps >= 2 and reps > best_reps:
            best_length, best_reps = length, reps
    return best_length, best_reps


def _literal(tokens: Sequence[str]) -> list[Section]:
    return [Literal(tuple(tokens))] if tokens else []


# ── Phases ─────────────────────────────────────────────────────────────────────


def _multi_pattern_sectional(tokens: Sequence[str]) -> list[Section] | None:
    if len(tokens) < 8:
        return None

    sections: list[Section] = []
    index = 0
    while index < len(tokens):
        length, reps = _best_unit_at(tokens, index)
        if reps >= 2:
            sections.append(Repeat(tuple(tokens[index : index + length]), reps))
            index += length * reps
            continue
        literal: list[str] = []
        while index < len(tokens) and _best_unit_at(tokens, index)[1] < 2:
            literal.append(tokens[index])
            index += 1
        sections.extend(_literal(literal))

    if sum(isinstance(s, Repeat) for s in sections) >= 2:
        return sections
    return None


def _leading_pattern_remainder(tokens: Sequence[str]) -> list[Section] | None:
    if len(tokens) < 6:
        return None

    for length in (2, 3):
        for start in (0, 2, 4):
            if start + length >= len(tokens):
                continue
            reps = _count_repeats(tokens, start, length)
            if reps >= 3:
                end = start + reps * length
                return [
                    *_literal(tokens[:start]),
                    Repeat(tuple(tokens[start : start + length]), reps),
                    *_literal(tokens[end:]),
                ]
    return None


def _pattern_sections_from_start(tokens: Sequence[str]) -> list[Section] | None:
    if len(tokens) < 8:
        return None

    start_reps = _count_repeats(tokens, 0, 2)
    if start_reps < 2:
        return None
    after_start = start_reps * 2
    if len(tokens) - after_start < 4:
        return None

    start_unit = tuple(tokens[0:2])
    middle_unit = tuple(tokens[after_start : after_start + 2])
    if middle_unit == start_unit:
        return None
    middle_reps = _count_repeats(tokens, after_start, 2)
    if middle_reps < 2:
        return None

    after_middle = after_start + middle_reps * 2
    return [
        Repeat(start_unit, start_reps),
        Repeat(middle_unit, middle_reps),
        *_middle_section(tokens[after_middle:]),
    ]


def _sections_from_ends(tokens: Sequence[str]) -> list[Section] | None:
    first, last = tokens[0], tokens[-1]
    start_run = next((i for i, t in enumerate(tokens) if t != first), len(tokens))
    end_run = next((i for i, t in enumerate(reversed(tokens)) if t != last), len(tokens))

    has_start = start_run >= 2
    has_end = end_run >= 2
    has_middle = start_run + end_run < len(tokens)

    if has_start and has_end and has_middle:
        return [
            Run(first, start_run),
            *_middle_section(tokens[start_run : len(tokens) - end_run]),
            Run(last, end_run),
        ]
    if has_start and start_run >= 3:
        return [Run(first, start_run), *_middle_section(tokens[start_run:])]
    if has_end and end_run >= 3:
        return [*_middle_section(tokens[: len(tokens) - end_run]), Run(last, end_run)]
    return None


def _simple_pattern(tokens: Sequence[str]) -> list[Section] | None:
    for length in range(2, 5):
        if len(tokens) < length * 2:
            continue
        reps = _count_repeats(tokens, 0, length)
        if reps >= 2:
            return [Repeat(tuple(tokens[:length]), reps), *_literal(tokens[reps * length :])]
    return None


def _middle_section(section: Sequence[str]) -> list[Section]:
    """Format a stretch between detected sections: a repeat, a run, or literal."""
    for length in range(2, len(section) // 2 + 1):
        reps = _count_repeats(section, 0, length)
        if reps >= 2:
            return [Repeat(tuple(section[:length]), reps), *_literal(section[reps * length :])]

    if len(section) >= 2 and all(t == section[0] for t in section):
        return [Run(section[0], len(section))]
    return _literal(section)


_PHASES: tuple[tuple[str, _Phase], ...] = (
    ("multi-pattern sectional", _multi_pattern_sectional),
    ("leading pattern remainder", _leading_pattern_remainder),
    ("pattern sections from start", _pattern_sections_from_start),
    ("sections from ends", _sections_from_ends),
    ("simple pattern", _simple_pattern),
)


# ── Public API ─────────────────────────────────────────────────────────────────


def compress_tokens(tokens: Sequence[str]) -> tuple[Section, ...] | None:
    """
    Run the detection phases over ``tokens``.

    Returns the sections from the first phase that matches, or None when the
    sequence is too short or has no detectable repeat.
    """
    if len(tokens) < 3:
        return None
    for name, phase in _PHASES:
        sections = phase(tokens)
        if sections:
            logger.debug("Formatted %d tokens with %s", len(tokens), name)
            return tuple(sections)
    return None


def render_sections(sections: Iterable[Section]) -> str:
    return ", ".join(s.render() for s in sections)


def format_knitting_instruction(raw_instruction: str) -> str:
    """
    Return ``raw_instruction`` in compact knitting shorthand.

    Non-destructive: input without a detectable repeat, non-string input and
    any internal failure all return the input unchanged.
    """
    if not raw_instruction or not isinstance(raw_instruction, str):
        return raw_instruction
    try:
        sections = compress_tokens(split_tokens(raw_instruction))
        if sections is None:
            return raw_instruction
        return render_sections(sections)
    except Exception as exc:  # noqa: BLE001
        warnings.warn(
            f"Could not format knitting instruction, returning it unchanged: {exc}",
            RuntimeWarning,
            stacklevel=2,
        )
        return raw_instruction


def format_operations(ops: Iterable[Operation]) -> str:
    """Expand parsed operations to flat tokens and format them."""
    return format_knitting_instruction(", ".join(expand_operations(ops)))


_REPEAT_SECTION = re.compile(r"^\((?P<unit>.*)\)\s+(?P<times>\d+) times$")
_RUN_SECTION = re.compile(r"^(?P<token>.+?)\s+(?P<times>\d+) times$")


def expand_knitting_instruction(instruction: str) -> tuple[str, ...]:
    """
    Reverse the shorthand: ``(K4, inc) 4 times, K4`` -> K4, inc, ... , K4.

    Tokens that are not formatter sections pass through unchanged.
    """
    tokens: list[str] = []
    for chunk in split_tokens(instruction):
        repeat = _REPEAT_SECTION.match(chunk)
        if repeat is not None:
            tokens.extend(expand_knitting_instruction(repeat.group("unit")) * int(repeat.group("times")))
            continue
        run = _RUN_SECTION.match(chunk)
        if run is not None:
            tokens.extend([run.group("token")] * int(run.group("times")))
            continue
        tokens.append(chunk)
    return tuple(tokens)
