"""
Row stitch calculator.

Tracks how many stitches a row consumes from the left needle and produces
on the right while it is being built. Runs on every keystroke, so it never
raises on malformed text: unresolved tokens are reported in
``unknown_actions`` and contribute nothing.

Operations are folded left to right. A WorkToEnd consumes whatever is left
at the point it is reached, so a repeat group containing one is worked
repeat by repeat rather than multiplied.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from knitcalc.notation.operations import (
    CustomStitch,
    Operation,
    PlainStitch,
    RepeatGroup,
    UnknownAction,
    WorkToEnd,
    contains_work_to_end,
    unknown_actions,
)
from knitcalc.notation.parser import CustomActionsArg, parse_row
from knitcalc.registry import StitchRegistry, get_registry


@dataclass(frozen=True)
class RowCalculation:
    """
    Stitch totals for one row.

    Attributes:
        previous_stitches: Stitches available when the row starts.
        stitches_consumed: Stitches taken from the left needle.
        stitches_produced: Stitches on the right needle after the row.
        is_valid: False when the row consumes more than is available.
        unknown_actions: Text of tokens that did not resolve, in order.
    """

    previous_stitches: int
    stitches_consumed: int
    stitches_produced: int
    is_valid: bool
    unknown_actions: tuple[str, ...] = ()

    @property
    def stitch_change(self) -> int:
        return self.stitches_produced - self.previous_stitches

    @property
    def remaining_stitches(self) -> int:
        return self.previous_stitches - self.stitches_consumed


class CompletionReason(str, Enum):
    EMPTY = "empty"
    ALL_STITCHES_CONSUMED = "all_stitches_consumed"
    UNDER_CONSUMED = "under_consumed"
    OVER_CONSUMED = "over_consumed"


@dataclass(frozen=True)
class RowCompletion:
    is_complete: bool
    reason: CompletionReason
    consumed: int
    total: int

    @property
    def remaining(self) -> int:
        return self.total - self.consumed


@dataclass(frozen=True)
class RunningTotal:
    """Display text for a row's stitch count: ``20 sts → 24 sts (+4 sts)``."""

    base_text: str
    change_text: str | None


# ── Folding ────────────────────────────────────────────────────────────────────


def _fold(ops: Iterable[Operation], available: int, consumed: int, produced: int) -> tuple[int, int]:
    for op in ops:
        match op:
            case PlainStitch() | CustomStitch():
                total = op.total
                consumed += total.consumes
                produced += total.produces
            case RepeatGroup(operations=inner, times=times):
                if contains_work_to_end(inner):
                    for done in range(1, times + 1):
                        start_consumed, start_produced = consumed, produced
                        consumed, produced = _fold(inner, available, consumed, produced)
                        if start_consumed >= available or consumed == start_consumed:
                            # Stitches left no longer change, so every later
                            # repeat adds the same amount as this one.
                            left = times - done
                            consumed += (consumed - start_consumed) * left
                            produced += (produced - start_produced) * left
                            break
                else:
                    once_consumed, once_produced = _fold(inner, available, 0, 0)
                    consumed += once_consumed * times
                    produced += once_produced * times
            case WorkToEnd(effect=effect):
                # Work each remaining stitch once with the phrase's stitch.
                stitches = max(available - consumed, 0)
                if effect.consumes > 0:
                    repeats = stitches // effect.consumes
                    consumed += effect.consumes * repeats
                    produced += effect.produces * repeats
            case UnknownAction():
                pass
            case _:
                raise TypeError(f"Not an operation: {op!r}")
    return consumed, produced


def calculate_operations(ops: Sequence[Operation], available_stitches: int) -> RowCalculation:
    """Calculate stitch totals for already parsed operations."""
    consumed, produced = _fold(ops, available_stitches, 0, 0)
    return RowCalculation(
        previous_stitches=available_stitches,
        stitches_consumed=consumed,
        stitches_produced=produced,
        is_valid=consumed <= available_stitches,
        unknown_actions=unknown_actions(ops),
    )


def calculate_row_stitches(
    text: str | None,
    available_stitches: int,
    custom_actions: CustomActionsArg = None,
    registry: StitchRegistry | None = None,
) -> RowCalculation:
    """
    Parse ``text`` and calculate its stitch totals against ``available_stitches``.

    Empty text yields zero consumed and produced and is valid.
    """
    ops = parse_row(text, custom_actions=custom_actions, registry=registry)
    return calculate_operations(ops, available_stitches)


def is_row_complete(
    text: str | None,
    available_stitches: int,
    custom_actions: CustomActionsArg = None,
    registry: StitchRegistry | None = None,
) -> RowCompletion:
    """
    A row is complete when it consumes exactly the stitches available.

    Blank text is never complete: it reports ``EMPTY`` even against zero
    available stitches, where it would otherwise consume all of them.
    """
    if not text or not text.strip():
        return RowCompletion(
            is_complete=False,
            reason=CompletionReason.EMPTY,
            consumed=0,
            total=available_stitches,
        )
    calc = calculate_row_stitches(text, available_stitches, custom_actions, registry)
    consumed = calc.stitches_consumed
    if consumed == available_stitches:
        reason = CompletionReason.ALL_STITCHES_CONSUMED
    elif consumed < available_stitches:
        reason = CompletionReason.UNDER_CONSUMED
    else:
        reason = CompletionReason.OVER_CONSUMED
    return RowCompletion(
        is_complete=reason == CompletionReason.ALL_STITCHES_CONSUMED,
        reason=reason,
        consumed=consumed,
        total=available_stitches,
    )


def max_safe_multiplier(
    action: str | Operation,
    remaining_stitches: int,
    custom_actions: CustomActionsArg = None,
    registry: StitchRegistry | None = None,
) -> int:
    """
    Largest ``× n`` the user can apply to ``action`` without running out of stitches.

    ``action`` is an action name, the body of a repeat group, or a parsed
    Operation. Actions that consume nothing are capped at the configured
    unlimited multiplier.
    """
    registry = registry or get_registry()
    if remaining_stitches <= 0:
        return 1
    if isinstance(action, str):
        ops = parse_row(action, custom_actions=custom_actions, registry=registry)
    else:
        ops = (action,)
    per_repeat = calculate_operations(ops, remaining_stitches).stitches_consumed
    if per_repeat <= 0:
        return registry.defaults.unlimited_multiplier
    return max(1, remaining_stitches // per_repeat)


# ── Row chains ─────────────────────────────────────────────────────────────────


def previous_row_stitches(
    rows: Sequence[str | None],
    index: int,
    starting_stitches: int,
    custom_actions: CustomActionsArg = None,
    registry: StitchRegistry | None = None,
) -> int:
    """Stitches available at the start of ``rows[index]``."""
    stitches = starting_stitches
    for text in rows[:index]:
        stitches = calculate_row_stitches(text, stitches, custom_actions, registry).stitches_produced
    return stitches


def calculate_final_stitch_count(
    rows: Sequence[str | None],
    starting_stitches: int,
    custom_actions: CustomActionsArg = None,
    registry: StitchRegistry | None = None,
) -> int:
    """Stitches on the needle after working every row in order."""
    return previous_row_stitches(rows, len(rows), starting_stitches, custom_actions, registry)


def format_running_total(start_stitches: int, end_stitches: int) -> RunningTotal:
    change = end_stitches - start_stitches
    if change == 0:
        change_text = None
    elif change > 0:
        change_text = f"(+{change} sts)"
    else:
        change_text = f"({change} sts)"
    return RunningTotal(base_text=f"{start_stitches} sts → {end_stitches} sts", change_text=change_text)
