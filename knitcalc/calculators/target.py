"""
Target-repeat calculator.

Answers "how many repeats of this pattern reach N stitches, and how many
rows is that?" for patterns whose every repeat changes the stitch count by
the same amount (lace shawls growing, sleeves tapering).

The direction of the pattern must match the direction of the target: an
increasing pattern can only reach a larger count. Mismatches come back as
invalid results with an explanation instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from knitcalc.notation.parser import CustomActionsArg
from knitcalc.registry import StitchRegistry, get_registry

from .row import calculate_final_stitch_count

logger = logging.getLogger(__name__)

CUSTOM_PATTERN = "Custom"


@dataclass(frozen=True)
class TargetRepeatResult:
    repeats: int
    is_exact: bool
    actual_ending: int
    is_valid: bool
    error: str | None = None


@dataclass(frozen=True)
class TargetRowsResult:
    """
    Rows needed to reach a target.

    ``reached_on_row`` is the row on which the target count is first
    reached; when the target falls inside a repeat it is approximated as
    the first row of that repeat.
    """

    total_rows: int
    actual_repeats: int
    ending_stitches: int
    reached_on_row: int
    is_valid: bool
    error: str | None = None


@dataclass(frozen=True)
class PatternRepeatInfo:
    has_repeat: bool
    rows_in_pattern: int
    stitch_change_per_repeat: int


@dataclass(frozen=True)
class PatternDescriptor:
    """
    What the calculator needs to know about a stitch pattern.

    Attributes:
        pattern: Pattern name; ``"Custom"`` patterns carry ``row_changes``.
        rows_in_pattern: Rows in one repeat.
        row_changes: Per-row stitch change of a custom sequence.
        row_instructions: Row text of a row-by-row pattern.
        stitch_change_per_repeat: Stored net change, if the editor saved one.
        starting_stitches: Stitch count the rows are worked over; needed to
            compute the change from ``row_instructions``.
        custom_actions: Actions the row instructions may use.
    """

    pattern: str
    rows_in_pattern: int = 0
    row_changes: tuple[int, ...] = ()
    row_instructions: tuple[str, ...] = ()
    stitch_change_per_repeat: int | None = None
    starting_stitches: int | None = None
    custom_actions: CustomActionsArg = None


def _direction_error(starting: int, target: int, change_per_repeat: int) -> str | None:
    if change_per_repeat == 0:
        return "Pattern does not change the stitch count"
    if change_per_repeat > 0 and target <= starting:
        return (
            f"Pattern increases {change_per_repeat} sts per repeat; "
            f"target {target} must be greater than {starting}"
        )
    if change_per_repeat < 0 and target >= starting:
        return (
            f"Pattern decreases {-change_per_repeat} sts per repeat; "
            f"target {target} must be less than {starting}"
        )
    return None


def repeats_to_target(starting: int, target: int, change_per_repeat: int) -> TargetRepeatResult:
    """
    Whole repeats of a pattern that fit between ``starting`` and ``target``.

    ``repeats`` never overshoots the target; ``is_exact`` says whether it
    lands on it.
    """
    error = _direction_error(starting, target, change_per_repeat)
    if error is not None:
        return TargetRepeatResult(
            repeats=0, is_exact=False, actual_ending=starting, is_valid=False, error=error
        )

    repeats = abs(target - starting) // abs(change_per_repeat)
    actual_ending = starting + repeats * change_per_repeat
    logger.debug(
        "%d -> %d at %+d per repeat: %d repeats ending on %d",
        starting,
        target,
        change_per_repeat,
        repeats,
        actual_ending,
    )
    return TargetRepeatResult(
        repeats=repeats,
        is_exact=actual_ending == target,
        actual_ending=actual_ending,
        is_valid=True,
    )


def target_rows(
    repeats_needed: int,
    rows_per_repeat: int,
    complete_sequence: bool,
    target: int,
    starting: int,
    change_per_repeat: int,
) -> TargetRowsResult:
    """
    Rows to work to reach ``target``.

    With ``complete_sequence`` the last repeat is always finished, possibly
    passing the target; otherwise knitting stops on the row the target is
    reached.
    """
    error: str | None
    if repeats_needed < 0:
        error = f"Repeats needed cannot be negative, got {repeats_needed}"
    elif rows_per_repeat <= 0:
        error = f"Rows per repeat must be at least 1, got {rows_per_repeat}"
    else:
        error = _direction_error(starting, target, change_per_repeat)
    if error is not None:
        return TargetRowsResult(
            total_rows=0,
            actual_repeats=0,
            ending_stitches=starting,
            reached_on_row=0,
            is_valid=False,
            error=error,
        )

    total_change = target - starting
    full_repeats = total_change // change_per_repeat
    remaining_change = total_change - full_repeats * change_per_repeat
    mid_repeat_row = full_repeats * rows_per_repeat + 1

    if complete_sequence or remaining_change == 0:
        actual_repeats = -(-total_change // change_per_repeat)
        total_rows = actual_repeats * rows_per_repeat
        return TargetRowsResult(
            total_rows=total_rows,
            actual_repeats=actual_repeats,
            ending_stitches=starting + actual_repeats * change_per_repeat,
            reached_on_row=mid_repeat_row if remaining_change else total_rows,
            is_valid=True,
        )

    # Stop at the target, part way through a repeat.
    return TargetRowsResult(
        total_rows=mid_repeat_row,
        actual_repeats=repeats_needed,
        ending_stitches=target,
        reached_on_row=mid_repeat_row,
        is_valid=True,
    )


def valid_target_stitches(
    starting: int,
    change_per_repeat: int,
    max_repeats: int | None = None,
    registry: StitchRegistry | None = None,
) -> tuple[int, ...]:
    """
    Stitch counts reachable with 1, 2, ... whole repeats.

    Increasing patterns list ``max_repeats`` values; decreasing patterns
    stop before the count would reach zero.
    """
    if not starting or not change_per_repeat:
        return ()
    if max_repeats is None:
        max_repeats = (registry or get_registry()).defaults.max_target_repeats

    targets: list[int] = []
    for n in range(1, max_repeats + 1):
        stitches = starting + n * change_per_repeat
        if stitches <= 0:
            break
        targets.append(stitches)
    return tuple(targets)


def is_valid_target(starting: int, target: int, change_per_repeat: int) -> bool:
    """True when whole repeats land exactly on ``target``."""
    if change_per_repeat == 0:
        return False
    return (target - starting) % change_per_repeat == 0


def stitch_change_per_repeat(row_changes: Sequence[int | None]) -> int:
    return sum(change or 0 for change in row_changes)


def pattern_repeat_info(
    descriptor: PatternDescriptor | None,
    registry: StitchRegistry | None = None,
) -> PatternRepeatInfo:
    """
    Summarise a pattern's repeat.

    Custom patterns add up their per-row changes. Row-by-row patterns use
    the stored change, or work their rows through the row calculator when
    none is stored. Description patterns use the stored change.
    """
    if descriptor is None:
        return PatternRepeatInfo(has_repeat=False, rows_in_pattern=0, stitch_change_per_repeat=0)

    rows = max(descriptor.rows_in_pattern, 0)
    if descriptor.pattern == CUSTOM_PATTERN and descriptor.row_changes:
        change = stitch_change_per_repeat(descriptor.row_changes)
    elif descriptor.stitch_change_per_repeat is not None:
        change = descriptor.stitch_change_per_repeat
    elif descriptor.row_instructions and descriptor.starting_stitches is not None:
        start = descriptor.starting_stitches
        end = calculate_final_stitch_count(
            descriptor.row_instructions, start, descriptor.custom_actions, registry
        )
        change = end - start
    else:
        change = 0

    return PatternRepeatInfo(
        has_repeat=rows > 0 and change != 0,
        rows_in_pattern=rows,
        stitch_change_per_repeat=change,
    )
