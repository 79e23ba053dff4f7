"""
Even distribution calculator: spread increases or decreases across a row.

The row is split into plain-knit sections with one change stitch between
them. Flat pieces need a section on each side of every change
(``changes + 1`` sections); in the round the last change wraps back to the
first section, so ``changes`` sections suffice.

When the stitches do not divide evenly, the leftover stitches make some
sections one larger. In the round they are spaced out around the circle;
on a flat piece they sit nearest the centre so the shaping stays
symmetric. Placement is deterministic so saved instructions can be
reproduced.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from knitcalc.notation.formatter import format_knitting_instruction
from knitcalc.notation.operations import Operation, PlainStitch
from knitcalc.registry import StitchRegistry, get_registry
from knitcalc.types import ConstructionMode, ShapingAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionResult:
    """
    Outcome of an even distribution.

    Attributes:
        instruction: Flat instruction, one token per section or change.
        sections: Plain-knit section sizes in working order.
        starting_stitches: Stitches before the row.
        ending_stitches: Stitches after the row.
        change_count: Number of increases or decreases worked.
        construction: Flat or round.
        action: Increase or decrease.
        operations: The instruction as parsed operations.
        formatted_instruction: ``instruction`` in compact shorthand.
        error: Why the distribution is impossible, or None.
    """

    instruction: str
    sections: tuple[int, ...]
    starting_stitches: int
    ending_stitches: int
    change_count: int
    construction: ConstructionMode
    action: ShapingAction
    operations: tuple[Operation, ...] = ()
    formatted_instruction: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _error(
    message: str,
    starting_stitches: int,
    action: ShapingAction,
    construction: ConstructionMode,
) -> DistributionResult:
    return DistributionResult(
        instruction="",
        sections=(),
        starting_stitches=starting_stitches,
        ending_stitches=starting_stitches,
        change_count=0,
        construction=construction,
        action=action,
        error=message,
    )


def _round_sections(base: int, remainder: int, num_sections: int) -> list[int]:
    """Space larger sections at a fixed interval around the round."""
    sections = [base] * num_sections
    if remainder == 0:
        return sections
    interval = math.ceil(num_sections / remainder)
    placed = 0
    for i in range(0, num_sections, interval):
        if placed == remainder:
            break
        sections[i] += 1
        placed += 1
    # The interval can undershoot (4 sections, remainder 3): fill the gaps in order.
    for i in range(num_sections):
        if placed == remainder:
            break
        if sections[i] == base:
            sections[i] += 1
            placed += 1
    return sections


def _flat_sections(base: int, remainder: int, num_sections: int) -> list[int]:
    """Give the larger sections to the positions nearest the centre."""
    center = num_sections // 2
    by_distance = sorted(range(num_sections), key=lambda i: (abs(i - center), i))
    larger = set(by_distance[:remainder])
    return [base + 1 if i in larger else base for i in range(num_sections)]


def distribute_evenly(
    starting_stitches: int,
    action: ShapingAction,
    amount: int,
    construction: ConstructionMode,
    registry: StitchRegistry | None = None,
) -> DistributionResult:
    """
    Distribute ``amount`` increases or decreases evenly across a row.

    Args:
        starting_stitches: Live stitches before the row.
        action: INCREASE or DECREASE.
        amount: Number of stitches to add or remove. Zero is a no-op.
        construction: FLAT or ROUND.
        registry: Source of the change tokens; defaults to the singleton.

    Returns:
        DistributionResult. Impossible requests come back with ``error`` set
        rather than raising.

    Raises:
        ValueError: If the registry does not define ``K`` or the change token.
    """
    registry = registry or get_registry()
    action = ShapingAction(action)
    construction = ConstructionMode(construction)

    if amount == 0:
        return DistributionResult(
            instruction=registry.defaults.no_change_instruction,
            sections=(),
            starting_stitches=starting_stitches,
            ending_stitches=starting_stitches,
            change_count=0,
            construction=construction,
            action=action,
            formatted_instruction=registry.defaults.no_change_instruction,
        )
    if amount < 0:
        return _error(
            f"Amount must be a positive number of stitches, got {amount}",
            starting_stitches,
            action,
            construction,
        )
    if starting_stitches < 0:
        return _error(
            f"Starting stitches cannot be negative, got {starting_stitches}",
            starting_stitches,
            action,
            construction,
        )

    target = starting_stitches + amount if action == ShapingAction.INCREASE else starting_stitches - amount
    if target <= 0:
        return _error(
            f"Cannot end with {target} stitches - must be at least 1 stitch",
            starting_stitches,
            action,
            construction,
        )

    num_changes = amount
    num_sections = num_changes if construction == ConstructionMode.ROUND else num_changes + 1
    if starting_stitches < num_sections:
        return _error(
            f"Impossible: {num_changes} {action.value}s would create {num_sections} sections, "
            f"but only {starting_stitches} stitches available",
            starting_stitches,
            action,
            construction,
        )

    if action == ShapingAction.DECREASE:
        # Each decrease works two stitches together on top of the section stitches.
        stitches_for_sections = starting_stitches - 2 * num_changes
    else:
        stitches_for_sections = starting_stitches
    if stitches_for_sections < 0:
        return _error(
            f"Impossible: {num_changes} decreases need at least {2 * num_changes} stitches, "
            f"but only {starting_stitches} stitches available",
            starting_stitches,
            action,
            construction,
        )

    base, remainder = divmod(stitches_for_sections, num_sections)
    if construction == ConstructionMode.ROUND:
        sections = _round_sections(base, remainder, num_sections)
    else:
        sections = _flat_sections(base, remainder, num_sections)

    logger.debug(
        "Stitch math: %d stitches for %d sections, base %d, remainder %d",
        stitches_for_sections,
        num_sections,
        base,
        remainder,
    )

    knit = registry.lookup_entry("K")
    if knit is None:
        raise ValueError("Stitch 'K' is not defined in the registry")
    change_name = registry.defaults.change_token(action)
    change = registry.lookup_entry(change_name)
    if change is None:
        raise ValueError(f"Stitch {change_name!r} is not defined in the registry")

    parts: list[str] = []
    operations: list[Operation] = []
    for i, size in enumerate(sections):
        if size > 0:
            parts.append(f"K{size}")
            operations.append(PlainStitch(name=knit.name, effect=knit.effect, count=size))
        if i < len(sections) - 1 or construction == ConstructionMode.ROUND:
            parts.append(change_name)
            operations.append(PlainStitch(name=change.name, effect=change.effect))

    instruction = ", ".join(parts)
    return DistributionResult(
        instruction=instruction,
        sections=tuple(sections),
        starting_stitches=starting_stitches,
        ending_stitches=target,
        change_count=num_changes,
        construction=construction,
        action=action,
        operations=tuple(operations),
        formatted_instruction=format_knitting_instruction(instruction),
    )
