"""
knitcalc: knitting instruction calculations.

Distributes increases and decreases evenly across a row, works out how many
pattern repeats reach a target stitch count, tracks a row's stitch totals
while it is being built, and compresses flat instructions into standard
shorthand. Every calculation is a pure function returning a frozen result.
"""

from .calculators import (
    CompletionReason,
    DistributionResult,
    PatternDescriptor,
    PatternRepeatInfo,
    RowCalculation,
    RowCompletion,
    RunningTotal,
    TargetRepeatResult,
    TargetRowsResult,
    calculate_final_stitch_count,
    calculate_operations,
    calculate_row_stitches,
    distribute_evenly,
    format_running_total,
    is_row_complete,
    is_valid_target,
    max_safe_multiplier,
    pattern_repeat_info,
    previous_row_stitches,
    repeats_to_target,
    stitch_change_per_repeat,
    target_rows,
    valid_target_stitches,
)
from .construction import ConstructionTerms, construction_terms, current_side, next_row_side, row_label
from .custom_actions import CustomAction, CustomActionLibrary, CustomActionTable, PatternBucket
from .notation import (
    CustomStitch,
    Operation,
    PlainStitch,
    RepeatGroup,
    UnknownAction,
    WorkToEnd,
    expand_knitting_instruction,
    format_knitting_instruction,
    format_operations,
    parse_row,
)
from .registry import StitchRegistry, get_registry
from .types import ConstructionMode, ShapingAction, Side, StitchEffect

__all__ = [
    # types
    "ConstructionMode",
    "ShapingAction",
    "Side",
    "StitchEffect",
    # registry
    "StitchRegistry",
    "get_registry",
    # custom actions
    "CustomAction",
    "CustomActionLibrary",
    "CustomActionTable",
    "PatternBucket",
    # construction
    "ConstructionTerms",
    "construction_terms",
    "current_side",
    "next_row_side",
    "row_label",
    # operations
    "CustomStitch",
    "Operation",
    "PlainStitch",
    "RepeatGroup",
    "UnknownAction",
    "WorkToEnd",
    # notation
    "parse_row",
    "expand_knitting_instruction",
    "format_knitting_instruction",
    "format_operations",
    # distribution
    "DistributionResult",
    "distribute_evenly",
    # target
    "PatternDescriptor",
    "PatternRepeatInfo",
    "TargetRepeatResult",
    "TargetRowsResult",
    "is_valid_target",
    "pattern_repeat_info",
    "repeats_to_target",
    "stitch_change_per_repeat",
    "target_rows",
    "valid_target_stitches",
    # row
    "CompletionReason",
    "RowCalculation",
    "RowCompletion",
    "RunningTotal",
    "calculate_final_stitch_count",
    "calculate_operations",
    "calculate_row_stitches",
    "format_running_total",
    "is_row_complete",
    "max_safe_multiplier",
    "previous_row_stitches",
]
