"""Stitch calculators: even distribution, target repeats and row totals."""

from .distribution import DistributionResult, distribute_evenly
from .row import (
    CompletionReason,
    RowCalculation,
    RowCompletion,
    RunningTotal,
    calculate_final_stitch_count,
    calculate_operations,
    calculate_row_stitches,
    format_running_total,
    is_row_complete,
    max_safe_multiplier,
    previous_row_stitches,
)
from .target import (
    PatternDescriptor,
    PatternRepeatInfo,
    TargetRepeatResult,
    TargetRowsResult,
    is_valid_target,
    pattern_repeat_info,
    repeats_to_target,
    stitch_change_per_repeat,
    target_rows,
    valid_target_stitches,
)

__all__ = [
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
