"""Command line interface for knitcalc."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from knitcalc.calculators.distribution import distribute_evenly
from knitcalc.calculators.row import calculate_row_stitches, format_running_total, is_row_complete
from knitcalc.calculators.target import repeats_to_target, target_rows
from knitcalc.custom_actions import CustomAction, CustomActionTable
from knitcalc.logging_config import configure_logging
from knitcalc.notation.formatter import format_knitting_instruction
from knitcalc.types import ConstructionMode, ShapingAction

logger = logging.getLogger(__name__)


def _custom_action(value: str) -> CustomAction:
    """Parse ``NAME:CONSUMES:PRODUCES``."""
    name, sep, produces = value.rpartition(":")
    name, sep2, consumes = name.rpartition(":")
    if not (sep and sep2 and name.strip()):
        raise argparse.ArgumentTypeError(f"expected NAME:CONSUMES:PRODUCES, got {value!r}")
    try:
        return CustomAction(name=name.strip(), consumes=int(consumes), produces=int(produces))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid custom action {value!r}: {exc}") from exc


def _emit(payload: dict[str, Any], lines: Sequence[str], as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2))
    else:
        for line in lines:
            print(line)


def _running_total_line(start: int, end: int) -> str:
    total = format_running_total(start, end)
    return f"{total.base_text} {total.change_text}" if total.change_text else total.base_text


# ── Commands ───────────────────────────────────────────────────────────────────


def cmd_distribute(args: argparse.Namespace) -> int:
    result = distribute_evenly(
        args.starting,
        ShapingAction(args.action),
        args.amount,
        ConstructionMode(args.construction),
    )
    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    payload = {
        "instruction": result.instruction,
        "formatted_instruction": result.formatted_instruction,
        "sections": list(result.sections),
        "starting_stitches": result.starting_stitches,
        "ending_stitches": result.ending_stitches,
        "change_count": result.change_count,
        "construction": result.construction.value,
        "action": result.action.value,
    }
    lines = [
        result.formatted_instruction,
        _running_total_line(result.starting_stitches, result.ending_stitches),
    ]
    _emit(payload, lines, args.json)
    return 0


def cmd_target(args: argparse.Namespace) -> int:
    repeats = repeats_to_target(args.starting, args.target, args.change)
    if not repeats.is_valid:
        print(f"Error: {repeats.error}", file=sys.stderr)
        return 1
    rows = target_rows(
        repeats.repeats,
        args.rows_per_repeat,
        args.complete_sequence,
        args.target,
        args.starting,
        args.change,
    )
    if not rows.is_valid:
        print(f"Error: {rows.error}", file=sys.stderr)
        return 1
    payload = {
        "repeats": repeats.repeats,
        "is_exact": repeats.is_exact,
        "actual_ending": repeats.actual_ending,
        "total_rows": rows.total_rows,
        "actual_repeats": rows.actual_repeats,
        "ending_stitches": rows.ending_stitches,
        "reached_on_row": rows.reached_on_row,
    }
    exactness = "exact" if repeats.is_exact else f"ends on {repeats.actual_ending} sts"
    lines = [
        f"Repeats: {repeats.repeats} ({exactness})",
        f"Rows: {rows.total_rows} (target reached on row {rows.reached_on_row})",
        _running_total_line(args.starting, rows.ending_stitches),
    ]
    _emit(payload, lines, args.json)
    return 0


def cmd_row(args: argparse.Namespace) -> int:
    table = CustomActionTable.of(args.custom or [])
    calc = calculate_row_stitches(args.text, args.available, table)
    completion = is_row_complete(args.text, args.available, table)
    payload = {
        "previous_stitches": calc.previous_stitches,
        "stitches_consumed": calc.stitches_consumed,
        "stitches_produced": calc.stitches_produced,
        "stitch_change": calc.stitch_change,
        "remaining_stitches": calc.remaining_stitches,
        "is_valid": calc.is_valid,
        "is_complete": completion.is_complete,
        "reason": completion.reason.value,
        "unknown_actions": list(calc.unknown_actions),
    }
    lines = [
        f"Consumed {calc.stitches_consumed} of {calc.previous_stitches} sts, produced {calc.stitches_produced}",
        _running_total_line(calc.previous_stitches, calc.stitches_produced),
        f"Row: {completion.reason.value.replace('_', ' ')}",
    ]
    if calc.unknown_actions:
        lines.append("Unknown actions: " + ", ".join(calc.unknown_actions))
    _emit(payload, lines, args.json)
    if calc.unknown_actions:
        logger.warning("Ignored unknown actions: %s", ", ".join(calc.unknown_actions))
    return 0 if calc.is_valid else 1


def cmd_format(args: argparse.Namespace) -> int:
    formatted = format_knitting_instruction(args.text)
    _emit({"instruction": args.text, "formatted_instruction": formatted}, [formatted], args.json)
    return 0


# ── Entry point ────────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="knitcalc", description="Knitting instruction calculator.")
    parser.add_argument("--debug", action="store_true", help="Log calculation details")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    subparsers = parser.add_subparsers(dest="command", required=True)

    distribute_parser = subparsers.add_parser(
        "distribute", help="Spread increases or decreases evenly across a row"
    )
    distribute_parser.add_argument("starting", type=int, help="Stitches before the row")
    distribute_parser.add_argument("action", choices=[a.value for a in ShapingAction])
    distribute_parser.add_argument("amount", type=int, help="Stitches to add or remove")
    distribute_parser.add_argument(
        "--construction",
        choices=[m.value for m in ConstructionMode],
        default=ConstructionMode.FLAT.value,
    )
    distribute_parser.set_defaults(func=cmd_distribute)

    target_parser = subparsers.add_parser("target", help="Repeats and rows to reach a stitch count")
    target_parser.add_argument("starting", type=int, help="Current stitch count")
    target_parser.add_argument("target", type=int, help="Desired stitch count")
    target_parser.add_argument("change", type=int, help="Net stitch change per repeat")
    target_parser.add_argument("--rows-per-repeat", type=int, default=1, help="Rows in one repeat")
    target_parser.add_argument(
        "--complete-sequence", action="store_true", help="Always finish the last repeat"
    )
    target_parser.set_defaults(func=cmd_target)

    row_parser = subparsers.add_parser("row", help="Stitch totals for a row instruction")
    row_parser.add_argument("text", help='Row instruction, e.g. "K2, [K2tog, YO] × 3, K to end"')
    row_parser.add_argument("available", type=int, help="Stitches available for the row")
    row_parser.add_argument(
        "--custom",
        type=_custom_action,
        action="append",
        metavar="NAME:CONSUMES:PRODUCES",
        help="Define a custom action (repeatable)",
    )
    row_parser.set_defaults(func=cmd_row)

    format_parser = subparsers.add_parser("format", help="Compress an instruction into shorthand")
    format_parser.add_argument("text", help="Comma-separated instruction")
    format_parser.set_defaults(func=cmd_format)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(debug=args.debug)
    try:
        if args.command == "row" and args.custom:
            # Reject duplicate names before calculating.
            CustomActionTable.of(args.custom)
    except ValueError as exc:
        parser.error(str(exc))
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
