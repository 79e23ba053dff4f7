"""
Construction-aware terminology and RS/WS side tracking.

Flat pieces are worked in rows that alternate right side and wrong side;
pieces worked in the round are always facing the right side and counted in
rounds.
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import ConstructionMode, Side


@dataclass(frozen=True)
class ConstructionTerms:
    row: str
    rows: str
    every_row: str
    every_other_row: str

    def every_nth_row(self, n: int) -> str:
        return f"every {n} {self.rows}"

    def plain_rows(self, count: int) -> str:
        term = self.row if count == 1 else self.rows
        return f"Work {count} plain {term}"


_FLAT_TERMS = ConstructionTerms(
    row="row", rows="rows", every_row="every row", every_other_row="every other row"
)
_ROUND_TERMS = ConstructionTerms(
    row="round", rows="rounds", every_row="every round", every_other_row="every other round"
)


def construction_terms(mode: ConstructionMode) -> ConstructionTerms:
    return _ROUND_TERMS if mode == ConstructionMode.ROUND else _FLAT_TERMS


def current_side(mode: ConstructionMode, row: int, starting_side: Side | None = None) -> Side:
    """
    Return the side row ``row`` (1-based) is worked on.

    Round construction is always RS. Flat odd rows take ``starting_side``
    (RS when not given); even rows take the other side.
    """
    if mode == ConstructionMode.ROUND:
        return Side.RS
    first = starting_side or Side.RS
    return first if row % 2 == 1 else next_row_side(first, mode)


def next_row_side(side: Side, mode: ConstructionMode) -> Side:
    if mode == ConstructionMode.ROUND:
        return Side.RS
    return Side.WS if side == Side.RS else Side.RS


def row_label(mode: ConstructionMode, row: int, starting_side: Side | None = None) -> str:
    """Return "Row 3 (RS)" for flat pieces or "Round 3" in the round."""
    if mode == ConstructionMode.ROUND:
        return f"Round {row}"
    return f"Row {row} ({current_side(mode, row, starting_side).value})"
