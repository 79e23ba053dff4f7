"""
Row text parser.

Turns row-builder text such as ``K2, [K2tog, YO] × 3, K to end`` into a tuple
of Operations. The parser is permissive because it runs on every keystroke:

- tokens are separated by commas; inside a token, whitespace-separated
  stitch names are split when every piece is a known action;
- ``[...]`` and ``(...)`` groups nest to any depth and take an optional
  ``× n``, ``x n``, ``* n``, ``n times`` or bare ``n`` multiplier;
- a group left open at the end of the text is closed implicitly, a dangling
  ``×`` counts as 1 and stray closing brackets are ignored;
- anything that does not resolve becomes an UnknownAction.

Names resolve in order: built-in stitch (exact, then case-insensitive),
custom action, work-to-end phrase, ``<name><count>`` (K37), unknown.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from knitcalc.custom_actions import CustomActionTable
from knitcalc.registry import StitchRegistry, get_registry

from .operations import (
    CustomStitch,
    Operation,
    PlainStitch,
    RepeatGroup,
    UnknownAction,
    WorkToEnd,
)

CustomActionsArg = CustomActionTable | Mapping[str, Any] | None

_OPENERS = {"[": "]", "(": ")"}
_CLOSERS = frozenset(_OPENERS.values())
_ATOM_STOP = frozenset(",") | frozenset(_OPENERS) | _CLOSERS

# ``× 3`` / ``* 3`` / ``x 3`` / bare ``3`` / ``3 times`` after a group. Dangling × or * is allowed.
_GROUP_MULTIPLIER = re.compile(r"\s*(?:[×*]\s*(\d*)|[xX]\s*(\d+)|(\d+)(?:\s*times\b)?)")
# Same forms after a single action; ``x`` and ``N times`` need whitespace before them.
_ACTION_MULTIPLIER = re.compile(
    r"^(?P<base>.+?)\s*(?:[×*]\s*(?P<a>\d*)|\s[xX]\s*(?P<b>\d+)|\s(?P<c>\d+)\s*times)$"
)
_NUMBERED = re.compile(r"^(?P<base>[A-Za-z][A-Za-z/]*?)(?P<count>\d+)$")


class _Parser:
    def __init__(self, text: str, custom: CustomActionTable, registry: StitchRegistry) -> None:
        self._text = text
        self._pos = 0
        self._custom = custom
        self._registry = registry

    def parse(self) -> tuple[Operation, ...]:
        ops: list[Operation] = []
        while self._pos < len(self._text):
            ops.extend(self._sequence(closer=None))
            if self._pos < len(self._text):
                # Stray closing bracket at top level.
                self._pos += 1
        return tuple(ops)

    def _sequence(self, closer: str | None) -> list[Operation]:
        ops: list[Operation] = []
        text = self._text
        while self._pos < len(text):
            ch = text[self._pos]
            if ch.isspace() or ch == ",":
                self._pos += 1
            elif ch in _OPENERS:
                self._pos += 1
                inner = self._sequence(closer=_OPENERS[ch])
                times = self._group_multiplier()
                if times > 0 and inner:
                    ops.append(RepeatGroup(operations=tuple(inner), times=times, bracket=ch))
            elif ch in _CLOSERS:
                if closer is None or ch == closer:
                    if closer is not None:
                        self._pos += 1
                    return ops
                # Mismatched closer inside a group: skip it.
                self._pos += 1
            else:
                start = self._pos
                while self._pos < len(text) and text[self._pos] not in _ATOM_STOP:
                    self._pos += 1
                ops.extend(self._resolve_atom(text[start : self._pos]))
        return ops

    def _group_multiplier(self) -> int:
        match = _GROUP_MULTIPLIER.match(self._text, self._pos)
        if match is None:
            return 1
        self._pos = match.end()
        digits = next((g for g in match.groups() if g), "")
        return int(digits) if digits else 1

    # ── Name resolution ────────────────────────────────────────────────────────

    def _resolve_atom(self, raw: str) -> list[Operation]:
        text = " ".join(raw.split())
        if not text:
            return []

        match = _ACTION_MULTIPLIER.match(text)
        if match is not None:
            digits = next((match.group(g) for g in "abc" if match.group(g) is not None), "")
            count = int(digits) if digits else 1
            if count == 0:
                return []
            single = self._resolve_name(match.group("base").strip(), count)
            return [single] if single is not None else [UnknownAction(text)]

        single = self._resolve_name(text, 1)
        if single is not None:
            return [single]

        pieces = text.split(" ")
        if len(pieces) > 1:
            resolved = [self._resolve_name(piece, 1) for piece in pieces]
            if all(op is not None for op in resolved):
                return [op for op in resolved if op is not None]

        numbered = _NUMBERED.match(text)
        if numbered is not None and int(numbered.group("count")) == 0:
            # "K0": nothing left to work.
            if self._resolve_name(numbered.group("base"), 1) is not None:
                return []

        return [UnknownAction(text)]

    def _resolve_name(self, name: str, count: int) -> Operation | None:
        entry = self._registry.lookup_entry(name)
        if entry is not None:
            return PlainStitch(name=entry.name, effect=entry.effect, count=count)

        custom = self._custom.lookup(name)
        if custom is not None:
            return CustomStitch(name=custom.name, effect=custom.effect, count=count)

        if count == 1:
            phrase = self._registry.get_work_to_end(name)
            if phrase is not None:
                effect = self._registry.stitches[phrase.stitch].effect
                return WorkToEnd(text=phrase.phrase, stitch=phrase.stitch, effect=effect)

        numbered = _NUMBERED.match(name)
        if numbered is not None:
            n = int(numbered.group("count"))
            if n > 0:
                return self._resolve_name(numbered.group("base"), count * n)
        return None


def parse_row(
    text: str | None,
    custom_actions: CustomActionsArg = None,
    registry: StitchRegistry | None = None,
) -> tuple[Operation, ...]:
    """
    Parse row text into Operations.

    Never raises on malformed input; unresolved text becomes UnknownAction.
    ``custom_actions`` may be a CustomActionTable or a plain
    ``{name: {consumes, produces}}`` mapping.
    """
    if not text or not text.strip():
        return ()
    table = CustomActionTable.from_mapping(custom_actions)
    return _Parser(text, table, registry or get_registry()).parse()
