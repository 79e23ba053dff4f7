"""
Stitch registry: loads the built-in stitch vocabulary and engine defaults from
YAML at startup, validates them, and exposes a read-only query API.

The registry is a module-level singleton; call get_registry() to obtain it.
Both tables are loaded and validated once at import time. Nothing writes to
the registry after startup.

Set ``KNITCALC_DATA_DIR`` to point the singleton at an alternative data
directory containing ``stitches.yaml`` and ``defaults.yaml``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, cast

import yaml

from .types import ShapingAction, StitchEffect

_DATA_DIR = Path(__file__).parent / "data"


@dataclass(frozen=True)
class StitchEntry:
    """A built-in stitch as declared in stitches.yaml."""

    name: str
    effect: StitchEffect
    category: str
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class WorkToEndEntry:
    """A phrase that works every remaining stitch with ``stitch``."""

    phrase: str
    stitch: str


@dataclass(frozen=True)
class EngineDefaults:
    max_target_repeats: int
    unlimited_multiplier: int
    change_tokens: MappingProxyType[ShapingAction, str]
    no_change_instruction: str

    def change_token(self, action: ShapingAction) -> str:
        return self.change_tokens[action]


class StitchRegistry:
    """
    Read-only registry of built-in stitches, work-to-end phrases and defaults.

    All public dict attributes are wrapped in MappingProxyType after loading
    and are immutable for the lifetime of the registry instance.

    Instantiate directly to use a custom data directory (e.g. in tests);
    otherwise use get_registry() for the module singleton.
    """

    def __init__(self, data_dir: Path = _DATA_DIR) -> None:
        self._data_dir = Path(data_dir)

        # Type annotations only; actual assignment happens in _load_*
        self.stitches: MappingProxyType[str, StitchEntry]
        self.work_to_end: MappingProxyType[str, WorkToEndEntry]
        self.defaults: EngineDefaults
        self._folded: dict[str, StitchEntry]
        self._raw_entries: list[dict[str, Any]]

        self._load_all()
        self._build_lookup()
        self._validate()

    # ── Loading ────────────────────────────────────────────────────────────────

    def _load_yaml(self, filename: str) -> dict[str, Any]:
        path = self._data_dir / filename
        try:
            with open(path) as f:
                return cast(dict[str, Any], yaml.safe_load(f))
        except FileNotFoundError:
            raise FileNotFoundError(f"Stitch data file not found: {path}") from None
        except yaml.YAMLError as exc:
            raise ValueError(f"Failed to parse stitch data file {path}: {exc}") from exc

    def _load_all(self) -> None:
        self._load_stitches()
        self._load_defaults()

    def _load_stitches(self) -> None:
        data = self._load_yaml("stitches.yaml") or {}
        self._raw_entries = list(data.get("entries", []))
        result: dict[str, StitchEntry] = {}
        for entry in self._raw_entries:
            name = str(entry["name"])
            result[name] = StitchEntry(
                name=name,
                effect=StitchEffect(
                    consumes=max(int(entry["consumes"]), 0),
                    produces=max(int(entry["produces"]), 0),
                ),
                category=entry.get("category", "basic"),
                aliases=tuple(str(a) for a in entry.get("aliases", [])),
            )
        self.stitches = MappingProxyType(result)

        phrases: dict[str, WorkToEndEntry] = {}
        for entry in data.get("work_to_end", []):
            phrase = " ".join(str(entry["phrase"]).split())
            phrases[phrase.lower()] = WorkToEndEntry(phrase=phrase, stitch=str(entry["stitch"]))
        self.work_to_end = MappingProxyType(phrases)

    def _load_defaults(self) -> None:
        data = self._load_yaml("defaults.yaml") or {}
        tokens = data.get("change_tokens", {})
        self.defaults = EngineDefaults(
            max_target_repeats=int(data.get("max_target_repeats", 0)),
            unlimited_multiplier=int(data.get("unlimited_multiplier", 0)),
            change_tokens=MappingProxyType(
                {action: str(tokens.get(action.value, "")) for action in ShapingAction}
            ),
            no_change_instruction=str(data.get("no_change_instruction", "")),
        )

    # ── Validation ─────────────────────────────────────────────────────────────

    def _validate(self) -> None:
        """
        Run at startup. Raises ValueError listing all problems found if any
        table entry is malformed or references an undefined stitch.
        """
        errors: list[str] = []
        self._check_stitch_entries(errors)
        self._check_work_to_end(errors)
        self._check_defaults(errors)
        if errors:
            raise ValueError(
                "Stitch registry validation failed:\n" + "\n".join(f"  • {e}" for e in errors)
            )

    def _check_stitch_entries(self, errors: list[str]) -> None:
        """Counts must be non-negative; names and aliases unique ignoring case."""
        seen: dict[str, str] = {}
        for entry in self._raw_entries:
            name = str(entry["name"])
            for field_name in ("consumes", "produces"):
                if int(entry[field_name]) < 0:
                    errors.append(f"stitch {name!r}: {field_name} must be >= 0")
            for key in (name, *(str(a) for a in entry.get("aliases", []))):
                folded = key.lower()
                if folded in seen:
                    errors.append(
                        f"stitch {name!r}: {key!r} collides with {seen[folded]!r} (case-insensitive)"
                    )
                else:
                    seen[folded] = name

    def _check_work_to_end(self, errors: list[str]) -> None:
        for entry in self.work_to_end.values():
            if entry.stitch not in self.stitches:
                errors.append(
                    f"work_to_end phrase {entry.phrase!r}: stitch {entry.stitch!r} is not defined"
                )

    def _check_defaults(self, errors: list[str]) -> None:
        if self.defaults.max_target_repeats < 1:
            errors.append("defaults: max_target_repeats must be >= 1")
        if self.defaults.unlimited_multiplier < 1:
            errors.append("defaults: unlimited_multiplier must be >= 1")
        for action, token in self.defaults.change_tokens.items():
            if not token:
                errors.append(f"defaults: change_tokens.{action.value} is not set")
            elif self.lookup_entry(token) is None:
                errors.append(
                    f"defaults: change_tokens.{action.value} {token!r} is not a defined stitch"
                )
        if not self.defaults.no_change_instruction:
            errors.append("defaults: no_change_instruction is not set")

    def _build_lookup(self) -> None:
        self._folded = {}
        for entry in self.stitches.values():
            self._folded[entry.name.lower()] = entry
            for alias in entry.aliases:
                self._folded[alias.lower()] = entry

    # ── Query API ──────────────────────────────────────────────────────────────

    def lookup_entry(self, name: str) -> StitchEntry | None:
        """Return the entry for ``name``: exact match first, then case-insensitive."""
        name = " ".join(name.split())
        entry = self.stitches.get(name)
        if entry is not None:
            return entry
        return self._folded.get(name.lower())

    def lookup(self, name: str) -> StitchEffect | None:
        """Return the stitch effect for a built-in name, or None if unknown."""
        entry = self.lookup_entry(name)
        return entry.effect if entry else None

    def get_work_to_end(self, phrase: str) -> WorkToEndEntry | None:
        """Return the work-to-end entry for ``phrase`` (case and spacing insensitive)."""
        return self.work_to_end.get(" ".join(phrase.split()).lower())

    def names_in_category(self, category: str) -> tuple[str, ...]:
        return tuple(e.name for e in self.stitches.values() if e.category == category)


# ── Module-level singleton ─────────────────────────────────────────────────────
#
# Initialized eagerly at import time and read-only afterwards.

_registry: StitchRegistry = StitchRegistry(Path(os.getenv("KNITCALC_DATA_DIR") or _DATA_DIR))


def get_registry() -> StitchRegistry:
    """Return the module-level registry singleton."""
    return _registry
