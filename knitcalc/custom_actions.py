"""
User-defined stitch actions.

A CustomActionTable maps action names to the stitches they consume and
produce. Projects keep one table per pattern-type bucket (general, lace,
cable) in a CustomActionLibrary. Calculators receive a table as an explicit
argument and never modify it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .types import StitchEffect


class PatternBucket(str, Enum):
    """Namespace a custom action belongs to."""

    GENERAL = "general"
    LACE = "lace"
    CABLE = "cable"

    @classmethod
    def for_pattern_type(cls, pattern_type: str | None) -> PatternBucket:
        """Map a pattern type name (e.g. "Lace Pattern") to its bucket."""
        if pattern_type == "Lace Pattern":
            return cls.LACE
        if pattern_type == "Cable Pattern":
            return cls.CABLE
        return cls.GENERAL


@dataclass(frozen=True)
class CustomAction:
    """A named stitch maneuver with fixed stitch consumption and production."""

    name: str
    consumes: int
    produces: int

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("custom action name cannot be empty")
        if self.consumes < 0:
            raise ValueError(f"custom action {self.name!r}: consumes must be >= 0, got {self.consumes}")
        if self.produces < 0:
            raise ValueError(f"custom action {self.name!r}: produces must be >= 0, got {self.produces}")

    @property
    def effect(self) -> StitchEffect:
        return StitchEffect(consumes=self.consumes, produces=self.produces)

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any]) -> CustomAction:
        """
        Build from a stored project entry.

        Accepts both the editor's ``{name, consumed, stitches}`` shape and
        ``{name, consumes, produces}``. Missing counts default to 1.
        """
        consumes = entry.get("consumes", entry.get("consumed", 1))
        produces = entry.get("produces", entry.get("stitches", 1))
        return cls(name=str(entry["name"]).strip(), consumes=int(consumes), produces=int(produces))


@dataclass(frozen=True)
class CustomActionTable(Mapping[str, CustomAction]):
    """
    Read-only name -> CustomAction mapping.

    Names are unique within a table. Lookup is exact first, then
    case-insensitive.
    """

    actions: MappingProxyType[str, CustomAction] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        # Accept plain dicts at construction sites and promote to MappingProxyType.
        if isinstance(self.actions, dict):
            object.__setattr__(self, "actions", MappingProxyType(self.actions))

    @classmethod
    def of(cls, actions: Iterable[CustomAction]) -> CustomActionTable:
        result: dict[str, CustomAction] = {}
        for action in actions:
            if action.name in result:
                raise ValueError(f"duplicate custom action name: {action.name!r}")
            result[action.name] = action
        return cls(MappingProxyType(result))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> CustomActionTable:
        """
        Build from ``{name: {consumes, produces}}``.

        Values may also be CustomAction or StitchEffect instances. A
        CustomActionTable passed in is returned unchanged.
        """
        if isinstance(data, CustomActionTable):
            return data
        if not data:
            return EMPTY_TABLE
        actions: list[CustomAction] = []
        for name, value in data.items():
            if isinstance(value, CustomAction):
                actions.append(value)
            elif isinstance(value, StitchEffect):
                actions.append(CustomAction(name, value.consumes, value.produces))
            else:
                actions.append(CustomAction.from_entry({"name": name, **value}))
        return cls.of(actions)

    def __getitem__(self, name: str) -> CustomAction:
        return self.actions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.actions)

    def __len__(self) -> int:
        return len(self.actions)

    def lookup(self, name: str) -> CustomAction | None:
        name = " ".join(name.split())
        action = self.actions.get(name)
        if action is not None:
            return action
        lowered = name.lower()
        return next((a for n, a in self.actions.items() if n.lower() == lowered), None)


EMPTY_TABLE = CustomActionTable()


@dataclass(frozen=True)
class CustomActionLibrary:
    """A project's custom actions, one table per PatternBucket."""

    tables: MappingProxyType[PatternBucket, CustomActionTable] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if isinstance(self.tables, dict):
            object.__setattr__(self, "tables", MappingProxyType(self.tables))

    @classmethod
    def from_project_data(cls, data: Mapping[str, Any] | None) -> CustomActionLibrary:
        """
        Build from a project's stored custom keyboard actions.

        ``data`` maps bucket names to lists of entries. Non-mapping entries
        (placeholder slots such as the string ``"Custom"``) and entries
        without a name are skipped.
        """
        tables: dict[PatternBucket, CustomActionTable] = {}
        for bucket_name, entries in (data or {}).items():
            bucket = PatternBucket(bucket_name)
            actions = [
                CustomAction.from_entry(e)
                for e in entries or []
                if isinstance(e, Mapping) and str(e.get("name", "")).strip()
            ]
            tables[bucket] = CustomActionTable.of(actions)
        return cls(MappingProxyType(tables))

    def table(self, bucket: PatternBucket) -> CustomActionTable:
        return self.tables.get(bucket, EMPTY_TABLE)

    def for_pattern_type(self, pattern_type: str | None) -> CustomActionTable:
        return self.table(PatternBucket.for_pattern_type(pattern_type))
