"""
Shared vocabulary for the knitting calculators.

Enums inherit from ``str`` so values serialize directly into stored step
data and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ConstructionMode(str, Enum):
    """How the piece is worked: back-and-forth rows or a continuous spiral."""

    FLAT = "flat"
    ROUND = "round"


class ShapingAction(str, Enum):
    """Direction of a shaping operation."""

    INCREASE = "increase"
    DECREASE = "decrease"


class Side(str, Enum):
    """Fabric side a row is worked on."""

    RS = "RS"
    WS = "WS"


@dataclass(frozen=True)
class StitchEffect:
    """Stitches taken from the left needle and placed on the right by one action."""

    consumes: int
    produces: int

    def __post_init__(self) -> None:
        if self.consumes < 0:
            raise ValueError(f"consumes cannot be negative, got {self.consumes}")
        if self.produces < 0:
            raise ValueError(f"produces cannot be negative, got {self.produces}")

    @property
    def net(self) -> int:
        return self.produces - self.consumes

    def times(self, n: int) -> StitchEffect:
        """Return the effect of working this action ``n`` times."""
        return StitchEffect(consumes=self.consumes * n, produces=self.produces * n)


NO_EFFECT = StitchEffect(consumes=0, produces=0)
