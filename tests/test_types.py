"""Tests for the shared enums and StitchEffect."""

import pytest

from knitcalc.types import NO_EFFECT, ConstructionMode, ShapingAction, Side, StitchEffect


class TestEnums:
    def test_construction_values(self):
        assert ConstructionMode.FLAT.value == "flat"
        assert ConstructionMode.ROUND.value == "round"

    def test_shaping_values(self):
        assert ShapingAction.INCREASE.value == "increase"
        assert ShapingAction.DECREASE.value == "decrease"

    def test_is_str(self):
        """Enums inherit from str for serialization compatibility."""
        assert isinstance(ConstructionMode.FLAT, str)
        assert isinstance(ShapingAction.DECREASE, str)
        assert isinstance(Side.WS, str)

    def test_from_value(self):
        assert ConstructionMode("round") is ConstructionMode.ROUND
        assert ShapingAction("increase") is ShapingAction.INCREASE


class TestStitchEffect:
    def test_net(self):
        assert StitchEffect(consumes=2, produces=1).net == -1
        assert StitchEffect(consumes=0, produces=1).net == 1
        assert NO_EFFECT.net == 0

    def test_times(self):
        assert StitchEffect(2, 1).times(3) == StitchEffect(6, 3)

    def test_is_frozen(self):
        effect = StitchEffect(1, 1)
        with pytest.raises(AttributeError):
            effect.consumes = 2  # type: ignore[misc]

    def test_negative_consumes_raises(self):
        with pytest.raises(ValueError, match="consumes"):
            StitchEffect(consumes=-1, produces=1)

    def test_negative_produces_raises(self):
        with pytest.raises(ValueError, match="produces"):
            StitchEffect(consumes=1, produces=-1)
