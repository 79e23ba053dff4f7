"""Tests for the permissive row-text parser."""

import pytest

from knitcalc.custom_actions import CustomAction, CustomActionTable
from knitcalc.notation.operations import (
    CustomStitch,
    PlainStitch,
    RepeatGroup,
    UnknownAction,
    WorkToEnd,
    render_operations,
)
from knitcalc.notation.parser import parse_row
from knitcalc.types import StitchEffect


class TestSimpleTokens:
    def test_empty(self):
        assert parse_row("") == ()
        assert parse_row("   ") == ()
        assert parse_row(None) == ()

    def test_builtin(self):
        (op,) = parse_row("K2tog")
        assert op == PlainStitch("K2tog", StitchEffect(2, 1))

    def test_case_insensitive(self):
        (op,) = parse_row("ssk")
        assert op.name == "SSK"

    def test_numbered(self):
        (op,) = parse_row("K37")
        assert op == PlainStitch("K", StitchEffect(1, 1), count=37)

    def test_numbered_zero_is_dropped(self):
        assert parse_row("K0, P2") == (PlainStitch("P", StitchEffect(1, 1), count=2),)

    @pytest.mark.parametrize("text", ["K2tog × 3", "K2tog * 3", "K2tog x 3", "K2tog 3 times"])
    def test_multiplier_forms(self, text):
        (op,) = parse_row(text)
        assert op.name == "K2tog"
        assert op.count == 3

    def test_dangling_multiplier_means_one(self):
        (op,) = parse_row("SSK ×")
        assert op.count == 1

    def test_multi_word_names(self):
        assert [op.name for op in parse_row("K2tog tbl, Sl1 wyif, 2/2 LC")] == [
            "K2tog tbl",
            "Sl1 wyif",
            "2/2 LC",
        ]

    def test_whitespace_separated_pieces(self):
        assert [op.name for op in parse_row("K2 P2")] == ["K", "P"]

    def test_unknown(self):
        ops = parse_row("K2, frob, K2")
        assert ops[1] == UnknownAction("frob")


class TestGroups:
    def test_group_with_multiplier(self):
        (group,) = parse_row("[K2tog, YO] × 3")
        assert isinstance(group, RepeatGroup)
        assert group.times == 3
        assert [op.name for op in group.operations] == ["K2tog", "YO"]

    @pytest.mark.parametrize("text", ["(K1, P1) 4", "(K1, P1) 4 times", "(K1, P1) x4", "(K1, P1)*4"])
    def test_group_multiplier_forms(self, text):
        (group,) = parse_row(text)
        assert group.times == 4
        assert group.bracket == "("

    def test_nested(self):
        (outer,) = parse_row("[[K1, YO] × 2, K2tog] × 3")
        inner = outer.operations[0]
        assert outer.times == 3
        assert isinstance(inner, RepeatGroup)
        assert inner.times == 2

    def test_unclosed_group_closes_at_end(self):
        ops = parse_row("K2, [K2tog, YO")
        assert isinstance(ops[1], RepeatGroup)
        assert ops[1].times == 1
        assert len(ops[1].operations) == 2

    def test_stray_closer_ignored(self):
        assert [op.name for op in parse_row("K2], P2")] == ["K", "P"]

    def test_zero_times_drops_group(self):
        assert parse_row("[K2] × 0, P1") == (PlainStitch("P1", StitchEffect(1, 1)),)

    def test_round_trip_through_render(self):
        text = "K2, [K2tog, YO] × 3, K to end"
        assert render_operations(parse_row(text)) == text


class TestResolution:
    def test_work_to_end(self):
        (op,) = parse_row("K to end")
        assert op == WorkToEnd(text="K to end", stitch="K", effect=StitchEffect(1, 1))

    def test_custom_from_table(self):
        table = CustomActionTable.of([CustomAction("Cluster", 3, 1)])
        (op,) = parse_row("cluster × 2", custom_actions=table)
        assert op == CustomStitch("Cluster", StitchEffect(3, 1), count=2)

    def test_custom_from_plain_mapping(self):
        (op,) = parse_row("Nupp", custom_actions={"Nupp": {"consumes": 1, "produces": 5}})
        assert isinstance(op, CustomStitch)
        assert op.effect == StitchEffect(1, 5)

    def test_builtin_wins_over_custom(self):
        (op,) = parse_row("K2tog", custom_actions={"K2tog": {"consumes": 9, "produces": 9}})
        assert isinstance(op, PlainStitch)
