"""
Tests for the knitting notation formatter.

Every formatted result is also expanded back to check that formatting never
changes the instruction's meaning.
"""

import pytest

from knitcalc.notation import formatter
from knitcalc.notation.formatter import (
    Literal,
    Repeat,
    Run,
    compress_tokens,
    expand_knitting_instruction,
    format_knitting_instruction,
    format_operations,
    split_tokens,
)
from knitcalc.notation.parser import parse_row


def assert_formats(raw: str, expected: str) -> None:
    result = format_knitting_instruction(raw)
    assert result == expected
    assert expand_knitting_instruction(result) == split_tokens(raw)


class TestSplitTokens:
    def test_top_level_commas(self):
        assert split_tokens("K2, inc ,K3") == ("K2", "inc", "K3")

    def test_brackets_are_opaque(self):
        assert split_tokens("K1, [K2, inc] × 3, K1") == ("K1", "[K2, inc] × 3", "K1")

    def test_blank_tokens_dropped(self):
        assert split_tokens("K2, , inc,") == ("K2", "inc")


class TestSections:
    def test_render(self):
        assert Literal(("K1", "inc")).render() == "K1, inc"
        assert Repeat(("K4", "inc"), 4).render() == "(K4, inc) 4 times"
        assert Run("K2tog", 3).render() == "K2tog 3 times"

    def test_expand(self):
        assert Repeat(("K4", "inc"), 2).expand() == ("K4", "inc", "K4", "inc")
        assert Run("P", 2).expand() == ("P", "P")


class TestDistributionOutput:
    def test_even_increase(self):
        assert_formats("K4, inc, K4, inc, K4, inc, K4, inc, K4", "(K4, inc) 4 times, K4")

    def test_even_decrease(self):
        assert_formats("K3, K2tog, K3, K2tog, K3, K2tog, K3", "(K3, K2tog) 3 times, K3")

    def test_leading_tokens_then_repeat(self):
        raw = (
            "K1, inc, K2, inc, K2, inc, K2, inc, K2, inc, K2, inc, K2, inc, K2, inc, K2, inc, K2, inc, K1"
        )
        assert_formats(raw, "K1, inc, (K2, inc) 9 times, K1")

    def test_repeat_in_the_middle(self):
        raw = "K2tog, K2tog, K1, K2tog, K1, K2tog, K1, K2tog, K1, K2tog, K2tog, K2tog"
        assert_formats(raw, "K2tog, K2tog, (K1, K2tog) 4 times, K2tog, K2tog")


class TestMultiPatternSectional:
    def test_three_pattern_sections(self):
        raw = "K2, inc, K2, inc, K2, inc, K3, inc, K3, inc, K2, inc, K2, inc, K2, inc, K2"
        assert_formats(raw, "(K2, inc) 3 times, (K3, inc) 2 times, (K2, inc) 3 times, K2")

    def test_mirrored_sections(self):
        raw = "K1, inc, K1, inc, K3, inc, K3, inc, K3, inc, K1, inc, K1, inc"
        assert_formats(raw, "(K1, inc) 2 times, (K3, inc) 3 times, (K1, inc) 2 times")

    def test_literal_tail(self):
        raw = "K1, inc, K1, inc, " + "K2, inc, " * 8 + "K1, inc, K1"
        assert_formats(raw, "(K1, inc) 2 times, (K2, inc) 8 times, K1, inc, K1")


class TestPatternSectionsFromStart:
    def test_two_units_then_tail(self):
        tokens = ("K1", "inc", "K1", "inc", "K2", "P2", "K2", "P2", "K3", "K3", "K3")
        assert formatter._pattern_sections_from_start(tokens) == [
            Repeat(("K1", "inc"), 2),
            Repeat(("K2", "P2"), 2),
            Run("K3", 3),
        ]

    def test_needs_room_for_a_second_unit(self):
        tokens = ("K1", "inc", "K1", "inc", "K1", "inc", "K1", "P")
        assert formatter._pattern_sections_from_start(tokens) is None


class TestSectionsFromEnds:
    def test_all_identical(self):
        assert_formats("K2tog, K2tog, K2tog, K2tog, K2tog", "K2tog 5 times")

    def test_both_ends_with_middle(self):
        assert_formats(
            "K2tog, K2tog, K1, K3, P, K2tog, K2tog",
            "K2tog 2 times, K1, K3, P, K2tog 2 times",
        )

    def test_start_run_then_run(self):
        assert_formats("inc, inc, inc, inc, K4, K4, K4", "inc 4 times, K4 3 times")


class TestSimplePattern:
    def test_short_repeat_with_tail(self):
        assert_formats("K2, P2, K2, P2, K1", "(K2, P2) 2 times, K1")


class TestUnchanged:
    @pytest.mark.parametrize(
        "raw",
        [
            "K10, inc",
            "K3, inc, K5, K2tog, K7, inc",
            "K1",
        ],
    )
    def test_no_pattern(self, raw):
        assert format_knitting_instruction(raw) == raw

    def test_empty_and_non_string(self):
        assert format_knitting_instruction("") == ""
        assert format_knitting_instruction(None) is None  # type: ignore[arg-type]

    def test_fewer_than_three_tokens(self):
        assert compress_tokens(("K2", "K2")) is None

    def test_idempotent_on_simple_output(self):
        once = format_knitting_instruction("K4, inc, K4, inc, K4, inc, K4, inc, K4")
        assert format_knitting_instruction(once) == once


class TestFailureFallback:
    def test_phase_error_returns_raw_with_warning(self, monkeypatch):
        def boom(tokens):
            raise RuntimeError("broken phase")

        monkeypatch.setattr(formatter, "_PHASES", (("boom", boom),))
        raw = "K4, inc, K4, inc, K4"
        with pytest.warns(RuntimeWarning, match="broken phase"):
            assert format_knitting_instruction(raw) == raw


class TestFormatOperations:
    def test_formats_parsed_groups(self):
        assert format_operations(parse_row("[K4, inc] × 4, K4")) == "(K4, inc) 4 times, K4"

    def test_expand_nested_shorthand(self):
        assert expand_knitting_instruction("K1, (K2, inc) 2 times, P 2 times") == (
            "K1",
            "K2",
            "inc",
            "K2",
            "inc",
            "P",
            "P",
        )
