"""Tests for the knitcalc command line."""

import json

import pytest

from knitcalc import cli


class TestDistribute:
    def test_prints_formatted_instruction(self, capsys):
        assert cli.main(["distribute", "20", "increase", "4"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out == ["(K4, inc) 4 times, K4", "20 sts → 24 sts (+4 sts)"]

    def test_json_round(self, capsys):
        assert cli.main(["--json", "distribute", "20", "increase", "4", "--construction", "round"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["sections"] == [5, 5, 5, 5]
        assert payload["instruction"] == "K5, inc, K5, inc, K5, inc, K5, inc"
        assert payload["ending_stitches"] == 24
        assert payload["construction"] == "round"

    def test_impossible_exits_one(self, capsys):
        assert cli.main(["distribute", "3", "increase", "4"]) == 1
        assert "Impossible: 4 increases would create 5 sections" in capsys.readouterr().err

    def test_bad_action_is_usage_error(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["distribute", "20", "sideways", "4"])
        assert excinfo.value.code == 2


class TestTarget:
    def test_exact(self, capsys):
        assert cli.main(["target", "80", "100", "4", "--rows-per-repeat", "4"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "Repeats: 5 (exact)"
        assert out[1] == "Rows: 20 (target reached on row 20)"

    def test_complete_sequence_json(self, capsys):
        argv = ["--json", "target", "80", "102", "4", "--rows-per-repeat", "4", "--complete-sequence"]
        assert cli.main(argv) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["repeats"] == 5
        assert payload["is_exact"] is False
        assert payload["total_rows"] == 24
        assert payload["ending_stitches"] == 104

    def test_direction_mismatch_exits_one(self, capsys):
        assert cli.main(["target", "80", "100", "-4"]) == 1
        assert "Error:" in capsys.readouterr().err


class TestRow:
    def test_complete_row(self, capsys):
        assert cli.main(["row", "K2tog, K2tog, K2tog", "6"]) == 0
        out = capsys.readouterr().out
        assert "Consumed 6 of 6 sts, produced 3" in out
        assert "Row: all stitches consumed" in out

    def test_over_consumed_exits_one(self, capsys):
        assert cli.main(["--json", "row", "K10", "8"]) == 1
        payload = json.loads(capsys.readouterr().out)
        assert payload["is_valid"] is False
        assert payload["reason"] == "over_consumed"

    def test_custom_actions(self, capsys):
        argv = ["--json", "row", "Cluster, K2", "5", "--custom", "Cluster:3:1"]
        assert cli.main(argv) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["stitches_consumed"] == 5
        assert payload["stitches_produced"] == 3
        assert payload["is_complete"] is True

    def test_unknown_actions_listed(self, capsys):
        assert cli.main(["row", "K2, frob", "4"]) == 0
        assert "Unknown actions: frob" in capsys.readouterr().out

    @pytest.mark.parametrize("custom", ["Cluster", "Cluster:x:1", "Cluster:-1:1"])
    def test_bad_custom_is_usage_error(self, custom):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["row", "K2", "4", "--custom", custom])
        assert excinfo.value.code == 2

    def test_duplicate_custom_is_usage_error(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["row", "K2", "4", "--custom", "A:1:1", "--custom", "A:2:1"])
        assert excinfo.value.code == 2


class TestFormat:
    def test_format(self, capsys):
        assert cli.main(["format", "K3, K2tog, K3, K2tog, K3, K2tog, K3"]) == 0
        assert capsys.readouterr().out.strip() == "(K3, K2tog) 3 times, K3"
