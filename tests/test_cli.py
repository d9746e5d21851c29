"""Tests for the command-line front end."""

import pytest

from cli import build_parser, main, params_from_args
from corpus.params import PlanMode


class TestParamsFromArgs:
    """Tests for argument conversion."""

    def test_percent_inputs_become_decimals(self):
        args = build_parser().parse_args(["basic", "--expected-return", "6", "--inflation", "2.5"])
        params = params_from_args(args)
        assert params.mode is PlanMode.BASIC
        assert params.expected_return == pytest.approx(0.06)
        assert params.inflation == pytest.approx(0.025)

    def test_advanced(self):
        args = build_parser().parse_args(
            ["advanced", "--current-age", "30", "--retirement-age", "60", "--no-inflation-adjustment"]
        )
        params = params_from_args(args)
        assert params.is_advanced
        assert params.years_to_retirement == 30
        assert not params.adjust_for_inflation


class TestMain:
    """Tests for the entry point."""

    def test_basic_run(self, capsys):
        assert main(["basic", "--trials", "1000", "--seed", "1"]) == 0
        assert "RETIREMENT CORPUS CALCULATOR REPORT" in capsys.readouterr().out

    def test_out_of_range_input(self, capsys):
        assert main(["basic", "--trials", "10"]) == 2
        assert "num_trials" in capsys.readouterr().err

    def test_inconsistent_ages(self, capsys):
        assert main(["advanced", "--current-age", "70", "--retirement-age", "65"]) == 2
        assert "retirement_age" in capsys.readouterr().err

    def test_invalid_workers(self):
        assert main(["basic", "--trials", "1000", "--workers", "0"]) == 2

    def test_save(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)
        assert main(["basic", "--trials", "1000", "--seed", "2", "--save"]) == 0
        assert len(list(tmp_path.glob("RetirementReport_Basic_*.txt"))) == 1
