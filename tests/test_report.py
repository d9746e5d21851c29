"""Tests for text reports and export."""

from datetime import datetime

import pytest

from corpus.params import PlanMode
from corpus.planner import run_advanced_plan, run_basic_plan
from corpus.report import (
    advanced_report,
    basic_report,
    report_filename,
    save_report,
    scenario_summaries,
    year_by_year_report,
)
from corpus.scenarios import ScenarioCalibrator


class TestBasicReport:
    """Tests for the basic-mode report."""

    def test_sections(self, funding_engine, basic_params):
        text = basic_report(run_basic_plan(basic_params, funding_engine))
        assert "RETIREMENT CORPUS CALCULATOR REPORT" in text
        assert "INPUTS:" in text
        assert "- Retirement Period: 30 years" in text
        assert "- Required Corpus: $1.5" in text
        assert "Initial Withdrawal Rate" in text

    def test_low_success_note(self, funding_engine, basic_params):
        """Success around 85% does not trigger the low-success note."""
        text = basic_report(run_basic_plan(basic_params, funding_engine))
        assert "below 80%" not in text


class TestAdvancedReport:
    """Tests for the advanced-mode report."""

    def test_shortfall(self, funding_engine, flat_advanced_params):
        result = run_advanced_plan(flat_advanced_params, funding_engine, include_tracking=False)
        text = advanced_report(result)
        assert "RETIREMENT READINESS:" in text
        assert "Current Status: Shortfall" in text
        assert "SCENARIO 2 - RETIREMENT AGE:" in text
        assert "Delaying retirement by 2 years" in text
        assert "BALANCED RECOMMENDATION:" in text
        assert "INFLATION IMPACT:" in text
        assert "YEAR-BY-YEAR" not in text

    def test_on_track(self, funding_engine, flat_advanced_params):
        params = flat_advanced_params.with_overrides(target_success_rate=70)
        text = advanced_report(run_advanced_plan(params, funding_engine, include_tracking=False))
        assert "Current Status: On Track (Surplus of $60,000.00)" in text
        assert "CURRENT PLAN:" in text

    def test_includes_tracking(self, engine, short_advanced_params):
        text = advanced_report(run_advanced_plan(short_advanced_params, engine))
        assert "YEAR-BY-YEAR RETIREMENT CORPUS TRACKING" in text
        assert "KEY INSIGHTS:" in text


class TestScenarioSummaries:
    """Tests for scenario one-liners."""

    def test_titles(self, funding_engine, flat_advanced_params):
        analysis = ScenarioCalibrator(funding_engine).generate_scenarios(flat_advanced_params)
        summaries = scenario_summaries(analysis)
        assert list(summaries) == [
            "SCENARIO 1 - CONTRIBUTION",
            "SCENARIO 2 - RETIREMENT AGE",
            "SCENARIO 3 - EXPENSES",
            "BALANCED RECOMMENDATION",
        ]
        assert summaries["SCENARIO 1 - CONTRIBUTION"].startswith(
            "Required additional contribution: $"
        )


class TestYearByYearReport:
    """Tests for the per-age table."""

    @pytest.fixture
    def depleting_result(self, engine, short_advanced_params):
        params = short_advanced_params.with_overrides(
            annual_expense=150_000, expected_return=0.0, standard_deviation=0.0
        )
        return params, run_advanced_plan(params, engine).tracking

    def test_table_rows(self, engine, short_advanced_params):
        tracking = run_advanced_plan(short_advanced_params, engine).tracking
        text = year_by_year_report(short_advanced_params, tracking)
        assert "Age  | Start Corpus" in text
        for age in range(60, 71):
            assert any(line.startswith(f"{age:<5}|") for line in text.splitlines())
        assert "NOTE ABOUT SUCCESS METRICS:" in text

    def test_high_risk_warning(self, depleting_result):
        params, tracking = depleting_result
        text = year_by_year_report(params, tracking)
        assert "!!! WARNING: HIGH DEPLETION RISK IN THIS PERIOD !!!" in text
        assert "Depletion risk first exceeds 10% at age" in text
        assert "RECOMMENDATION: Consider adjusting your retirement plan" in text


class TestSaveReport:
    """Tests for report export."""

    def test_filename(self):
        name = report_filename(PlanMode.ADVANCED, datetime(2024, 3, 5, 14, 7, 9))
        assert name == "RetirementReport_Advanced_20240305_140709.txt"

    def test_writes_file(self, tmp_path):
        path = save_report("hello", directory=tmp_path, mode="basic")
        assert path is not None
        assert path.parent == tmp_path
        assert path.name.startswith("RetirementReport_Basic_")
        assert path.read_text(encoding="utf-8") == "hello"

    def test_explicit_filename(self, tmp_path):
        path = save_report("hello", filename="report.txt", directory=tmp_path)
        assert path == tmp_path / "report.txt"

    def test_failure_returns_none(self, tmp_path):
        """Unwritable targets are reported, not raised."""
        assert save_report("hello", directory=tmp_path / "missing" / "dir") is None
