"""Tests for plan parameters."""

import dataclasses

import pytest

from corpus.exceptions import CorpusCalculatorError, ValidationError
from corpus.params import PlanMode, PlanParameters


class TestConstruction:
    """Tests for structural invariants."""

    def test_basic_defaults(self):
        params = PlanParameters.basic()
        assert params.mode is PlanMode.BASIC
        assert params.annual_expense == 60_000
        assert params.retirement_years == 30
        assert params.years_to_retirement == 0

    def test_advanced_defaults(self):
        params = PlanParameters.advanced()
        assert params.years_to_retirement == 25
        assert params.retirement_years == 25
        assert params.retirement_months == 300

    def test_retirement_not_after_current_age(self):
        with pytest.raises(ValidationError) as exc_info:
            PlanParameters.advanced(current_age=65, retirement_age=65)
        assert exc_info.value.field == "retirement_age"

    def test_life_expectancy_not_after_retirement(self):
        with pytest.raises(ValidationError):
            PlanParameters.advanced(retirement_age=65, life_expectancy=65)

    def test_non_positive_trials(self):
        with pytest.raises(ValidationError):
            PlanParameters.basic(num_trials=0)

    def test_negative_stdev(self):
        with pytest.raises(ValidationError):
            PlanParameters.basic(standard_deviation=-0.1)

    def test_non_positive_period(self):
        with pytest.raises(ValidationError):
            PlanParameters.basic(retirement_period=0)

    def test_error_hierarchy(self):
        """Validation errors are catchable generically."""
        with pytest.raises(ValueError):
            PlanParameters.basic(num_trials=-1)
        with pytest.raises(CorpusCalculatorError):
            PlanParameters.basic(num_trials=-1)


class TestOverrides:
    """Tests for copy-on-change."""

    def test_with_overrides_copies(self):
        params = PlanParameters.advanced()
        updated = params.with_overrides(retirement_age=67)
        assert updated.retirement_age == 67
        assert params.retirement_age == 65

    def test_overrides_are_validated(self):
        with pytest.raises(ValidationError):
            PlanParameters.advanced().with_overrides(retirement_age=30)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            PlanParameters.basic().annual_expense = 1

    def test_from_dict(self):
        params = PlanParameters.from_dict(
            {"mode": "advanced", "current_age": 30, "retirement_age": 60, "life_expectancy": 85}
        )
        assert params.is_advanced
        assert params.years_to_retirement == 30

    def test_basic_mode_from_string(self):
        """A plain string mode is coerced to the enum."""
        params = PlanParameters(mode="basic", annual_expense=60_000, retirement_period=30)
        assert params.mode is PlanMode.BASIC
        assert not params.is_advanced
        assert params.retirement_years == 30

    def test_advanced_mode_from_string(self):
        params = PlanParameters(
            mode="advanced", current_age=40, retirement_age=65, life_expectancy=90
        )
        assert params.mode is PlanMode.ADVANCED
        assert params.is_advanced
        assert params.years_to_retirement == 25
        assert params.retirement_years == 25

    def test_unknown_mode_string(self):
        with pytest.raises(ValueError):
            PlanParameters(mode="expert")


class TestTarget:
    """Tests for the target success rate."""

    def test_unset_uses_default(self):
        assert PlanParameters.basic().effective_target_success_rate == 85

    def test_explicit(self):
        assert PlanParameters.basic(target_success_rate=90).effective_target_success_rate == 90
