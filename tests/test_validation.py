"""Tests for input validation."""

from corpus.params import PlanParameters
from corpus.validation import (
    ValidationResult,
    validate_ages,
    validate_amounts,
    validate_financial_assumptions,
    validate_plan,
    validate_simulation_params,
)


class TestAgeValidation:
    """Tests for age validation."""

    def test_valid_ages(self):
        """Normal age range passes validation."""
        assert validate_ages(40, 65, 90).is_valid()

    def test_current_age_too_young(self):
        """Age under 18 fails."""
        result = validate_ages(17, 65, 90)
        assert not result.is_valid()
        assert any("current_age" in e[0] for e in result.errors)

    def test_life_expectancy_too_old(self):
        """Age over 100 fails."""
        result = validate_ages(40, 65, 101)
        assert any("life_expectancy" in e[0] for e in result.errors)

    def test_retirement_before_current(self):
        result = validate_ages(40, 35, 90)
        assert any("retirement_age" in e[0] for e in result.errors)

    def test_life_expectancy_before_retirement(self):
        result = validate_ages(40, 65, 65)
        assert any("life_expectancy" in e[0] for e in result.errors)


class TestAmountValidation:
    """Tests for money inputs."""

    def test_zero_amounts(self):
        assert validate_amounts({"current_corpus": 0, "annual_contribution": 0}).is_valid()

    def test_negative_amount(self):
        result = validate_amounts({"annual_expense": -1})
        assert result.errors == [("annual_expense", "Cannot be negative")]

    def test_extreme_amount(self):
        """Amounts over 1 billion fail the sanity check."""
        assert not validate_amounts({"current_corpus": 2_000_000_000}).is_valid()


class TestFinancialAssumptions:
    """Tests for return, volatility and inflation bounds."""

    def test_defaults_pass(self):
        assert validate_financial_assumptions(0.07, 0.10, 0.03).is_valid()

    def test_bounds_are_inclusive(self):
        assert validate_financial_assumptions(-0.02, 0.30, 0.10).is_valid()
        assert validate_financial_assumptions(0.15, 0.01, 0.0).is_valid()

    def test_return_too_high(self):
        result = validate_financial_assumptions(0.16, 0.10, 0.03)
        assert [e[0] for e in result.errors] == ["expected_return"]

    def test_zero_volatility_rejected(self):
        result = validate_financial_assumptions(0.07, 0.0, 0.03)
        assert [e[0] for e in result.errors] == ["standard_deviation"]

    def test_negative_inflation(self):
        result = validate_financial_assumptions(0.07, 0.10, -0.01)
        assert [e[0] for e in result.errors] == ["inflation"]


class TestSimulationParams:
    """Tests for trial count, target and period."""

    def test_valid(self):
        assert validate_simulation_params(5000, 85, 30).is_valid()

    def test_too_few_trials(self):
        result = validate_simulation_params(500, 85)
        assert any("num_trials" in e[0] for e in result.errors)

    def test_too_many_trials(self):
        assert not validate_simulation_params(20_000, 85).is_valid()

    def test_unset_target_allowed(self):
        """A zero target means the default and is accepted."""
        assert validate_simulation_params(5000, 0).is_valid()

    def test_target_out_of_range(self):
        assert not validate_simulation_params(5000, 100).is_valid()

    def test_retirement_period_bounds(self):
        assert not validate_simulation_params(5000, 85, 4).is_valid()
        assert not validate_simulation_params(5000, 85, 51).is_valid()


class TestValidatePlan:
    """Tests for combined plan validation."""

    def test_default_basic_plan(self):
        assert validate_plan(PlanParameters.basic()).is_valid()

    def test_default_advanced_plan(self):
        assert validate_plan(PlanParameters.advanced()).is_valid()

    def test_collects_every_error(self):
        """All problems are reported, not just the first."""
        params = PlanParameters.advanced(
            current_age=10,
            retirement_age=65,
            life_expectancy=90,
            current_corpus=-5,
            expected_return=0.5,
            num_trials=100,
        )
        result = validate_plan(params)
        fields = {name for name, _ in result.errors}
        assert fields == {"current_age", "current_corpus", "expected_return", "num_trials"}

    def test_error_messages(self):
        result = ValidationResult()
        result.add_error("inflation", "Too high")
        assert result.error_messages() == ["inflation: Too high"]

    def test_basic_plan_period(self):
        params = PlanParameters.basic(retirement_period=60)
        assert [e[0] for e in validate_plan(params).errors] == ["retirement_period"]
