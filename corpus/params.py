"""Plan parameters shared by every calculation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from corpus.config import DEFAULTS, SEARCH
from corpus.exceptions import ValidationError


class PlanMode(str, Enum):
    """Calculation mode."""

    BASIC = "basic"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class PlanParameters:
    """
    Immutable inputs for one calculation.

    Basic mode describes a flat annual expense over a fixed retirement
    period. Advanced mode is age based, with an accumulation phase funded by
    contributions and a retirement phase offset by additional income.
    Scenario exploration derives new values with `with_overrides` instead of
    mutating an existing one.

    Attributes:
        mode: Basic or advanced
        annual_expense: Annual spending need in today's money
        expected_return: Annual expected return (decimal, e.g. 0.07)
        standard_deviation: Annual standard deviation of returns (decimal)
        inflation: Annual inflation rate (decimal)
        adjust_for_inflation: Whether withdrawals grow with inflation
        retirement_period: Years in retirement (basic mode)
        current_age: Current age (advanced mode)
        retirement_age: Age at which withdrawals start (advanced mode)
        life_expectancy: Last age of the horizon (advanced mode)
        current_corpus: Current savings (advanced mode)
        annual_contribution: Contribution per year until retirement
        additional_income: Pension or other income during retirement
        target_success_rate: Target success rate (0-100, 0 = default)
        num_trials: Monte Carlo trials per batch
    """

    mode: PlanMode = PlanMode.BASIC
    annual_expense: float = DEFAULTS.basic_annual_expense
    expected_return: float = DEFAULTS.expected_return
    standard_deviation: float = DEFAULTS.standard_deviation
    inflation: float = DEFAULTS.inflation
    adjust_for_inflation: bool = True
    retirement_period: int = DEFAULTS.retirement_period
    current_age: int = 0
    retirement_age: int = 0
    life_expectancy: int = 0
    current_corpus: float = 0.0
    annual_contribution: float = 0.0
    additional_income: float = 0.0
    target_success_rate: float = 0.0
    num_trials: int = DEFAULTS.num_trials

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", PlanMode(self.mode))
        if self.num_trials <= 0:
            raise ValidationError("num_trials", "Must be greater than zero")
        if self.standard_deviation < 0:
            raise ValidationError("standard_deviation", "Cannot be negative")

        if self.mode is PlanMode.BASIC:
            if self.retirement_period <= 0:
                raise ValidationError("retirement_period", "Must be greater than zero")
        else:
            if self.retirement_age <= self.current_age:
                raise ValidationError("retirement_age", "Must be greater than current age")
            if self.life_expectancy <= self.retirement_age:
                raise ValidationError("life_expectancy", "Must be greater than retirement age")

    @classmethod
    def basic(
        cls,
        annual_expense: float = DEFAULTS.basic_annual_expense,
        retirement_period: int = DEFAULTS.retirement_period,
        expected_return: float = DEFAULTS.expected_return,
        standard_deviation: float = DEFAULTS.standard_deviation,
        inflation: float = DEFAULTS.inflation,
        adjust_for_inflation: bool = True,
        num_trials: int = DEFAULTS.num_trials,
        target_success_rate: float = 0.0,
    ) -> "PlanParameters":
        """Create basic-mode parameters."""
        return cls(
            mode=PlanMode.BASIC,
            annual_expense=annual_expense,
            retirement_period=retirement_period,
            expected_return=expected_return,
            standard_deviation=standard_deviation,
            inflation=inflation,
            adjust_for_inflation=adjust_for_inflation,
            num_trials=num_trials,
            target_success_rate=target_success_rate,
        )

    @classmethod
    def advanced(
        cls,
        current_age: int = DEFAULTS.current_age,
        retirement_age: int = DEFAULTS.retirement_age,
        life_expectancy: int = DEFAULTS.life_expectancy,
        current_corpus: float = DEFAULTS.current_corpus,
        annual_expense: float = DEFAULTS.advanced_annual_expense,
        annual_contribution: float = DEFAULTS.annual_contribution,
        additional_income: float = DEFAULTS.additional_income,
        expected_return: float = DEFAULTS.expected_return,
        standard_deviation: float = DEFAULTS.standard_deviation,
        inflation: float = DEFAULTS.inflation,
        target_success_rate: float = DEFAULTS.target_success_rate,
        num_trials: int = DEFAULTS.num_trials,
        adjust_for_inflation: bool = True,
    ) -> "PlanParameters":
        """Create advanced-mode parameters."""
        return cls(
            mode=PlanMode.ADVANCED,
            current_age=current_age,
            retirement_age=retirement_age,
            life_expectancy=life_expectancy,
            current_corpus=current_corpus,
            annual_expense=annual_expense,
            annual_contribution=annual_contribution,
            additional_income=additional_income,
            expected_return=expected_return,
            standard_deviation=standard_deviation,
            inflation=inflation,
            target_success_rate=target_success_rate,
            num_trials=num_trials,
            adjust_for_inflation=adjust_for_inflation,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlanParameters":
        """Create from a plain mapping (e.g. form or JSON input)."""
        values = dict(data)
        values["mode"] = PlanMode(values.get("mode", PlanMode.BASIC))
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "PlanParameters":
        """Return a copy with the given fields replaced (re-validated)."""
        return replace(self, **changes)

    @property
    def is_advanced(self) -> bool:
        return self.mode is PlanMode.ADVANCED

    @property
    def years_to_retirement(self) -> int:
        """Years of accumulation before withdrawals begin (0 in basic mode)."""
        if not self.is_advanced:
            return 0
        return self.retirement_age - self.current_age

    @property
    def retirement_years(self) -> int:
        """Length of the withdrawal phase in years."""
        if not self.is_advanced:
            return self.retirement_period
        return self.life_expectancy - self.retirement_age

    @property
    def retirement_months(self) -> int:
        return self.retirement_years * 12

    @property
    def effective_target_success_rate(self) -> float:
        """Target success rate (0-100), falling back to the default when unset."""
        if self.target_success_rate > 0:
            return self.target_success_rate
        return SEARCH.default_target_success_rate
