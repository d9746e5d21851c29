"""Default assumptions, input bounds and search constants."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlanDefaults:
    """
    Default plan inputs offered by the front ends.

    Attributes:
        num_trials: Monte Carlo trials per batch
        expected_return: Annual expected return (decimal)
        standard_deviation: Annual standard deviation (decimal)
        inflation: Annual inflation rate (decimal)
        target_success_rate: Target success rate (0-100)
        basic_annual_expense: Annual expense in basic mode
        retirement_period: Retirement length in years in basic mode
        current_age: Current age in advanced mode
        retirement_age: Retirement age in advanced mode
        life_expectancy: Life expectancy in advanced mode
        current_corpus: Current savings in advanced mode
        advanced_annual_expense: Annual expense in advanced mode
        annual_contribution: Annual contribution until retirement
        additional_income: Pension or Social Security income in retirement
    """

    num_trials: int = 5000
    expected_return: float = 0.07
    standard_deviation: float = 0.10
    inflation: float = 0.03
    target_success_rate: float = 85.0
    basic_annual_expense: float = 60_000
    retirement_period: int = 30
    current_age: int = 40
    retirement_age: int = 65
    life_expectancy: int = 90
    current_corpus: float = 500_000
    advanced_annual_expense: float = 80_000
    annual_contribution: float = 30_000
    additional_income: float = 20_000


@dataclass(frozen=True)
class InputBounds:
    """Ranges accepted from the input layer (inclusive)."""

    min_trials: int = 1_000
    max_trials: int = 10_000
    min_retirement_period: int = 5
    max_retirement_period: int = 50
    min_age: int = 18
    max_age: int = 100
    min_expected_return: float = -0.02
    max_expected_return: float = 0.15
    min_standard_deviation: float = 0.01
    max_standard_deviation: float = 0.30
    min_inflation: float = 0.0
    max_inflation: float = 0.10
    min_target_success_rate: float = 1.0
    max_target_success_rate: float = 99.9


@dataclass(frozen=True)
class SearchSettings:
    """
    Constants shared by the bisection searches.

    The corpus search seeds its guess with the 4% withdrawal rule and
    brackets it between half and three times that guess. Lever searches
    bound contribution increases at twice the current contribution and
    expense cuts at 40% of the current expense (hard cap 50% after the
    safety margin).
    """

    withdrawal_rule_rate: float = 0.04
    corpus_lower_multiple: float = 0.5
    corpus_upper_multiple: float = 3.0
    corpus_iterations: int = 15
    corpus_tolerance: float = 0.005  # fraction, i.e. 0.5 points
    corpus_margin_threshold: float = 0.01
    corpus_margin_multiplier: float = 2.0
    default_target_success_rate: float = 85.0
    lever_iterations: int = 10
    lever_tolerance: float = 0.5  # percentage points
    lever_margin_threshold: float = 1.0
    lever_margin_multiplier: float = 3.0
    contribution_start_fraction: float = 0.2
    contribution_max_multiple: float = 2.0
    expense_start_fraction: float = 0.1
    expense_max_fraction: float = 0.4
    expense_hard_cap_fraction: float = 0.5
    max_retirement_delay: int = 10
    balanced_step_fraction: float = 0.1


DEFAULTS = PlanDefaults()
BOUNDS = InputBounds()
SEARCH = SearchSettings()

DEFAULT_CHUNK_SIZE = 1_000
REPORT_FILE_FORMAT = "RetirementReport_{mode}_{timestamp}.txt"
REPORT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
