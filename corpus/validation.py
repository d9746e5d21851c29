"""Input validation for corpus calculator parameters."""

from __future__ import annotations

from dataclasses import dataclass, field

from corpus.config import BOUNDS, InputBounds
from corpus.params import PlanParameters


@dataclass
class ValidationResult:
    """Result of validation containing any errors found."""

    errors: list[tuple[str, str]] = field(default_factory=list)

    def add_error(self, field_name: str, message: str) -> None:
        """Add a validation error."""
        self.errors.append((field_name, message))

    def is_valid(self) -> bool:
        """Return True if no validation errors."""
        return len(self.errors) == 0

    def error_messages(self) -> list[str]:
        """Return formatted error messages."""
        return [f"{field_name}: {message}" for field_name, message in self.errors]


def validate_ages(
    current_age: int,
    retirement_age: int,
    life_expectancy: int,
    bounds: InputBounds = BOUNDS,
) -> ValidationResult:
    """Validate age-related inputs."""
    result = ValidationResult()

    for name, age in (
        ("current_age", current_age),
        ("retirement_age", retirement_age),
        ("life_expectancy", life_expectancy),
    ):
        if age < bounds.min_age:
            result.add_error(name, f"Must be at least {bounds.min_age}")
        if age > bounds.max_age:
            result.add_error(name, f"Must be at most {bounds.max_age}")

    if retirement_age <= current_age:
        result.add_error("retirement_age", "Must be greater than current age")
    if life_expectancy <= retirement_age:
        result.add_error("life_expectancy", "Must be greater than retirement age")

    return result


def validate_amounts(amounts: dict[str, float]) -> ValidationResult:
    """Validate money inputs (expense, corpus, contribution, income)."""
    result = ValidationResult()

    for name, value in amounts.items():
        if value < 0:
            result.add_error(name, "Cannot be negative")
        if value > 1_000_000_000:  # 1 billion sanity check
            result.add_error(name, "Exceeds maximum allowed value")

    return result


def validate_financial_assumptions(
    expected_return: float,
    standard_deviation: float,
    inflation: float,
    bounds: InputBounds = BOUNDS,
) -> ValidationResult:
    """Validate return, volatility and inflation (decimals)."""
    result = ValidationResult()

    if not bounds.min_expected_return <= expected_return <= bounds.max_expected_return:
        result.add_error(
            "expected_return",
            f"Must be between {bounds.min_expected_return:.0%} and {bounds.max_expected_return:.0%}",
        )
    if not bounds.min_standard_deviation <= standard_deviation <= bounds.max_standard_deviation:
        result.add_error(
            "standard_deviation",
            f"Must be between {bounds.min_standard_deviation:.0%} and "
            f"{bounds.max_standard_deviation:.0%}",
        )
    if not bounds.min_inflation <= inflation <= bounds.max_inflation:
        result.add_error(
            "inflation",
            f"Must be between {bounds.min_inflation:.0%} and {bounds.max_inflation:.0%}",
        )

    return result


def validate_simulation_params(
    num_trials: int,
    target_success_rate: float,
    retirement_period: int | None = None,
    bounds: InputBounds = BOUNDS,
) -> ValidationResult:
    """Validate trial count, target and (basic mode) retirement period."""
    result = ValidationResult()

    if num_trials < bounds.min_trials:
        result.add_error("num_trials", f"Must run at least {bounds.min_trials:,} trials")
    if num_trials > bounds.max_trials:
        result.add_error("num_trials", f"Cannot run more than {bounds.max_trials:,} trials")

    # 0 means "use the default target"
    if target_success_rate != 0 and not (
        bounds.min_target_success_rate <= target_success_rate <= bounds.max_target_success_rate
    ):
        result.add_error(
            "target_success_rate",
            f"Must be between {bounds.min_target_success_rate:g}% and "
            f"{bounds.max_target_success_rate:g}%",
        )

    if retirement_period is not None:
        if retirement_period < bounds.min_retirement_period:
            result.add_error(
                "retirement_period", f"Must be at least {bounds.min_retirement_period} years"
            )
        if retirement_period > bounds.max_retirement_period:
            result.add_error(
                "retirement_period", f"Cannot exceed {bounds.max_retirement_period} years"
            )

    return result


def validate_plan(params: PlanParameters, bounds: InputBounds = BOUNDS) -> ValidationResult:
    """Run all validations for a plan and combine results."""
    combined = ValidationResult()

    amounts = {"annual_expense": params.annual_expense}
    validations = [
        validate_financial_assumptions(
            params.expected_return, params.standard_deviation, params.inflation, bounds
        ),
    ]

    if params.is_advanced:
        amounts.update(
            current_corpus=params.current_corpus,
            annual_contribution=params.annual_contribution,
            additional_income=params.additional_income,
        )
        validations.append(
            validate_ages(
                params.current_age, params.retirement_age, params.life_expectancy, bounds
            )
        )
        validations.append(
            validate_simulation_params(params.num_trials, params.target_success_rate, None, bounds)
        )
    else:
        validations.append(
            validate_simulation_params(
                params.num_trials, params.target_success_rate, params.retirement_period, bounds
            )
        )

    validations.insert(0, validate_amounts(amounts))

    for result in validations:
        combined.errors.extend(result.errors)

    return combined
