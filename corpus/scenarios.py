"""Single-lever and balanced scenario searches toward a target success rate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from corpus.config import SEARCH, SearchSettings
from corpus.exceptions import ValidationError
from corpus.params import PlanParameters
from corpus.simulator import MonteCarloEngine
from utils.helpers import format_currency, to_fraction

# Configure module logger
logger = logging.getLogger(__name__)


class Lever(str, Enum):
    """Adjustable plan input."""

    CONTRIBUTION = "contribution"
    RETIREMENT_DELAY = "retirement_delay"
    EXPENSE_REDUCTION = "expense_reduction"
    BALANCED = "balanced"


@dataclass(frozen=True)
class ScenarioAdjustment:
    """
    A single-lever change and its effect.

    Attributes:
        lever: Which input is adjusted
        amount: Extra contribution per year, delay in years, or expense cut per year
        success_rate: Success rate (0-100) with the adjustment applied
        success_rate_increase: Points gained over the current plan
        percent_of_current: Amount relative to the current contribution or
            expense (0-100), None for the retirement delay or a zero base
    """

    lever: Lever
    amount: float
    success_rate: float
    success_rate_increase: float
    percent_of_current: float | None = None


@dataclass(frozen=True)
class BalancedAdjustment:
    """Combination of all three levers and its effect."""

    retirement_delay: int
    additional_contribution: float
    expense_reduction: float
    success_rate: float
    description: str

    @property
    def lever(self) -> Lever:
        return Lever.BALANCED


@dataclass(frozen=True)
class ScenarioAnalysis:
    """
    Scenario search results for one plan.

    When the current plan already meets the target, the lever fields are
    None.
    """

    projected_corpus: float
    current_success_rate: float
    target_success_rate: float
    contribution: ScenarioAdjustment | None = None
    retirement_delay: ScenarioAdjustment | None = None
    expense_reduction: ScenarioAdjustment | None = None
    balanced: BalancedAdjustment | None = None

    @property
    def meets_target(self) -> bool:
        return self.current_success_rate >= self.target_success_rate

    def adjustments(self) -> list[ScenarioAdjustment]:
        """Single-lever adjustments that were computed."""
        return [
            adj
            for adj in (self.contribution, self.retirement_delay, self.expense_reduction)
            if adj is not None
        ]


def describe_balanced(delay: int, contribution: float, expense_reduction: float) -> str:
    """Natural-language recommendation naming only the non-zero levers."""
    parts = []
    if contribution > 0:
        parts.append(f"Increase contributions by {format_currency(contribution)}/year")
    if delay > 0:
        parts.append(f"delay retirement by {delay} year{'s' if delay > 1 else ''}")
    if expense_reduction > 0:
        parts.append(f"reduce expenses by {format_currency(expense_reduction)}/year")
    if not parts:
        return ""
    text = " and ".join(parts)
    return text[0].upper() + text[1:]


class ScenarioCalibrator:
    """
    Finds the smallest change to one lever that reaches a target success rate.

    Every evaluation projects the corpus at retirement deterministically and
    simulates the retirement horizon from it. Parameters are never mutated;
    each candidate is a new PlanParameters value.
    """

    def __init__(self, engine: MonteCarloEngine, settings: SearchSettings = SEARCH) -> None:
        self.engine = engine
        self.settings = settings

    @staticmethod
    def _require_advanced(params: PlanParameters) -> None:
        if not params.is_advanced:
            raise ValidationError("mode", "Scenario analysis requires advanced mode")

    def _target(self, params: PlanParameters, target_success_rate: float | None) -> float:
        if target_success_rate is None:
            return params.effective_target_success_rate
        return target_success_rate

    @staticmethod
    def adjusted(
        params: PlanParameters,
        retirement_delay: int = 0,
        additional_contribution: float = 0.0,
        expense_reduction: float = 0.0,
    ) -> PlanParameters:
        """Copy of `params` with the levers applied."""
        return params.with_overrides(
            retirement_age=params.retirement_age + retirement_delay,
            annual_contribution=params.annual_contribution + additional_contribution,
            annual_expense=params.annual_expense - expense_reduction,
        )

    def success_rate_for(self, params: PlanParameters) -> float:
        """Success rate (0-100) of the plan's projected corpus."""
        return self.engine.projected_success_rate(params)

    def _apply_margin(self, amount: float, rate: float, target: float) -> float:
        """Mark `amount` up by three times the remaining gap when short by over a point."""
        s = self.settings
        if rate < target - s.lever_margin_threshold:
            markup = to_fraction(target - rate) * s.lever_margin_multiplier
            logger.warning(
                f"Lever search missed target ({rate:.1f}% vs {target:.1f}%), "
                f"marking up by {markup:.1%}"
            )
            return amount * (1.0 + markup)
        return amount

    def required_additional_contribution(
        self,
        params: PlanParameters,
        target_success_rate: float | None = None,
    ) -> float:
        """
        Additional annual contribution needed to reach the target.

        Bisects in [0, 2x current contribution], starting at a 20% increase.

        Returns:
            Best-estimate additional contribution per year
        """
        self._require_advanced(params)
        s = self.settings
        target = self._target(params, target_success_rate)

        current = params.annual_contribution
        lower, upper = 0.0, current * s.contribution_max_multiple
        increase = current * s.contribution_start_fraction

        for i in range(s.lever_iterations):
            rate = self.success_rate_for(self.adjusted(params, additional_contribution=increase))
            logger.debug(f"Contribution +{increase:,.0f}: {rate:.1f}% (iteration {i + 1})")

            if abs(rate - target) < s.lever_tolerance:
                return increase

            if rate < target:
                lower = increase
                increase = (increase + upper) / 2
            else:
                upper = increase
                increase = (increase + lower) / 2

        rate = self.success_rate_for(self.adjusted(params, additional_contribution=increase))
        return self._apply_margin(increase, rate, target)

    def required_retirement_delay(
        self,
        params: PlanParameters,
        target_success_rate: float | None = None,
    ) -> int:
        """
        Years of retirement delay needed to reach the target.

        Scans 1..10 years and returns the first delay that meets the target,
        or the largest delay scanned if none does. Delays that would reach
        life expectancy are not considered.
        """
        self._require_advanced(params)
        target = self._target(params, target_success_rate)
        max_delay = min(
            self.settings.max_retirement_delay,
            params.life_expectancy - params.retirement_age - 1,
        )
        if max_delay < 1:
            return 0

        for delay in range(1, max_delay + 1):
            rate = self.success_rate_for(self.adjusted(params, retirement_delay=delay))
            logger.debug(f"Retirement delay {delay}y: {rate:.1f}%")
            if rate >= target:
                return delay

        return max_delay

    def required_expense_reduction(
        self,
        params: PlanParameters,
        target_success_rate: float | None = None,
    ) -> float:
        """
        Annual expense reduction needed to reach the target.

        Bisects in [0, 40% of current expense], starting at 10%. After the
        safety margin the reduction is capped at 50% of current expense.
        """
        self._require_advanced(params)
        s = self.settings
        target = self._target(params, target_success_rate)

        current = params.annual_expense
        lower, upper = 0.0, current * s.expense_max_fraction
        reduction = current * s.expense_start_fraction

        for i in range(s.lever_iterations):
            rate = self.success_rate_for(self.adjusted(params, expense_reduction=reduction))
            logger.debug(f"Expense -{reduction:,.0f}: {rate:.1f}% (iteration {i + 1})")

            if abs(rate - target) < s.lever_tolerance:
                return reduction

            if rate < target:
                lower = reduction
                reduction = (reduction + upper) / 2
            else:
                upper = reduction
                reduction = (reduction + lower) / 2

        rate = self.success_rate_for(self.adjusted(params, expense_reduction=reduction))
        reduction = self._apply_margin(reduction, rate, target)
        return min(reduction, current * s.expense_hard_cap_fraction)

    def success_rate_increase(
        self,
        params: PlanParameters,
        retirement_delay: int = 0,
        additional_contribution: float = 0.0,
        expense_reduction: float = 0.0,
    ) -> float:
        """Points of success rate gained by applying the given levers."""
        self._require_advanced(params)
        base = self.success_rate_for(params)
        adjusted = self.adjusted(params, retirement_delay, additional_contribution, expense_reduction)
        return self.success_rate_for(adjusted) - base

    def balanced_adjustment(
        self,
        params: PlanParameters,
        target_success_rate: float | None = None,
        required: tuple[int, float, float] | None = None,
    ) -> BalancedAdjustment:
        """
        Blend all three levers.

        Starts at half of each lever's individual requirement, then grows the
        first lever (delay, contribution, expense) still short of its full
        requirement until the target is met or every lever is at its full
        requirement.

        Args:
            params: Advanced-mode plan parameters
            target_success_rate: Target (0-100), defaults to the plan's
            required: Precomputed (delay, contribution, reduction) requirements
        """
        self._require_advanced(params)
        s = self.settings
        target = self._target(params, target_success_rate)

        if required is None:
            required = (
                self.required_retirement_delay(params, target),
                self.required_additional_contribution(params, target),
                self.required_expense_reduction(params, target),
            )
        required_delay, required_contribution, required_reduction = required

        delay = required_delay // 2
        contribution = required_contribution / 2
        reduction = required_reduction / 2

        rate = self.success_rate_for(self.adjusted(params, delay, contribution, reduction))
        while rate < target:
            if delay < required_delay:
                delay += 1
            elif contribution < required_contribution:
                contribution = min(
                    required_contribution,
                    contribution + required_contribution * s.balanced_step_fraction,
                )
            elif reduction < required_reduction:
                reduction = min(
                    required_reduction,
                    reduction + required_reduction * s.balanced_step_fraction,
                )
            else:
                logger.info("Balanced approach cannot improve further")
                break
            rate = self.success_rate_for(self.adjusted(params, delay, contribution, reduction))

        return BalancedAdjustment(
            retirement_delay=delay,
            additional_contribution=contribution,
            expense_reduction=reduction,
            success_rate=rate,
            description=describe_balanced(delay, contribution, reduction),
        )

    def generate_scenarios(
        self,
        params: PlanParameters,
        target_success_rate: float | None = None,
        current_success_rate: float | None = None,
    ) -> ScenarioAnalysis:
        """
        Evaluate every lever against the target.

        Args:
            params: Advanced-mode plan parameters
            target_success_rate: Target (0-100), defaults to the plan's
            current_success_rate: Already simulated rate of the projected
                corpus; simulated here when None

        Returns:
            ScenarioAnalysis; lever fields are None when the current plan
            already meets the target
        """
        self._require_advanced(params)
        target = self._target(params, target_success_rate)

        projected = self.engine.project_deterministic_corpus(params)
        if current_success_rate is None:
            current_rate = self.engine.simulate_success_rate(projected, params)
        else:
            current_rate = current_success_rate

        if current_rate >= target:
            logger.info(f"Current plan meets target ({current_rate:.1f}% >= {target:.1f}%)")
            return ScenarioAnalysis(
                projected_corpus=projected,
                current_success_rate=current_rate,
                target_success_rate=target,
            )

        contribution = self.required_additional_contribution(params, target)
        delay = self.required_retirement_delay(params, target)
        reduction = self.required_expense_reduction(params, target)

        def evaluate(
            lever: Lever,
            amount: float,
            base: float | None,
            adjusted: PlanParameters,
        ) -> ScenarioAdjustment:
            rate = self.success_rate_for(adjusted)
            return ScenarioAdjustment(
                lever=lever,
                amount=amount,
                success_rate=rate,
                success_rate_increase=rate - current_rate,
                percent_of_current=amount / base * 100 if base else None,
            )

        return ScenarioAnalysis(
            projected_corpus=projected,
            current_success_rate=current_rate,
            target_success_rate=target,
            contribution=evaluate(
                Lever.CONTRIBUTION,
                contribution,
                params.annual_contribution,
                self.adjusted(params, additional_contribution=contribution),
            ),
            retirement_delay=evaluate(
                Lever.RETIREMENT_DELAY,
                delay,
                None,
                self.adjusted(params, retirement_delay=delay),
            ),
            expense_reduction=evaluate(
                Lever.EXPENSE_REDUCTION,
                reduction,
                params.annual_expense,
                self.adjusted(params, expense_reduction=reduction),
            ),
            balanced=self.balanced_adjustment(params, target, (delay, contribution, reduction)),
        )
