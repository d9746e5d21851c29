"""End-to-end basic and advanced plan runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from corpus.calibration import CorpusCalibration, CorpusCalibrator
from corpus.exceptions import ValidationError
from corpus.params import PlanParameters
from corpus.scenarios import Lever, ScenarioAnalysis, ScenarioCalibrator
from corpus.simulator import MonteCarloEngine, SimulationResult
from corpus.tracker import CarryForward, CorpusTracking, YearlyCorpusTracker
from utils.helpers import inflation_factor

# Configure module logger
logger = logging.getLogger(__name__)

# Share of the projected corpus reported as "required" when already on target
ON_TARGET_REQUIRED_FRACTION = 0.9


@dataclass
class BasicPlanResult:
    """
    Outcome of a basic-mode run.

    Attributes:
        params: Inputs used
        calibration: Required-corpus search result
        simulation: Whole-horizon simulation of the required corpus
    """

    params: PlanParameters
    calibration: CorpusCalibration
    simulation: SimulationResult

    @property
    def required_corpus(self) -> float:
        return self.calibration.corpus

    @property
    def success_rate(self) -> float:
        return self.simulation.success_rate

    @property
    def initial_withdrawal_rate(self) -> float:
        """First-year expense as a percentage of the required corpus."""
        if self.required_corpus <= 0:
            return 0.0
        return self.params.annual_expense / self.required_corpus * 100.0


@dataclass
class AdvancedPlanResult:
    """
    Outcome of an advanced-mode run.

    Attributes:
        params: Inputs used
        projected_corpus: Deterministic corpus at retirement
        simulation: Whole-horizon simulation of the projected corpus
        required_corpus: Corpus needed at retirement for the target
        scenarios: Lever analysis toward the target
        expense_at_retirement: Annual expense inflated to the retirement age
        tracking: Year-by-year snapshots (None when not requested)
    """

    params: PlanParameters
    projected_corpus: float
    simulation: SimulationResult
    required_corpus: float
    scenarios: ScenarioAnalysis
    expense_at_retirement: float
    tracking: CorpusTracking | None = None

    @property
    def success_probability(self) -> float:
        return self.simulation.success_rate

    @property
    def surplus(self) -> float:
        """Projected minus required corpus (negative means a shortfall)."""
        return self.projected_corpus - self.required_corpus

    @property
    def on_track(self) -> bool:
        return self.surplus >= 0


@dataclass(frozen=True)
class PlanComparison:
    """Success rate before and after adopting an adjustment."""

    previous_success_rate: float
    updated_success_rate: float

    @property
    def improvement(self) -> float:
        return self.updated_success_rate - self.previous_success_rate


def run_basic_plan(
    params: PlanParameters,
    engine: MonteCarloEngine | None = None,
) -> BasicPlanResult:
    """
    Find the corpus that funds a fixed retirement period.

    Args:
        params: Basic-mode parameters
        engine: Engine to use (a fresh unseeded one if None)

    Returns:
        BasicPlanResult with the required corpus and its success rate
    """
    engine = engine or MonteCarloEngine()
    calibration = CorpusCalibrator(engine).calibrate(params)
    simulation = engine.simulate(calibration.corpus, params)

    logger.info(
        f"Basic plan: required corpus {calibration.corpus:,.0f}, "
        f"success {simulation.success_rate:.1f}%"
    )
    return BasicPlanResult(params=params, calibration=calibration, simulation=simulation)


def run_advanced_plan(
    params: PlanParameters,
    engine: MonteCarloEngine | None = None,
    include_tracking: bool = True,
    carry_forward: CarryForward = CarryForward.MEDIAN,
) -> AdvancedPlanResult:
    """
    Project an age-based plan and analyse how to reach its target.

    The required corpus is calibrated only when the projected corpus falls
    short of the target; otherwise it is reported as 90% of the projection.

    Args:
        params: Advanced-mode parameters
        engine: Engine to use (a fresh unseeded one if None)
        include_tracking: Also produce year-by-year snapshots
        carry_forward: How the tracker seeds each following year

    Returns:
        AdvancedPlanResult

    Raises:
        ValidationError: If the parameters are not in advanced mode
    """
    if not params.is_advanced:
        raise ValidationError("mode", "Advanced plan requires advanced mode")

    engine = engine or MonteCarloEngine()
    target = params.effective_target_success_rate

    projected = engine.project_deterministic_corpus(params)
    simulation = engine.simulate(projected, params)

    if simulation.success_rate < target:
        required = CorpusCalibrator(engine).required_corpus(params)
    else:
        required = projected * ON_TARGET_REQUIRED_FRACTION

    scenarios = ScenarioCalibrator(engine).generate_scenarios(
        params, current_success_rate=simulation.success_rate
    )

    tracking = None
    if include_tracking:
        tracker = YearlyCorpusTracker(engine, carry_forward=carry_forward)
        tracking = tracker.track(params, include_overall=False)
        tracking.overall_success_probability = simulation.success_rate

    expense_at_retirement = params.annual_expense * inflation_factor(
        params.inflation, params.years_to_retirement, params.adjust_for_inflation
    )

    logger.info(
        f"Advanced plan: projected {projected:,.0f}, required {required:,.0f}, "
        f"success {simulation.success_rate:.1f}% (target {target:.1f}%)"
    )
    return AdvancedPlanResult(
        params=params,
        projected_corpus=projected,
        simulation=simulation,
        required_corpus=required,
        scenarios=scenarios,
        expense_at_retirement=expense_at_retirement,
        tracking=tracking,
    )


def apply_adjustment(
    params: PlanParameters,
    analysis: ScenarioAnalysis,
    lever: Lever | str,
) -> PlanParameters:
    """
    Adopt one scenario, returning new parameters.

    Raises:
        ValidationError: If the analysis has no adjustment for `lever`
    """
    lever = Lever(lever)

    if lever is Lever.BALANCED:
        balanced = analysis.balanced
        if balanced is None:
            raise ValidationError("lever", "No balanced adjustment available")
        return ScenarioCalibrator.adjusted(
            params,
            retirement_delay=balanced.retirement_delay,
            additional_contribution=balanced.additional_contribution,
            expense_reduction=balanced.expense_reduction,
        )

    adjustment = {
        Lever.CONTRIBUTION: analysis.contribution,
        Lever.RETIREMENT_DELAY: analysis.retirement_delay,
        Lever.EXPENSE_REDUCTION: analysis.expense_reduction,
    }[lever]
    if adjustment is None:
        raise ValidationError("lever", f"No {lever.value} adjustment available")

    if lever is Lever.CONTRIBUTION:
        return ScenarioCalibrator.adjusted(params, additional_contribution=adjustment.amount)
    if lever is Lever.RETIREMENT_DELAY:
        return ScenarioCalibrator.adjusted(params, retirement_delay=int(adjustment.amount))
    return ScenarioCalibrator.adjusted(params, expense_reduction=adjustment.amount)


def compare_plans(
    previous: PlanParameters,
    updated: PlanParameters,
    engine: MonteCarloEngine | None = None,
) -> PlanComparison:
    """Projected success rate of two plans side by side."""
    engine = engine or MonteCarloEngine()
    return PlanComparison(
        previous_success_rate=engine.projected_success_rate(previous),
        updated_success_rate=engine.projected_success_rate(updated),
    )
