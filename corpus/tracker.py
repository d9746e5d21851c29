"""Year-by-year tracking of the corpus distribution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

import numpy as np
import pandas as pd

from corpus.exceptions import ValidationError
from corpus.params import PlanParameters
from corpus.simulator import MonteCarloEngine, ProgressCallback, ProgressEvent
from corpus.statistics import depletion_risk, percentile_band
from utils.helpers import inflation_factor

# Configure module logger
logger = logging.getLogger(__name__)


class CarryForward(str, Enum):
    """How one year's distribution seeds the next year's trials."""

    MEDIAN = "median"  # every trial restarts from the previous median
    PATHS = "paths"  # every trial continues from its own previous value


@dataclass(frozen=True)
class YearlySnapshot:
    """
    Corpus statistics for one simulated age.

    Attributes:
        age: Age at the start of the year
        is_retired: True once withdrawals have started
        start_corpus: Previous median (or initial corpus) plus contribution
        contribution: Contribution made this year
        withdrawal: Net withdrawal this year (expense less additional income)
        expected_expense: Inflation-adjusted expense for the year
        returns: Deterministic return on the opening balance (informational)
        end_corpus: Median ending corpus across trials
        percentile_5: 5th percentile ending corpus
        percentile_95: 95th percentile ending corpus
        depletion_risk: Percentage of trials at or below zero
        point_success_rate: 100 - depletion_risk
        corpus_values: Ending corpus per trial
    """

    age: int
    is_retired: bool
    start_corpus: float
    contribution: float
    withdrawal: float
    expected_expense: float
    returns: float
    end_corpus: float
    percentile_5: float
    percentile_95: float
    depletion_risk: float
    point_success_rate: float
    corpus_values: np.ndarray = field(repr=False, compare=False)


@dataclass
class CorpusTracking:
    """
    Ordered yearly snapshots plus the whole-horizon statistic.

    `point_success_rate` on each snapshot only says whether trials hold
    money at that age given the carried-forward starting point. The
    `overall_success_probability` is the engine's whole-horizon success rate
    of the projected corpus. The two are computed differently and diverge,
    most visibly in later years.
    """

    snapshots: list[YearlySnapshot]
    overall_success_probability: float | None = None

    def __len__(self) -> int:
        return len(self.snapshots)

    def __iter__(self) -> Iterator[YearlySnapshot]:
        return iter(self.snapshots)

    def __getitem__(self, index: int) -> YearlySnapshot:
        return self.snapshots[index]

    def find_age(self, age: int) -> YearlySnapshot | None:
        """Return the snapshot for `age`, or None if outside the horizon."""
        for snapshot in self.snapshots:
            if snapshot.age == age:
                return snapshot
        return None

    def first_age_exceeding_risk(self, threshold: float, from_age: int | None = None) -> int | None:
        """First age (optionally at or after `from_age`) whose depletion risk exceeds `threshold`."""
        for snapshot in self.snapshots:
            if from_age is not None and snapshot.age < from_age:
                continue
            if snapshot.depletion_risk > threshold:
                return snapshot.age
        return None

    def to_frame(self) -> pd.DataFrame:
        """One row per age (raw trial arrays omitted)."""
        return pd.DataFrame(
            [
                {
                    "age": s.age,
                    "phase": "withdrawal" if s.is_retired else "accumulation",
                    "start_corpus": s.start_corpus,
                    "contribution": s.contribution,
                    "withdrawal": s.withdrawal,
                    "expected_expense": s.expected_expense,
                    "returns": s.returns,
                    "end_corpus": s.end_corpus,
                    "percentile_5": s.percentile_5,
                    "percentile_95": s.percentile_95,
                    "depletion_risk": s.depletion_risk,
                    "point_success_rate": s.point_success_rate,
                }
                for s in self.snapshots
            ]
        )


class YearlyCorpusTracker:
    """
    Chains one-year Monte Carlo slices from the current age to life expectancy.

    Each year's median ending corpus becomes the next year's starting point,
    keeping volatility compounding path dependent while giving one
    representative number per year.

    Args:
        engine: Monte Carlo engine used for every slice
        carry_forward: How the next year is seeded (median or per-trial paths)
        progress_callback: Optional callable receiving one event per age
    """

    def __init__(
        self,
        engine: MonteCarloEngine,
        carry_forward: CarryForward = CarryForward.MEDIAN,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.engine = engine
        self.carry_forward = CarryForward(carry_forward)
        self.progress_callback = progress_callback

    def _emit(self, stage: str, completed: int, total: int) -> None:
        if self.progress_callback is not None:
            self.progress_callback(
                ProgressEvent(stage, completed, total, "Generating year-by-year projections")
            )

    def track(self, params: PlanParameters, include_overall: bool = True) -> CorpusTracking:
        """
        Produce one snapshot per age from current age to life expectancy.

        Args:
            params: Advanced-mode plan parameters
            include_overall: Also compute the whole-horizon success probability

        Returns:
            CorpusTracking in chronological order

        Raises:
            ValidationError: If the parameters are not in advanced mode
        """
        if not params.is_advanced:
            raise ValidationError("mode", "Year-by-year tracking requires advanced mode")

        total_years = params.life_expectancy - params.current_age + 1
        snapshots: list[YearlySnapshot] = []
        previous_median = params.current_corpus
        previous_values: np.ndarray | None = None

        self._emit("start", 0, total_years)

        for year, age in enumerate(range(params.current_age, params.life_expectancy + 1)):
            is_retired = age >= params.retirement_age
            expected_expense = params.annual_expense * inflation_factor(
                params.inflation, year, params.adjust_for_inflation
            )

            if is_retired:
                contribution = 0.0
                withdrawal = max(0.0, expected_expense - params.additional_income)
            else:
                contribution = params.annual_contribution
                withdrawal = 0.0

            opening = params.current_corpus if year == 0 else previous_median
            start_corpus = opening + contribution
            deterministic_returns = opening * params.expected_return

            if previous_values is None:
                values = self.engine.simulate_corpus_at_age(
                    params.current_corpus,
                    params,
                    age + 1,
                    apply_contribution_upfront=True,
                )
            elif self.carry_forward is CarryForward.MEDIAN:
                seeds = np.full(params.num_trials, previous_median)
                values = self.engine.simulate_year_from_values(
                    seeds, contribution, withdrawal, params
                )
            else:
                values = self.engine.simulate_year_from_values(
                    previous_values, contribution, withdrawal, params
                )
                # Depleted paths stay depleted
                values = np.where(previous_values > 0, values, 0.0)

            band = percentile_band(values)
            risk = depletion_risk(values)

            snapshots.append(
                YearlySnapshot(
                    age=age,
                    is_retired=is_retired,
                    start_corpus=start_corpus,
                    contribution=contribution,
                    withdrawal=withdrawal,
                    expected_expense=expected_expense,
                    returns=deterministic_returns,
                    end_corpus=band.p50,
                    percentile_5=band.p5,
                    percentile_95=band.p95,
                    depletion_risk=risk,
                    point_success_rate=100.0 - risk,
                    corpus_values=values,
                )
            )
            logger.debug(
                f"Age {age}: median {band.p50:,.0f} (p5 {band.p5:,.0f}, p95 {band.p95:,.0f}), "
                f"depletion risk {risk:.1f}%"
            )

            previous_median = band.p50
            previous_values = values
            self._emit("progress", year + 1, total_years)

        self._emit("end", total_years, total_years)

        overall = self.engine.projected_success_rate(params) if include_overall else None
        return CorpusTracking(snapshots=snapshots, overall_success_probability=overall)
