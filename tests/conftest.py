"""Shared pytest fixtures for corpus calculator tests."""

import numpy as np
import pytest

from corpus.params import PlanParameters
from corpus.returns import RandomSource
from corpus.simulator import MonteCarloEngine, SimulationResult


@pytest.fixture
def basic_params() -> PlanParameters:
    """Reference basic plan: 60k/year for 30 years."""
    return PlanParameters.basic(
        annual_expense=60_000,
        retirement_period=30,
        expected_return=0.07,
        standard_deviation=0.10,
        inflation=0.03,
        num_trials=1000,
    )


@pytest.fixture
def advanced_params() -> PlanParameters:
    """Reference advanced plan: age 40, retire 65, live to 90."""
    return PlanParameters.advanced(
        current_age=40,
        retirement_age=65,
        life_expectancy=90,
        current_corpus=500_000,
        annual_expense=80_000,
        annual_contribution=30_000,
        additional_income=20_000,
        expected_return=0.07,
        standard_deviation=0.10,
        inflation=0.03,
        target_success_rate=85,
        num_trials=500,
    )


@pytest.fixture
def short_advanced_params() -> PlanParameters:
    """Small advanced plan for tracker and scenario tests."""
    return PlanParameters.advanced(
        current_age=60,
        retirement_age=63,
        life_expectancy=70,
        current_corpus=300_000,
        annual_expense=40_000,
        annual_contribution=20_000,
        additional_income=10_000,
        target_success_rate=85,
        num_trials=200,
    )


@pytest.fixture
def engine() -> MonteCarloEngine:
    """Seeded engine for reproducible results."""
    return MonteCarloEngine(random_source=RandomSource(42))


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for sampler tests."""
    return RandomSource(7).generator()


@pytest.fixture
def flat_returns() -> np.ndarray:
    """Flat 0.5% monthly returns for predictable testing."""
    return np.ones((10, 12)) * 0.005


@pytest.fixture
def zero_returns() -> np.ndarray:
    """Zero returns for testing cash-flow-only paths."""
    return np.zeros((10, 12))


class FundingRatioEngine(MonteCarloEngine):
    """Engine whose success rate is the funding ratio of the net spending need, capped at 100."""

    def simulate(self, starting_corpus, params):
        need = max(params.annual_expense - params.additional_income, 0.0) * params.retirement_years
        rate = 100.0 if need <= 0 else min(100.0, max(0.0, starting_corpus / need * 100.0))
        return SimulationResult(
            success_rate=float(rate),
            terminal_values=np.full(params.num_trials, float(starting_corpus)),
            survived=np.ones(params.num_trials, dtype=bool),
            starting_corpus=starting_corpus,
        )


@pytest.fixture
def funding_engine() -> FundingRatioEngine:
    """Deterministic stand-in engine for search tests."""
    return FundingRatioEngine(random_source=RandomSource(0))


@pytest.fixture
def flat_advanced_params() -> PlanParameters:
    """
    Zero-return plan with a 75% funding ratio.

    Projected corpus 400k + 10 x 20k = 600k against a need of
    (50k - 10k) x 20 years = 800k.
    """
    return PlanParameters.advanced(
        current_age=55,
        retirement_age=65,
        life_expectancy=85,
        current_corpus=400_000,
        annual_expense=50_000,
        annual_contribution=20_000,
        additional_income=10_000,
        expected_return=0.0,
        standard_deviation=0.0,
        target_success_rate=85,
        num_trials=100,
    )
