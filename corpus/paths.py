"""Monthly corpus path simulation and cash-flow schedules."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from corpus.params import PlanParameters
from utils.helpers import inflation_factor


@dataclass
class PathBatch:
    """Outcome of a batch of simulated paths."""

    terminal_values: np.ndarray
    survived: np.ndarray
    depletion_month: np.ndarray  # -1 when the path never depleted


@dataclass(frozen=True)
class PathOutcome:
    """Outcome of a single simulated path."""

    survived: bool
    terminal_value: float
    depletion_month: int | None


def monthly_cash_flows(params: PlanParameters, months: int | None = None) -> np.ndarray:
    """
    Net monthly cash flow over the withdrawal horizon (negative = withdrawal).

    The expense of year `y` of the horizon is inflated by (1 + inflation)^y
    when inflation adjustment is enabled. Additional income offsets the
    expense but never turns a withdrawal into a contribution.

    Args:
        params: Plan parameters
        months: Horizon length (defaults to the retirement horizon)

    Returns:
        Array of shape (months,)
    """
    if months is None:
        months = params.retirement_months

    year_index = np.arange(months) // 12
    if params.adjust_for_inflation:
        factors = (1 + params.inflation) ** year_index
    else:
        factors = np.ones(months)

    monthly_expense = (params.annual_expense * factors - params.additional_income) / 12.0
    return -np.maximum(0.0, monthly_expense)


def age_cash_flows(
    params: PlanParameters,
    target_age: int,
    apply_contribution_upfront: bool,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Cash-flow schedule from the current age up to `target_age`.

    With `apply_contribution_upfront` the year's contribution (or, in
    retirement, the additional income) is injected as a lump sum before the
    first month of each year and the full inflated expense is withdrawn
    monthly. Otherwise contributions are spread monthly and retirement
    withdrawals are net of additional income.

    Returns:
        Tuple (flows, upfront): post-return monthly flows and pre-return
        lump sums, both of shape (months,)
    """
    years = target_age - params.current_age
    months = years * 12
    flows = np.zeros(months)
    upfront = np.zeros(months)

    for year in range(years):
        age = params.current_age + year
        retired = age >= params.retirement_age
        factor = inflation_factor(params.inflation, year, params.adjust_for_inflation)
        start, end = year * 12, (year + 1) * 12

        if apply_contribution_upfront:
            if not retired:
                upfront[start] = params.annual_contribution
            elif params.additional_income > 0:
                upfront[start] = params.additional_income
            if retired:
                flows[start:end] = -(params.annual_expense * factor) / 12.0
        else:
            if retired:
                monthly_expense = (params.annual_expense * factor - params.additional_income) / 12.0
                flows[start:end] = -max(0.0, monthly_expense)
            else:
                flows[start:end] = params.annual_contribution / 12.0

    return flows, upfront


def simulate_paths(
    starting_corpus: float | np.ndarray,
    monthly_returns: np.ndarray,
    cash_flows: np.ndarray,
    upfront_flows: np.ndarray | None = None,
) -> PathBatch:
    """
    Advance a batch of corpus paths month by month.

    Each month a lump sum (if any) is added, the sampled return is applied,
    and the net cash flow is added. A path whose corpus reaches zero or
    below is depleted: it is clamped to zero and never advances again.

    Args:
        starting_corpus: Starting value (scalar, or one per trial)
        monthly_returns: Sampled returns of shape (n_trials, n_months)
        cash_flows: Post-return net cash flow per month, shape (n_months,)
        upfront_flows: Pre-return lump sums per month, shape (n_months,)

    Returns:
        PathBatch with terminal values, survival flags and depletion months
    """
    returns = np.atleast_2d(monthly_returns)
    n_trials, n_months = returns.shape
    if upfront_flows is None:
        upfront_flows = np.zeros(n_months)

    corpus = np.empty(n_trials)
    corpus[:] = starting_corpus
    alive = np.ones(n_trials, dtype=bool)
    depletion_month = np.full(n_trials, -1, dtype=int)

    for month in range(n_months):
        stepped = (corpus + upfront_flows[month]) * (1 + returns[:, month]) + cash_flows[month]
        corpus = np.where(alive, stepped, 0.0)

        newly_depleted = alive & (corpus <= 0)
        depletion_month[newly_depleted] = month
        alive &= ~newly_depleted
        corpus[~alive] = 0.0

    return PathBatch(terminal_values=corpus, survived=alive, depletion_month=depletion_month)


def simulate_path(
    starting_corpus: float,
    monthly_returns: np.ndarray,
    cash_flows: np.ndarray,
    upfront_flows: np.ndarray | None = None,
) -> PathOutcome:
    """Advance a single corpus path (see `simulate_paths`)."""
    batch = simulate_paths(
        starting_corpus,
        np.asarray(monthly_returns, dtype=float).reshape(1, -1),
        cash_flows,
        upfront_flows,
    )
    month = int(batch.depletion_month[0])
    return PathOutcome(
        survived=bool(batch.survived[0]),
        terminal_value=float(batch.terminal_values[0]),
        depletion_month=None if month < 0 else month,
    )
