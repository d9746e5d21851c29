"""Monte Carlo simulation engine for retirement corpus projection."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Literal

import numpy as np

from corpus.config import DEFAULT_CHUNK_SIZE
from corpus.exceptions import ValidationError
from corpus.params import PlanParameters
from corpus.paths import PathBatch, age_cash_flows, monthly_cash_flows, simulate_paths
from corpus.returns import LognormalReturnModel, RandomSource
from corpus.statistics import PercentileBand, depletion_count, percentile_band

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """
    Progress checkpoint emitted by long-running batches.

    Attributes:
        stage: "start", "progress" or "end"
        completed: Units of work finished so far (trials or years)
        total: Total units of work
        label: Human-readable name of the batch
    """

    stage: Literal["start", "progress", "end"]
    completed: int
    total: int
    label: str

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0
        return self.completed / self.total


ProgressCallback = Callable[[ProgressEvent], None]
ChunkSimulator = Callable[[np.random.Generator, int, int], PathBatch]


@dataclass(frozen=True)
class SimulationResult:
    """Results from a Monte Carlo batch over the retirement horizon."""

    success_rate: float  # percentage 0-100
    terminal_values: np.ndarray
    survived: np.ndarray
    starting_corpus: float

    @property
    def num_trials(self) -> int:
        return int(self.terminal_values.size)

    @property
    def success_fraction(self) -> float:
        """Success rate as a 0-1 fraction."""
        return self.success_rate / 100.0

    @property
    def depletion_count(self) -> int:
        return depletion_count(self.terminal_values)

    @property
    def percentiles(self) -> PercentileBand:
        return percentile_band(self.terminal_values)


class MonteCarloEngine:
    """
    Runs independent corpus trials and deterministic projections.

    Trials are split into chunks of `chunk_size`; every chunk draws from its
    own generator spawned from the engine's `RandomSource`, so results do
    not depend on `workers`. With `workers > 1` chunks run on a thread pool
    and are combined by slot.

    Args:
        random_source: Source of random streams (created from `seed` if None)
        seed: Seed used when no random source is given
        workers: Number of worker threads for chunked batches
        chunk_size: Trials per chunk (also the progress granularity)
        progress_callback: Optional callable receiving ProgressEvent values
    """

    def __init__(
        self,
        random_source: RandomSource | None = None,
        seed: int | None = None,
        workers: int = 1,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        if workers < 1:
            raise ValidationError("workers", "Must be at least 1")
        if chunk_size < 1:
            raise ValidationError("chunk_size", "Must be at least 1")
        self.random_source = random_source or RandomSource(seed)
        self.workers = workers
        self.chunk_size = chunk_size
        self.progress_callback = progress_callback

    def _emit(self, stage: str, completed: int, total: int, label: str) -> None:
        if self.progress_callback is not None:
            self.progress_callback(ProgressEvent(stage, completed, total, label))

    def _run_batch(
        self,
        n_trials: int,
        label: str,
        simulate_chunk: ChunkSimulator,
    ) -> PathBatch:
        """Run `n_trials` trials in chunks and gather them by index."""
        n_chunks = math.ceil(n_trials / self.chunk_size)
        generators = self.random_source.spawn(n_chunks)
        bounds = [
            (i * self.chunk_size, min((i + 1) * self.chunk_size, n_trials))
            for i in range(n_chunks)
        ]

        terminal_values = np.zeros(n_trials)
        survived = np.zeros(n_trials, dtype=bool)
        depletion_month = np.full(n_trials, -1, dtype=int)

        logger.debug(f"{label}: {n_trials} trials in {n_chunks} chunks, workers={self.workers}")
        self._emit("start", 0, n_trials, label)

        completed = 0

        def store(index: int, batch: PathBatch) -> None:
            start, end = bounds[index]
            terminal_values[start:end] = batch.terminal_values
            survived[start:end] = batch.survived
            depletion_month[start:end] = batch.depletion_month

        if self.workers == 1 or n_chunks == 1:
            for index, (gen, (start, end)) in enumerate(zip(generators, bounds)):
                store(index, simulate_chunk(gen, start, end - start))
                completed += end - start
                self._emit("progress", completed, n_trials, label)
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                futures = {
                    executor.submit(simulate_chunk, gen, start, end - start): index
                    for index, (gen, (start, end)) in enumerate(zip(generators, bounds))
                }
                for future in as_completed(futures):
                    index = futures[future]
                    store(index, future.result())
                    start, end = bounds[index]
                    completed += end - start
                    self._emit("progress", completed, n_trials, label)

        self._emit("end", n_trials, n_trials, label)
        return PathBatch(
            terminal_values=terminal_values,
            survived=survived,
            depletion_month=depletion_month,
        )

    def simulate(self, starting_corpus: float, params: PlanParameters) -> SimulationResult:
        """
        Simulate the full retirement horizon from `starting_corpus`.

        Args:
            starting_corpus: Corpus at the start of retirement
            params: Plan parameters

        Returns:
            SimulationResult with success rate (0-100) and terminal values
        """
        model = LognormalReturnModel(params.expected_return, params.standard_deviation)
        months = params.retirement_months
        flows = monthly_cash_flows(params, months)

        def simulate_chunk(gen: np.random.Generator, start: int, size: int) -> PathBatch:
            returns = model.sample(gen, (size, months))
            return simulate_paths(starting_corpus, returns, flows)

        batch = self._run_batch(params.num_trials, "Simulating retirement", simulate_chunk)
        success_rate = float(np.count_nonzero(batch.survived)) / params.num_trials * 100.0

        return SimulationResult(
            success_rate=success_rate,
            terminal_values=batch.terminal_values,
            survived=batch.survived,
            starting_corpus=starting_corpus,
        )

    def simulate_success_rate(self, starting_corpus: float, params: PlanParameters) -> float:
        """Percentage (0-100) of trials that never deplete over the horizon."""
        return self.simulate(starting_corpus, params).success_rate

    def simulate_terminal_values(self, starting_corpus: float, params: PlanParameters) -> np.ndarray:
        """Terminal corpus per trial over the horizon (0 for depleted trials)."""
        return self.simulate(starting_corpus, params).terminal_values

    def project_deterministic_corpus(self, params: PlanParameters) -> float:
        """
        Project the corpus at retirement with no randomness.

        The current corpus compounds at the expected return until
        retirement. Contributions are made at the start of each year, so a
        contribution made k years before retirement grows for k years.
        """
        years = params.years_to_retirement
        rate = params.expected_return
        growth = (1 + rate) ** years

        lump_sum = params.current_corpus * growth
        if rate == 0:
            contributions = params.annual_contribution * years
        else:
            contributions = params.annual_contribution * (growth - 1) / rate * (1 + rate)

        return lump_sum + contributions

    def projected_success_rate(self, params: PlanParameters) -> float:
        """Success rate (0-100) of the deterministically projected corpus."""
        return self.simulate_success_rate(self.project_deterministic_corpus(params), params)

    def simulate_corpus_at_age(
        self,
        starting_corpus: float,
        params: PlanParameters,
        target_age: int,
        apply_contribution_upfront: bool = False,
    ) -> np.ndarray:
        """
        Simulate from the current age up to `target_age`.

        Each simulated year either receives its contribution (or, once
        retired, its additional income) as a lump sum at the start of the
        year, or has it spread monthly. No compounding happens past
        `target_age`, so `target_age == current_age` returns the starting
        corpus for every trial.

        Raises:
            ValidationError: If `target_age` is below the current age
        """
        if target_age < params.current_age:
            raise ValidationError("target_age", "Cannot be less than current age")

        if target_age == params.current_age:
            return np.full(params.num_trials, float(starting_corpus))

        model = LognormalReturnModel(params.expected_return, params.standard_deviation)
        flows, upfront = age_cash_flows(params, target_age, apply_contribution_upfront)
        months = flows.size

        def simulate_chunk(gen: np.random.Generator, start: int, size: int) -> PathBatch:
            returns = model.sample(gen, (size, months))
            return simulate_paths(starting_corpus, returns, flows, upfront)

        batch = self._run_batch(params.num_trials, f"Simulating to age {target_age}", simulate_chunk)
        return batch.terminal_values

    def simulate_year_from_values(
        self,
        starting_values: np.ndarray,
        contribution: float,
        withdrawal: float,
        params: PlanParameters,
    ) -> np.ndarray:
        """
        Simulate one year from a per-trial starting distribution.

        The contribution is added at the start of the year, twelve monthly
        returns compound, and the withdrawal is taken at year end. Values
        are clamped at zero.

        Args:
            starting_values: Starting corpus per trial, shape (num_trials,)
            contribution: Lump sum added at the start of the year
            withdrawal: Amount withdrawn at the end of the year
            params: Plan parameters (return model and trial count)

        Returns:
            Ending corpus per trial
        """
        starting_values = np.asarray(starting_values, dtype=float)
        if starting_values.size != params.num_trials:
            raise ValidationError(
                "starting_values",
                f"Expected {params.num_trials} values, got {starting_values.size}",
            )

        model = LognormalReturnModel(params.expected_return, params.standard_deviation)
        flows = np.zeros(12)
        flows[-1] = -withdrawal
        upfront = np.zeros(12)
        upfront[0] = contribution

        def simulate_chunk(gen: np.random.Generator, start: int, size: int) -> PathBatch:
            returns = model.sample(gen, (size, 12))
            return simulate_paths(starting_values[start : start + size], returns, flows, upfront)

        batch = self._run_batch(params.num_trials, "Simulating one year", simulate_chunk)
        return batch.terminal_values
