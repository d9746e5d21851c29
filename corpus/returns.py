"""Random return sampling for Monte Carlo simulation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from corpus.exceptions import SimulationError
from utils.helpers import annual_to_monthly_rate, annual_to_monthly_volatility

# Configure module logger
logger = logging.getLogger(__name__)


class RandomSource:
    """
    Owner of the pseudo-random stream used by an engine.

    Wraps a `numpy.random.SeedSequence`. Every call to `spawn` hands out
    fresh, statistically independent generators, so each chunk of trials
    (or each worker) owns its own stream and no generator is shared between
    threads. A fixed seed reproduces the whole sequence of spawns.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed_sequence = np.random.SeedSequence(seed)

    @property
    def entropy(self) -> int:
        """Root entropy (the seed, or the OS-drawn value when unseeded)."""
        return int(self._seed_sequence.entropy)

    def spawn(self, n: int) -> list[np.random.Generator]:
        """Return `n` independent generators for the next batch."""
        return [np.random.default_rng(child) for child in self._seed_sequence.spawn(n)]

    def generator(self) -> np.random.Generator:
        """Return a single independent generator."""
        return self.spawn(1)[0]


@dataclass(frozen=True)
class LognormalReturnModel:
    """
    Monthly lognormal return model derived from annual assumptions.

    The annual arithmetic return is converted to its compound monthly
    equivalent and the annual standard deviation is scaled by 1/sqrt(12).
    The monthly mean/stdev pair is then mapped to lognormal parameters so
    that twelve compounded monthly draws reproduce the annual model.

    Attributes:
        expected_return: Annual expected return (e.g. 0.07 = 7%)
        standard_deviation: Annual standard deviation (e.g. 0.10 = 10%)
    """

    expected_return: float
    standard_deviation: float

    def __post_init__(self) -> None:
        if self.expected_return <= -1:
            raise SimulationError(
                f"Expected return {self.expected_return} implies total loss every year"
            )
        if self.standard_deviation < 0:
            raise SimulationError("Standard deviation cannot be negative")

    @property
    def monthly_mean(self) -> float:
        return annual_to_monthly_rate(self.expected_return)

    @property
    def monthly_std(self) -> float:
        return annual_to_monthly_volatility(self.standard_deviation)

    @property
    def mu(self) -> float:
        """Location parameter of the log of (1 + monthly return)."""
        return math.log(1 + self.monthly_mean) - 0.5 * self.monthly_std**2

    @property
    def sigma(self) -> float:
        """Scale parameter of the log of (1 + monthly return)."""
        return math.sqrt(
            math.log(1 + self.monthly_std**2 / (1 + self.monthly_mean) ** 2)
        )

    def sample(
        self,
        rng: np.random.Generator,
        size: int | tuple[int, ...] | None = None,
    ) -> float | np.ndarray:
        """
        Draw monthly returns.

        Args:
            rng: Generator that owns the random stream
            size: Output shape (None for a single float)

        Returns:
            A float, or an array of the requested shape
        """
        z = rng.standard_normal(size)
        draws = np.expm1(self.mu + self.sigma * z)
        if size is None:
            return float(draws)
        return draws


def sample_monthly_returns(
    rng: np.random.Generator,
    expected_return: float,
    standard_deviation: float,
    size: int | tuple[int, ...] | None = None,
) -> float | np.ndarray:
    """
    Sample monthly returns for the given annual return and volatility.

    Args:
        rng: Generator that owns the random stream
        expected_return: Annual expected return
        standard_deviation: Annual standard deviation
        size: Output shape, e.g. (n_trials, n_months)

    Returns:
        A single monthly return or an array of them
    """
    model = LognormalReturnModel(expected_return, standard_deviation)
    logger.debug(
        f"Sampling monthly returns: mu={model.mu:.6f}, sigma={model.sigma:.6f}, size={size}"
    )
    return model.sample(rng, size)
