"""Required-corpus search against a target success rate."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from corpus.config import SEARCH, SearchSettings
from corpus.params import PlanParameters
from corpus.simulator import MonteCarloEngine
from utils.helpers import to_fraction, to_percent

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorpusCalibration:
    """
    Result of a required-corpus search.

    The corpus is a best estimate: the search stops after its iteration
    budget whether or not it reached the tolerance, and a heuristic safety
    margin may have been applied afterwards.

    Attributes:
        corpus: Estimated required starting corpus
        success_rate: Simulated success rate (0-100) measured before any margin
        target_success_rate: Target success rate (0-100)
        iterations: Bisection iterations performed
        converged: True if the search landed within tolerance
        safety_margin_applied: True if the post-search markup was applied
    """

    corpus: float
    success_rate: float
    target_success_rate: float
    iterations: int
    converged: bool
    safety_margin_applied: bool


class CorpusCalibrator:
    """Bisection search over starting corpus using the engine as objective."""

    def __init__(self, engine: MonteCarloEngine, settings: SearchSettings = SEARCH) -> None:
        self.engine = engine
        self.settings = settings

    def _success_fraction(self, corpus: float, params: PlanParameters) -> float:
        return to_fraction(self.engine.simulate_success_rate(corpus, params))

    def calibrate(self, params: PlanParameters) -> CorpusCalibration:
        """
        Find a starting corpus whose success rate is near the target.

        The guess is seeded with the 4% withdrawal rule and bracketed
        between 0.5x and 3x that value. Each iteration moves the lower bound
        up when the rate is below target and the upper bound down otherwise,
        stopping once within 0.5 points. If the final estimate still misses
        the target by more than 1 point, it is marked up by
        1 + (target - actual) * 2 (fractions).

        Args:
            params: Plan parameters (target defaults to 85% when unset)

        Returns:
            CorpusCalibration with the best estimate
        """
        s = self.settings
        target = to_fraction(params.effective_target_success_rate)

        corpus = params.annual_expense / s.withdrawal_rule_rate
        lower_bound = corpus * s.corpus_lower_multiple
        upper_bound = corpus * s.corpus_upper_multiple

        converged = False
        iterations = 0
        for i in range(s.corpus_iterations):
            iterations = i + 1
            rate = self._success_fraction(corpus, params)
            logger.debug(
                f"Iteration {iterations}/{s.corpus_iterations}: corpus {corpus:,.0f} "
                f"-> success {to_percent(rate):.1f}% (target {to_percent(target):.1f}%)"
            )

            if abs(rate - target) < s.corpus_tolerance:
                converged = True
                break

            if rate < target:
                lower_bound = corpus
                corpus = (corpus + upper_bound) / 2
            else:
                upper_bound = corpus
                corpus = (corpus + lower_bound) / 2

        # Re-verify the final estimate
        rate = self._success_fraction(corpus, params)
        margin_applied = False
        if rate < target - s.corpus_margin_threshold:
            corpus *= 1.0 + (target - rate) * s.corpus_margin_multiplier
            margin_applied = True
            logger.warning(
                f"Corpus search missed target ({to_percent(rate):.1f}% vs "
                f"{to_percent(target):.1f}%), applying safety margin -> {corpus:,.0f}"
            )

        logger.info(
            f"Required corpus {corpus:,.0f} at {to_percent(rate):.1f}% success "
            f"after {iterations} iterations"
        )
        return CorpusCalibration(
            corpus=corpus,
            success_rate=to_percent(rate),
            target_success_rate=to_percent(target),
            iterations=iterations,
            converged=converged,
            safety_margin_applied=margin_applied,
        )

    def required_corpus(self, params: PlanParameters) -> float:
        """Best-estimate required corpus (see `calibrate`)."""
        return self.calibrate(params).corpus
