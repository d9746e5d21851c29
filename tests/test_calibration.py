"""Tests for the required-corpus search."""

import pytest

from corpus.calibration import CorpusCalibrator
from corpus.config import SearchSettings
from corpus.returns import RandomSource
from corpus.simulator import MonteCarloEngine


class ConstantRateEngine(MonteCarloEngine):
    """Engine that always reports the same success rate."""

    def __init__(self, rate: float) -> None:
        super().__init__(random_source=RandomSource(0))
        self.rate = rate

    def simulate_success_rate(self, starting_corpus, params):
        return self.rate


class TestCalibrateDeterministic:
    """Search behaviour against a deterministic objective."""

    def test_converges_near_target(self, funding_engine, basic_params):
        """Corpus lands within half a point of the 85% funding ratio."""
        result = CorpusCalibrator(funding_engine).calibrate(basic_params)
        assert result.converged
        assert not result.safety_margin_applied
        assert abs(result.success_rate - 85) < 0.5
        assert result.corpus == pytest.approx(0.85 * 60_000 * 30, abs=9_000)

    def test_default_target(self, funding_engine, basic_params):
        """An unset target falls back to 85%."""
        assert basic_params.target_success_rate == 0
        assert CorpusCalibrator(funding_engine).calibrate(basic_params).target_success_rate == 85

    def test_custom_target(self, funding_engine, basic_params):
        params = basic_params.with_overrides(target_success_rate=95)
        result = CorpusCalibrator(funding_engine).calibrate(params)
        assert result.corpus == pytest.approx(0.95 * 60_000 * 30, abs=9_000)

    def test_stops_early(self, funding_engine, basic_params):
        """Search stops as soon as it is within tolerance."""
        result = CorpusCalibrator(funding_engine).calibrate(basic_params)
        assert result.iterations < 15

    def test_safety_margin(self, basic_params):
        """A search that cannot reach the target marks the corpus up."""
        result = CorpusCalibrator(ConstantRateEngine(50.0)).calibrate(basic_params)
        assert not result.converged
        assert result.safety_margin_applied
        assert result.iterations == 15
        # Bound approaches 3x the 4% rule guess, then 1 + (0.85 - 0.50) * 2
        assert result.corpus == pytest.approx(4_500_000 * 1.7, rel=0.01)

    def test_no_margin_when_close(self, basic_params):
        """Missing by less than a point is not marked up."""
        result = CorpusCalibrator(ConstantRateEngine(84.5)).calibrate(basic_params)
        assert not result.safety_margin_applied

    def test_custom_settings(self, funding_engine, basic_params):
        """Iteration budget comes from the settings."""
        settings = SearchSettings(corpus_iterations=2)
        result = CorpusCalibrator(funding_engine, settings).calibrate(basic_params)
        assert result.iterations <= 2


class TestCalibrateMonteCarlo:
    """Search behaviour with the real engine."""

    def test_reference_scenario(self, engine, basic_params):
        """60k/year over 30 years at 7%/10%/3% needs 1.3M-1.8M for an 85% target."""
        assert basic_params.num_trials >= 1000
        result = CorpusCalibrator(engine).calibrate(basic_params)
        assert 1.3e6 <= result.corpus <= 1.8e6
        assert result.success_rate >= 85 - 1.5

    def test_required_corpus_shortcut(self, engine, basic_params):
        assert CorpusCalibrator(engine).required_corpus(basic_params) > 0
