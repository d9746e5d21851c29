#!/usr/bin/env python3
"""Quick smoke checks for the corpus calculator core."""

import sys
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from corpus.calibration import CorpusCalibrator
from corpus.params import PlanParameters
from corpus.paths import simulate_paths
from corpus.returns import RandomSource
from corpus.simulator import MonteCarloEngine
from corpus.tracker import YearlyCorpusTracker
from utils.helpers import annual_to_monthly_rate, format_currency, format_money


def test_helpers():
    """Test helper functions."""
    print("Testing helpers...")
    monthly = annual_to_monthly_rate(0.12)
    assert abs(monthly - ((1.12 ** (1 / 12)) - 1)) < 0.0001

    assert format_currency(1234.56) == "$1,235"
    assert format_money(2_500_000) == "$2.50M"
    print("  ✓ Helper tests passed")


def test_paths():
    """Test the path step with flat returns."""
    print("Testing paths...")
    returns = np.ones((10, 12)) * 0.005  # 0.5% per month
    batch = simulate_paths(100_000, returns, np.full(12, -1_000.0))
    assert batch.survived.all()
    assert batch.terminal_values.min() > 0
    print("  ✓ Path tests passed")


def test_basic_mode():
    """Test the required-corpus search on the reference scenario."""
    print("Testing basic mode...")
    engine = MonteCarloEngine(random_source=RandomSource(42))
    params = PlanParameters.basic(num_trials=1000)
    result = CorpusCalibrator(engine).calibrate(params)
    multiple = result.corpus / params.annual_expense
    assert 15 <= multiple <= 35, multiple
    print(f"  Required corpus {format_money(result.corpus)} ({multiple:.1f}x expense)")
    print("  ✓ Basic mode tests passed")


def test_tracking():
    """Test year-by-year tracking."""
    print("Testing tracking...")
    engine = MonteCarloEngine(random_source=RandomSource(42))
    params = PlanParameters.advanced(num_trials=500)
    tracking = YearlyCorpusTracker(engine).track(params, include_overall=False)
    assert len(tracking) == params.life_expectancy - params.current_age + 1
    print("  ✓ Tracking tests passed")


def main():
    """Run all checks."""
    print("Running basic checks for corpus calculator...\n")
    try:
        test_helpers()
        test_paths()
        test_basic_mode()
        test_tracking()
        print("\n✅ All checks passed!")
        return 0
    except Exception as e:
        print(f"\n❌ Check failed: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
