"""Percentile and depletion statistics over simulated corpus samples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class PercentileBand:
    """5th / 50th / 95th percentile of a sample."""

    p5: float
    p50: float
    p95: float


def calculate_percentile(values: Sequence[float] | np.ndarray | None, percentile: float) -> float:
    """
    Linearly interpolated percentile of an unordered sample.

    The caller's array is never reordered. Percentiles at or below 0 return
    the minimum and at or above 100 the maximum.

    Args:
        values: Sample values (any order)
        percentile: Percentile in [0, 100]

    Returns:
        Interpolated value, or 0.0 for an empty or missing sample
    """
    if values is None:
        return 0.0
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0

    if percentile <= 0:
        return float(arr.min())
    if percentile >= 100:
        return float(arr.max())

    # Rank p/100 * (n - 1), interpolated between the neighbouring order statistics
    return float(np.percentile(arr, percentile))


def percentile_band(values: Sequence[float] | np.ndarray | None) -> PercentileBand:
    """Compute the 5th / median / 95th percentile band."""
    return PercentileBand(
        p5=calculate_percentile(values, 5),
        p50=calculate_percentile(values, 50),
        p95=calculate_percentile(values, 95),
    )


def depletion_count(values: Sequence[float] | np.ndarray | None) -> int:
    """Number of trials whose corpus is at or below zero."""
    if values is None:
        return 0
    return int(np.count_nonzero(np.asarray(values, dtype=float) <= 0))


def depletion_risk(values: Sequence[float] | np.ndarray | None) -> float:
    """Percentage (0-100) of trials whose corpus is at or below zero."""
    if values is None:
        return 0.0
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return depletion_count(arr) / arr.size * 100.0
