from __future__ import annotations

import math


def annual_to_monthly_rate(annual_rate: float) -> float:
    return (1 + annual_rate) ** (1 / 12) - 1


def annual_to_monthly_volatility(annual_volatility: float) -> float:
    return annual_volatility / math.sqrt(12)


def inflation_factor(inflation: float, years: int, adjust: bool = True) -> float:
    """Growth of a price level after `years` of `inflation` (1.0 when not adjusting)."""
    if not adjust:
        return 1.0
    return (1 + inflation) ** years


def to_fraction(percent: float) -> float:
    """Convert a 0-100 percentage to a 0-1 fraction."""
    return percent / 100.0


def to_percent(fraction: float) -> float:
    """Convert a 0-1 fraction to a 0-100 percentage."""
    return fraction * 100.0


def format_currency(value: float) -> str:
    return f"${value:,.0f}"


def format_money(value: float) -> str:
    """Format money for reports: millions as $1.23M, otherwise with cents."""
    if value >= 1_000_000:
        return f"${value / 1_000_000:,.2f}M"
    return f"${value:,.2f}"


def format_percent(value: float) -> str:
    """Format a 0-100 percentage with one decimal."""
    return f"{value:.1f}%"
