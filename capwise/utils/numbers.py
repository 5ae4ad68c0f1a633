"""Numeric helper functions shared across the application."""

from __future__ import annotations

from typing import Optional

PERCENT_THRESHOLD = 1.5


def as_rate(value: Optional[float]) -> Optional[float]:
    """
    Read a rate typed either as a percentage (25) or a decimal (0.25).

    Magnitudes up to ``PERCENT_THRESHOLD`` are taken as decimals, so 1 means
    100% and a 1% rate must be entered as 0.01.
    """
    if value is None:
        return None
    if abs(value) > PERCENT_THRESHOLD:
        return float(value) / 100.0
    return float(value)


def clamp(value: float, lower: float, upper: float) -> float:
    """Bound ``value`` to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


__all__ = ["PERCENT_THRESHOLD", "as_rate", "clamp"]
