"""Present value and rate-of-return calculations for project cash flows."""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from .validator import (
    ConvergenceFailure,
    DomainError,
    validate_cash_flow_series,
    validate_discount_rate,
)

LOGGER = logging.getLogger(__name__)

IRR_INITIAL_GUESS = 0.2
IRR_MAX_ITERATIONS = 80
IRR_TOLERANCE = 1e-9
PROFILE_RATES = tuple(r / 100.0 for r in range(0, 41, 2))


def present_value(series: Sequence[float], rate: float) -> float:
    """
    Discount a cash flow series at a flat periodic rate.

    ``series[t]`` is the flow at the end of period ``t``; ``series[0]`` is not
    discounted. Raises :class:`DomainError` when ``rate <= -1``.
    """
    values = validate_cash_flow_series(series)
    rate = validate_discount_rate(rate)
    periods = np.arange(values.size, dtype=float)
    discount_factors = np.power(1.0 + rate, -periods)
    return float(np.dot(values, discount_factors))


def _npv_and_derivative(values: np.ndarray, periods: np.ndarray, rate: float) -> tuple[float, float]:
    base = 1.0 + rate
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        npv = float(np.sum(values / np.power(base, periods)))
        slope = float(np.sum(-periods * values / np.power(base, periods + 1.0)))
    return npv, slope


def rate_of_return(
    series: Sequence[float],
    initial_guess: float = IRR_INITIAL_GUESS,
    *,
    max_iterations: int = IRR_MAX_ITERATIONS,
    tolerance: float = IRR_TOLERANCE,
) -> float:
    """
    Solve ``present_value(series, r) == 0`` with Newton-Raphson.

    Returns ``nan`` when no root is found: a non-finite iterate, a flat
    derivative, an iterate at or below -100%, or an exhausted iteration
    budget. Series with zero or several sign changes commonly end up here.
    """
    values = validate_cash_flow_series(series)
    periods = np.arange(values.size, dtype=float)
    rate = float(initial_guess)
    for _ in range(max_iterations):
        if rate <= -1.0:
            break
        npv, slope = _npv_and_derivative(values, periods, rate)
        if not (math.isfinite(npv) and math.isfinite(slope)) or slope == 0.0:
            break
        next_rate = rate - npv / slope
        if not math.isfinite(next_rate):
            break
        if abs(next_rate - rate) < tolerance:
            return next_rate
        rate = next_rate
    LOGGER.debug("IRR did not converge for series of %d flows.", values.size)
    return float("nan")


def rate_of_return_or_raise(series: Sequence[float], initial_guess: float = IRR_INITIAL_GUESS) -> float:
    """Variant of :func:`rate_of_return` raising :class:`ConvergenceFailure`."""
    result = rate_of_return(series, initial_guess)
    if not irr_available(result):
        raise ConvergenceFailure("Internal rate of return is not available for this cash flow shape.")
    return result


def irr_available(value: float) -> bool:
    """Return True when ``value`` is a usable rate of return."""
    return value is not None and math.isfinite(value)


def real_rate_from_nominal(nominal: float, inflation: float) -> float:
    """Fisher conversion of a nominal rate into a real rate."""
    if inflation == -1.0:
        raise DomainError("Inflation of -100% leaves the real rate undefined.")
    return (1.0 + nominal) / (1.0 + inflation) - 1.0


def npv_profile(series: Sequence[float], rates: Iterable[float] = PROFILE_RATES) -> pd.DataFrame:
    """Return NPV evaluated across a range of discount rates."""
    rows = [{"rate": float(rate), "npv": present_value(series, rate)} for rate in rates]
    return pd.DataFrame(rows, columns=["rate", "npv"])


__all__ = [
    "present_value",
    "rate_of_return",
    "rate_of_return_or_raise",
    "irr_available",
    "real_rate_from_nominal",
    "npv_profile",
]
