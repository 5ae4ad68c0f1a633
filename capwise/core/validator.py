"""Error taxonomy and input validation utilities."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


class ValidationError(Exception):
    """Base error for every recoverable failure raised by the engine."""


class DomainError(ValidationError, ValueError):
    """Raised when a computation is undefined for the supplied inputs."""


class ConvergenceFailure(ValidationError):
    """Raised when the rate-of-return solver does not settle on a root."""


class EmptyInputError(ValidationError, ValueError):
    """Raised when an operation needs at least one value and received none."""


class ConfigurationOutOfRange(ValidationError, ValueError):
    """Raised for configuration values that cannot be clamped (NaN or infinite)."""


class SimulationError(ValidationError, RuntimeError):
    """Raised when a Monte Carlo run cannot produce its full set of outcomes."""


def validate_cash_flow_series(series: Sequence[float]) -> np.ndarray:
    """Return the series as a float array, rejecting empty or non-finite input."""
    values = np.asarray(list(series), dtype=float)
    if values.size == 0:
        raise EmptyInputError("Cash flow series cannot be empty.")
    if not np.all(np.isfinite(values)):
        raise DomainError("Cash flow series contains NaN or infinite values.")
    return values


def validate_discount_rate(rate: float) -> float:
    """Ensure ``rate`` keeps the discount factor ``1 / (1 + rate)`` defined."""
    rate = float(rate)
    if not math.isfinite(rate):
        raise DomainError(f"Discount rate must be finite, got {rate!r}.")
    if rate <= -1.0:
        raise DomainError(f"Discount rate must be greater than -100%, got {rate:.4f}.")
    return rate


__all__ = [
    "ValidationError",
    "DomainError",
    "ConvergenceFailure",
    "EmptyInputError",
    "ConfigurationOutOfRange",
    "SimulationError",
    "validate_cash_flow_series",
    "validate_discount_rate",
]
