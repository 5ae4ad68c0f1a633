"""Sanity checks for Monte Carlo outcome distributions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np
import pandas as pd


@dataclass
class ValidationResult:
    """Basic container for validation outcomes."""

    status: str
    failed_checks: Sequence[str]
    warnings: Sequence[str]

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status,
            "failed_checks": list(self.failed_checks),
            "warnings": list(self.warnings),
        }


def validate_distribution(
    npv_values: Sequence[float],
    *,
    loss_share_warning: float = 0.5,
) -> ValidationResult:
    """Validate ordering, finiteness and dispersion of simulated NPVs."""
    failed: list[str] = []
    warnings: list[str] = []
    if len(npv_values) == 0:
        failed.append("no_npv_values")
        return ValidationResult(status="FAIL", failed_checks=failed, warnings=warnings)

    series = pd.Series(np.asarray(npv_values, dtype=float))
    if not np.all(np.isfinite(series.to_numpy())):
        failed.append("nan_or_inf_npv")
        return ValidationResult(status="FAIL", failed_checks=failed, warnings=warnings)

    percentiles = series.quantile([0.01, 0.05, 0.25, 0.50, 0.75, 0.95, 0.99])
    if not percentiles.is_monotonic_increasing:
        failed.append("percentile_ordering")

    if len(series) > 1 and float(series.std(ddof=1)) <= 0:
        warnings.append("zero_dispersion")

    if float((series <= 0).mean()) > loss_share_warning:
        warnings.append("majority_of_trials_lose_value")

    status = "PASS" if not failed else "FAIL"
    return ValidationResult(status=status, failed_checks=failed, warnings=warnings)


__all__ = ["ValidationResult", "validate_distribution"]
