"""Summary statistics over Monte Carlo trial outcomes."""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd

from ..models.results import CdfPoint, DistributionSummary, HistogramBin

DEFAULT_PERCENTILES = (10, 50, 90)
DEFAULT_BINS = 22
DEFAULT_CDF_POINTS = 45


def _as_array(outcomes: Sequence[float]) -> np.ndarray:
    return np.asarray(outcomes, dtype=float).ravel()


def percentile(outcomes: Sequence[float], p: float) -> float:
    """
    Percentile with linear interpolation between neighbouring ranks.

    The fractional rank is ``p / 100 * (n - 1)`` on the ascending sort.
    """
    values = np.sort(_as_array(outcomes))
    if values.size == 0:
        return float("nan")
    idx = (float(p) / 100.0) * (values.size - 1)
    lo = int(math.floor(idx))
    hi = int(math.ceil(idx))
    if lo == hi:
        return float(values[lo])
    weight = idx - lo
    return float(values[lo] * (1.0 - weight) + values[hi] * weight)


def probability_positive(outcomes: Sequence[float]) -> float:
    """Percentage of outcomes strictly greater than zero."""
    values = _as_array(outcomes)
    if values.size == 0:
        return float("nan")
    return float(np.count_nonzero(values > 0.0)) / values.size * 100.0


def histogram(outcomes: Sequence[float], bin_count: int = DEFAULT_BINS) -> List[HistogramBin]:
    """Equal-width bins spanning [min, max]; a zero span uses a width of 1."""
    values = _as_array(outcomes)
    if values.size == 0:
        return []
    bin_count = max(int(bin_count), 1)
    low = float(values.min())
    high = float(values.max())
    span = (high - low) or 1.0
    width = span / bin_count

    indices = np.clip(np.floor((values - low) / width).astype(int), 0, bin_count - 1)
    counts = np.bincount(indices, minlength=bin_count)
    return [
        HistogramBin(lower=low + i * width, upper=low + (i + 1) * width, count=int(counts[i]))
        for i in range(bin_count)
    ]


def cdf_sample(outcomes: Sequence[float], point_count: int = DEFAULT_CDF_POINTS) -> List[CdfPoint]:
    """Empirical CDF sampled at evenly spaced ranks of the sorted outcomes."""
    values = np.sort(_as_array(outcomes))
    n = values.size
    if n == 0 or point_count < 1:
        return []
    if point_count == 1:
        return [CdfPoint(value=float(values[-1]), probability=1.0)]
    points: List[CdfPoint] = []
    for i in range(point_count):
        rank = int(math.floor(i / (point_count - 1) * (n - 1)))
        probability = rank / (n - 1) if n > 1 else 1.0
        points.append(CdfPoint(value=float(values[rank]), probability=probability))
    return points


def summarize(
    outcomes: Sequence[float],
    *,
    percentiles: Iterable[float] = DEFAULT_PERCENTILES,
    bins: int = DEFAULT_BINS,
    cdf_points: int = DEFAULT_CDF_POINTS,
) -> DistributionSummary:
    """Build a fresh :class:`DistributionSummary`; empty input yields the empty summary."""
    values = _as_array(outcomes)
    if values.size == 0:
        return DistributionSummary.empty()
    return DistributionSummary(
        count=int(values.size),
        mean=float(values.mean()),
        std=float(values.std()),
        minimum=float(values.min()),
        maximum=float(values.max()),
        percentiles={float(p): percentile(values, p) for p in percentiles},
        probability_positive=probability_positive(values),
        histogram=histogram(values, bins),
        cdf=cdf_sample(values, cdf_points),
    )


def build_percentile_table(
    outcomes: Sequence[float],
    *,
    percentiles: Iterable[int] = range(5, 100, 5),
) -> pd.DataFrame:
    """Return a percentile ladder as a dataframe."""
    values = _as_array(outcomes)
    ladder = [{"percentile": p, "npv": percentile(values, p)} for p in percentiles]
    return pd.DataFrame(ladder, columns=["percentile", "npv"])


__all__ = [
    "percentile",
    "probability_positive",
    "histogram",
    "cdf_sample",
    "summarize",
    "build_percentile_table",
]
