"""Result data models for valuation and simulation outputs."""

from __future__ import annotations

import math
from typing import Dict, List

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field


class HistogramBin(BaseModel):
    """Equal-width histogram bin over simulated present values."""

    model_config = ConfigDict(frozen=True)

    lower: float
    upper: float
    count: int = Field(..., ge=0)


class CdfPoint(BaseModel):
    """Empirical CDF sample point."""

    model_config = ConfigDict(frozen=True)

    value: float
    probability: float = Field(..., ge=0.0, le=1.0)


class DistributionSummary(BaseModel):
    """Read-only snapshot describing a set of trial outcomes."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(0, ge=0, description="Number of trial outcomes summarised")
    mean: float = Field(float("nan"), description="Arithmetic mean of outcomes")
    std: float = Field(float("nan"), description="Population standard deviation")
    minimum: float = Field(float("nan"))
    maximum: float = Field(float("nan"))
    percentiles: Dict[float, float] = Field(
        default_factory=dict,
        description="Linearly interpolated percentiles keyed by percentile level",
    )
    probability_positive: float = Field(
        float("nan"), description="Share of outcomes strictly above zero, in percent"
    )
    histogram: List[HistogramBin] = Field(default_factory=list)
    cdf: List[CdfPoint] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "DistributionSummary":
        """The "no data" summary shown before any simulation has run."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def percentile(self, level: float) -> float:
        return self.percentiles.get(float(level), float("nan"))

    @property
    def p10(self) -> float:
        return self.percentile(10)

    @property
    def p50(self) -> float:
        return self.percentile(50)

    @property
    def p90(self) -> float:
        return self.percentile(90)

    def histogram_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [b.model_dump() for b in self.histogram], columns=["lower", "upper", "count"]
        )

    def cdf_frame(self) -> pd.DataFrame:
        return pd.DataFrame([p.model_dump() for p in self.cdf], columns=["value", "probability"])

    def summary_frame(self) -> pd.DataFrame:
        """Return headline statistics as a two-column table."""
        if self.is_empty:
            return pd.DataFrame(columns=["metric", "value"])
        rows = [
            {"metric": "mean", "value": self.mean},
            {"metric": "std", "value": self.std},
        ]
        rows.extend({"metric": f"p{level:g}", "value": value} for level, value in sorted(self.percentiles.items()))
        rows.append({"metric": "probability_positive_pct", "value": self.probability_positive})
        return pd.DataFrame(rows)


class ValuationResult(BaseModel):
    """Deterministic KPIs for a single cash flow series."""

    model_config = ConfigDict(frozen=True)

    npv: float = Field(..., description="Net present value at the effective rate")
    irr: float = Field(..., description="Internal rate of return; NaN when unavailable")
    effective_rate: float = Field(..., description="Discount rate actually applied")

    @property
    def irr_available(self) -> bool:
        return math.isfinite(self.irr)


__all__ = ["HistogramBin", "CdfPoint", "DistributionSummary", "ValuationResult"]
