"""Cash flow schedule data models."""

from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

SCHEDULE_COLUMNS = ["year", "revenue", "cost", "net"]


class CashFlowRow(BaseModel):
    """Projected revenue and cost for a single project year."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, description="Elapsed years since the initial outlay")
    revenue: float = Field(..., ge=0.0, description="Revenue booked in the year")
    cost: float = Field(..., ge=0.0, description="Operating cost booked in the year")

    @property
    def net(self) -> float:
        """Net cash flow for the year."""
        return self.revenue - self.cost

    def to_record(self) -> Dict[str, float]:
        return {"year": self.year, "revenue": self.revenue, "cost": self.cost, "net": self.net}


class CashFlowSchedule(BaseModel):
    """Ordered, immutable sequence of yearly cash flow rows."""

    model_config = ConfigDict(frozen=True)

    rows: Tuple[CashFlowRow, ...] = Field(default_factory=tuple)

    @field_validator("rows")
    @classmethod
    def _years_increase(cls, rows: Tuple[CashFlowRow, ...]) -> Tuple[CashFlowRow, ...]:
        """Ensure years are strictly increasing."""
        years = [row.year for row in rows]
        if any(later <= earlier for earlier, later in zip(years, years[1:])):
            raise ValueError("Schedule years must be strictly increasing.")
        return rows

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[CashFlowRow]:  # type: ignore[override]
        return iter(self.rows)

    def __getitem__(self, index: int) -> CashFlowRow:
        return self.rows[index]

    @property
    def net_flows(self) -> List[float]:
        return [row.net for row in self.rows]

    def to_records(self) -> List[Dict[str, float]]:
        """Plain records (year, revenue, cost, net) for export collaborators."""
        return [row.to_record() for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.to_records(), columns=SCHEDULE_COLUMNS)

    @classmethod
    def from_records(cls, records) -> "CashFlowSchedule":
        rows = [
            CashFlowRow(year=int(r["year"]), revenue=float(r["revenue"]), cost=float(r["cost"]))
            for r in records
        ]
        return cls(rows=tuple(rows))


__all__ = ["CashFlowRow", "CashFlowSchedule", "SCHEDULE_COLUMNS"]
