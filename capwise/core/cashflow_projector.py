"""Yearly cash flow projection helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from ..models.project import CashFlowRow, CashFlowSchedule
from ..utils.numbers import clamp

MIN_YEARS = 1
MAX_YEARS = 20
DEFAULT_REVENUE = 450_000_000.0
DEFAULT_COST = 220_000_000.0


def project_year(
    base_revenue: float,
    base_cost: float,
    trend_revenue: float,
    trend_cost: float,
    year_index: int,
) -> Tuple[float, float]:
    """Compound the base revenue and cost forward by ``year_index`` years."""
    revenue = base_revenue * (1.0 + trend_revenue) ** year_index
    cost = base_cost * (1.0 + trend_cost) ** year_index
    return revenue, cost


def apply_scenario_multiplier(
    schedule: CashFlowSchedule,
    revenue_multiplier: float,
    cost_multiplier: float,
) -> CashFlowSchedule:
    """Return a new schedule with every row's revenue and cost scaled."""
    rows = [
        CashFlowRow(
            year=row.year,
            revenue=row.revenue * revenue_multiplier,
            cost=row.cost * cost_multiplier,
        )
        for row in schedule
    ]
    return CashFlowSchedule(rows=tuple(rows))


def build_schedule(
    years: int,
    revenue: float = DEFAULT_REVENUE,
    cost: float = DEFAULT_COST,
) -> CashFlowSchedule:
    """Flat schedule of ``years`` identical rows (years clamped to 1..20)."""
    years = int(clamp(int(years), MIN_YEARS, MAX_YEARS))
    rows = [CashFlowRow(year=year, revenue=revenue, cost=cost) for year in range(1, years + 1)]
    return CashFlowSchedule(rows=tuple(rows))


def build_series(initial_outlay: float, schedule: CashFlowSchedule) -> List[float]:
    """Prefix the schedule's net flows with the year-0 outlay (always non-positive)."""
    return [-abs(float(initial_outlay))] + schedule.net_flows


@dataclass(frozen=True)
class CashflowProjector:
    """Apply annual drift to a baseline schedule."""

    schedule: CashFlowSchedule
    revenue_trend: float = 0.0
    cost_trend: float = 0.0

    def drifted_year(self, position: int) -> Tuple[float, float]:
        """Drifted (revenue, cost) for the row at 0-based ``position``."""
        row = self.schedule[position]
        return project_year(row.revenue, row.cost, self.revenue_trend, self.cost_trend, position)

    def drifted_rows(self) -> List[Tuple[float, float]]:
        return [self.drifted_year(position) for position in range(len(self.schedule))]

    def drifted_schedule(self) -> CashFlowSchedule:
        """Deterministic drifted schedule, i.e. the centre of the simulated paths."""
        rows = [
            CashFlowRow(year=row.year, revenue=revenue, cost=cost)
            for row, (revenue, cost) in zip(self.schedule, self.drifted_rows())
        ]
        return CashFlowSchedule(rows=tuple(rows))


__all__ = [
    "project_year",
    "apply_scenario_multiplier",
    "build_schedule",
    "build_series",
    "CashflowProjector",
]
