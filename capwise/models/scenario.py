"""Scenario data models."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScenarioType(str, Enum):
    """Enumeration of supported scenario archetypes."""

    BASE = "base"
    OPTIMISTIC = "optimistic"
    PESSIMISTIC = "pessimistic"


class ScenarioDefinition(BaseModel):
    """Deterministic revenue/cost multipliers applied to the baseline schedule."""

    model_config = ConfigDict(frozen=True)

    scenario_type: ScenarioType = Field(..., description="Scenario classification")
    revenue_multiplier: float = Field(1.0, ge=0.0, description="Factor applied to revenue")
    cost_multiplier: float = Field(1.0, ge=0.0, description="Factor applied to cost")
    description: Optional[str] = Field(None, description="Human-readable scenario description")


SCENARIOS: Dict[ScenarioType, ScenarioDefinition] = {
    ScenarioType.BASE: ScenarioDefinition(
        scenario_type=ScenarioType.BASE,
        description="Baseline projections",
    ),
    ScenarioType.OPTIMISTIC: ScenarioDefinition(
        scenario_type=ScenarioType.OPTIMISTIC,
        revenue_multiplier=1.12,
        cost_multiplier=0.95,
        description="Revenue +12%, cost -5%",
    ),
    ScenarioType.PESSIMISTIC: ScenarioDefinition(
        scenario_type=ScenarioType.PESSIMISTIC,
        revenue_multiplier=0.88,
        cost_multiplier=1.10,
        description="Revenue -12%, cost +10%",
    ),
}


def get_scenario(scenario: ScenarioType | str) -> ScenarioDefinition:
    """Fetch a scenario preset by type or name."""
    try:
        return SCENARIOS[ScenarioType(scenario)]
    except ValueError as exc:
        raise KeyError(f"Scenario {scenario!r} not found") from exc


__all__ = ["ScenarioType", "ScenarioDefinition", "SCENARIOS", "get_scenario"]
