"""Qualitative risk assessment data models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskLevel(str, Enum):
    """Classification bands for probability x impact scores."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RiskItem(BaseModel):
    """A named risk rated for probability and impact on a 1..5 scale."""

    model_config = ConfigDict(validate_assignment=True)

    name: str = Field(..., description="Risk identifier")
    probability: int = Field(..., ge=1, le=5, description="Likelihood rating (1..5)")
    impact: int = Field(..., ge=1, le=5, description="Impact rating (1..5)")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        """Ensure the risk name is non-empty."""
        value = value.strip()
        if not value:
            raise ValueError("name cannot be empty")
        return value


class ScoredRisk(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    score: int = Field(..., ge=1, le=25)
    level: RiskLevel


class MitigationPlan(BaseModel):
    """Suggested actions for one of the highest scoring risks."""

    model_config = ConfigDict(frozen=True)

    name: str
    score: int
    level: RiskLevel
    suggestions: List[str] = Field(default_factory=list)


class RiskAssessment(BaseModel):
    """Aggregate outcome of scoring a set of risk items."""

    model_config = ConfigDict(frozen=True)

    items: List[ScoredRisk] = Field(default_factory=list)
    project_score: Optional[float] = Field(
        None, description="Mean item score; None when no items were supplied"
    )
    project_level: Optional[RiskLevel] = None
    matrix: List[List[List[str]]] = Field(
        default_factory=list,
        description="3x3 grid indexed [probability_bucket][impact_bucket]",
    )
    mitigations: List[MitigationPlan] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items


__all__ = ["RiskLevel", "RiskItem", "ScoredRisk", "MitigationPlan", "RiskAssessment"]
