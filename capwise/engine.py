"""High-level orchestration for capital project evaluation."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field

from .core.cashflow_projector import apply_scenario_multiplier, build_schedule, build_series
from .core.distribution import summarize
from .core.monte_carlo import MonteCarloSimulator, SimulationConfig
from .core.monte_carlo_validation import ValidationResult, validate_distribution
from .core.random_source import StandardNormalDriver
from .core.risk_matrix import assess, default_risks
from .core.valuation import irr_available, npv_profile, present_value, rate_of_return, real_rate_from_nominal
from .models.project import CashFlowSchedule
from .models.results import DistributionSummary, ValuationResult
from .models.risk import RiskAssessment, RiskItem
from .models.scenario import ScenarioType, get_scenario
from .reporting.narrative import AdvisorPayload, AdvisorService, Narrative

LOGGER = logging.getLogger(__name__)


class ProjectInputs(BaseModel):
    """User-facing project parameters."""

    project_name: str = Field("New project", description="Display name")
    initial_investment: float = Field(800_000_000.0, ge=0.0, description="Year-0 outlay amount")
    discount_rate: float = Field(0.25, gt=-1.0, description="Nominal discount rate (decimal)")
    inflation: float = Field(0.35, gt=-1.0, description="Annual inflation (decimal)")
    use_real_rate: bool = Field(False, description="Discount at the inflation-adjusted rate")
    years: int = Field(5, ge=1, le=20, description="Projection horizon in years")
    scenario: ScenarioType = Field(ScenarioType.BASE, description="Deterministic scenario preset")


class CapitalProjectEngine:
    """Primary entry point for valuing, simulating and risk-scoring a project."""

    def __init__(self, inputs: Optional[ProjectInputs] = None) -> None:
        self.inputs = inputs or ProjectInputs()
        self._schedule: CashFlowSchedule = build_schedule(self.inputs.years)
        self.risks: List[RiskItem] = default_risks()

    # ------------------------------------------------------------- Cash flows
    def set_schedule(self, schedule: CashFlowSchedule) -> None:
        """Replace the baseline schedule (e.g. after per-year edits)."""
        self._schedule = schedule

    @property
    def baseline_schedule(self) -> CashFlowSchedule:
        return self._schedule

    def scenario_schedule(self) -> CashFlowSchedule:
        scenario = get_scenario(self.inputs.scenario)
        if scenario.scenario_type == ScenarioType.BASE:
            return self._schedule
        return apply_scenario_multiplier(
            self._schedule, scenario.revenue_multiplier, scenario.cost_multiplier
        )

    def effective_rate(self) -> float:
        if self.inputs.use_real_rate:
            return real_rate_from_nominal(self.inputs.discount_rate, self.inputs.inflation)
        return self.inputs.discount_rate

    def cash_flow_series(self) -> List[float]:
        return build_series(self.inputs.initial_investment, self.scenario_schedule())

    # -------------------------------------------------------------- Valuation
    def valuation(self) -> ValuationResult:
        series = self.cash_flow_series()
        rate = self.effective_rate()
        irr = rate_of_return(series)
        if not irr_available(irr):
            LOGGER.warning("IRR not available for project %r.", self.inputs.project_name)
        return ValuationResult(npv=present_value(series, rate), irr=irr, effective_rate=rate)

    def npv_profile(self) -> pd.DataFrame:
        return npv_profile(self.cash_flow_series())

    # ------------------------------------------------------------ Monte Carlo
    def run_monte_carlo(
        self,
        config: Optional[SimulationConfig] = None,
        driver: Optional[StandardNormalDriver] = None,
    ) -> np.ndarray:
        """Simulate the scenario schedule at the effective rate."""
        simulator = MonteCarloSimulator(
            self.scenario_schedule(),
            self.inputs.initial_investment,
            self.effective_rate(),
            config=config,
            driver=driver,
        )
        return simulator.run()

    def summarize(self, outcomes: Sequence[float]) -> DistributionSummary:
        if len(outcomes) == 0:
            return DistributionSummary.empty()
        diagnostics: ValidationResult = validate_distribution(outcomes)
        if diagnostics.failed_checks:
            LOGGER.warning("Distribution checks failed: %s", ", ".join(diagnostics.failed_checks))
        if diagnostics.warnings:
            LOGGER.info("Distribution warnings: %s", ", ".join(diagnostics.warnings))
        return summarize(outcomes)

    # ------------------------------------------------------------------- Risk
    def set_risks(self, risks: Sequence[RiskItem]) -> None:
        self.risks = [item.model_copy() for item in risks]

    def risk_assessment(self, top_k: int = 2) -> RiskAssessment:
        return assess(self.risks, top_k)

    # -------------------------------------------------------------- Narrative
    def advisor_payload(self, valuation: Optional[ValuationResult] = None) -> AdvisorPayload:
        valuation = valuation or self.valuation()
        return AdvisorPayload(
            project_name=self.inputs.project_name,
            initial_investment=self.inputs.initial_investment,
            discount_rate=valuation.effective_rate,
            npv=valuation.npv,
            irr=valuation.irr,
        )

    def cache_params(self, valuation: ValuationResult) -> Dict[str, Any]:
        """Parameters identifying a narrative request, used for cache keys."""
        params: Dict[str, Any] = self.inputs.model_dump(mode="json")
        params.update({"npv": valuation.npv, "irr": valuation.irr})
        return params

    def narrative(self, service: AdvisorService) -> Narrative:
        valuation = self.valuation()
        return service.analyse(self.advisor_payload(valuation), self.cache_params(valuation))


__all__ = ["CapitalProjectEngine", "ProjectInputs"]
