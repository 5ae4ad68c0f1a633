"""Monte Carlo configuration and stochastic cash flow simulation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from ..models.project import CashFlowSchedule
from ..utils.numbers import clamp
from .cashflow_projector import CashflowProjector
from .random_source import StandardNormalDriver
from .validator import (
    ConfigurationOutOfRange,
    DomainError,
    SimulationError,
    validate_discount_rate,
)
from .valuation import present_value

LOGGER = logging.getLogger(__name__)

TRIAL_BOUNDS: Tuple[int, int] = (1, 50_000)
SLIDER_TRIAL_BOUNDS: Tuple[int, int] = (200, 50_000)
VOLATILITY_BOUNDS: Tuple[float, float] = (0.0, 1.0)
DRIFT_BOUNDS: Tuple[float, float] = (-0.2, 0.3)
RATE_VOLATILITY_BOUNDS: Tuple[float, float] = (0.0, 0.25)
# Keeps randomised rates well away from the -100% singularity.
SIMULATED_RATE_BOUNDS: Tuple[float, float] = (0.01, 0.80)


def _bounded(name: str, value: float, bounds: Tuple[float, float]) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ConfigurationOutOfRange(f"{name} must be finite, got {value!r}.")
    bounded = clamp(value, *bounds)
    if bounded != value:
        LOGGER.warning("%s=%s outside [%s, %s]; clamped to %s.", name, value, bounds[0], bounds[1], bounded)
    return bounded


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable configuration bundle for a Monte Carlo run.

    Finite values outside the accepted ranges are clamped to the nearest
    bound; NaN or infinite values raise :class:`ConfigurationOutOfRange`.
    """

    trial_count: int = 1000
    revenue_volatility: float = 0.15
    cost_volatility: float = 0.12
    revenue_drift: float = 0.03
    cost_drift: float = 0.02
    randomize_discount_rate: bool = False
    discount_rate_volatility: float = 0.05

    def __post_init__(self) -> None:
        trials = _bounded("trial_count", self.trial_count, TRIAL_BOUNDS)
        object.__setattr__(self, "trial_count", int(trials))
        for name in ("revenue_volatility", "cost_volatility"):
            object.__setattr__(self, name, _bounded(name, getattr(self, name), VOLATILITY_BOUNDS))
        for name in ("revenue_drift", "cost_drift"):
            object.__setattr__(self, name, _bounded(name, getattr(self, name), DRIFT_BOUNDS))
        object.__setattr__(
            self,
            "discount_rate_volatility",
            _bounded("discount_rate_volatility", self.discount_rate_volatility, RATE_VOLATILITY_BOUNDS),
        )
        object.__setattr__(self, "randomize_discount_rate", bool(self.randomize_discount_rate))

    @classmethod
    def from_user_inputs(cls, trial_count: int, **kwargs: object) -> "SimulationConfig":
        """Build a config applying the interactive trial range of 200..50,000."""
        trials = _bounded("trial_count", trial_count, SLIDER_TRIAL_BOUNDS)
        return cls(trial_count=int(trials), **kwargs)  # type: ignore[arg-type]

    def to_metadata(self) -> Dict[str, object]:
        """Serialise into a plain mapping."""
        return {
            "trial_count": int(self.trial_count),
            "revenue_volatility": float(self.revenue_volatility),
            "cost_volatility": float(self.cost_volatility),
            "revenue_drift": float(self.revenue_drift),
            "cost_drift": float(self.cost_drift),
            "randomize_discount_rate": bool(self.randomize_discount_rate),
            "discount_rate_volatility": float(self.discount_rate_volatility),
        }

    @classmethod
    def from_metadata(cls, metadata: Dict[str, object]) -> "SimulationConfig":
        """Rehydrate a configuration from a mapping, defaulting missing keys."""
        defaults = cls()
        return cls(
            trial_count=int(metadata.get("trial_count", defaults.trial_count)),
            revenue_volatility=float(metadata.get("revenue_volatility", defaults.revenue_volatility)),
            cost_volatility=float(metadata.get("cost_volatility", defaults.cost_volatility)),
            revenue_drift=float(metadata.get("revenue_drift", defaults.revenue_drift)),
            cost_drift=float(metadata.get("cost_drift", defaults.cost_drift)),
            randomize_discount_rate=bool(metadata.get("randomize_discount_rate", False)),
            discount_rate_volatility=float(
                metadata.get("discount_rate_volatility", defaults.discount_rate_volatility)
            ),
        )


class MonteCarloSimulator:
    """Resample revenue, cost and optionally the discount rate across trials."""

    def __init__(
        self,
        schedule: CashFlowSchedule,
        initial_outlay: float,
        base_discount_rate: float,
        config: Optional[SimulationConfig] = None,
        driver: Optional[StandardNormalDriver] = None,
    ) -> None:
        self.schedule = schedule
        self.initial_outlay = -abs(float(initial_outlay))
        self.base_discount_rate = validate_discount_rate(base_discount_rate)
        self.config = config or SimulationConfig()
        self.driver = driver or StandardNormalDriver()
        self._projector = CashflowProjector(
            schedule,
            revenue_trend=self.config.revenue_drift,
            cost_trend=self.config.cost_drift,
        )

    def trial_rate(self) -> float:
        """Discount rate for one trial; draws a shock only when randomisation is on."""
        if not self.config.randomize_discount_rate:
            return self.base_discount_rate
        shocked = self.base_discount_rate + self.driver.standard_normal() * self.config.discount_rate_volatility
        return clamp(shocked, *SIMULATED_RATE_BOUNDS)

    def trial_series(self, drifted: list) -> list:
        """One perturbed cash flow path: revenue then cost shock for every year."""
        series = [self.initial_outlay]
        for revenue, cost in drifted:
            revenue_shock = 1.0 + self.config.revenue_volatility * self.driver.standard_normal()
            cost_shock = 1.0 + self.config.cost_volatility * self.driver.standard_normal()
            series.append(revenue * revenue_shock - cost * cost_shock)
        return series

    def run(self) -> np.ndarray:
        """Return ``trial_count`` present values in trial order as a read-only array."""
        trials = self.config.trial_count
        LOGGER.info(
            "Running %d trials over %d years (rate randomised: %s).",
            trials,
            len(self.schedule),
            self.config.randomize_discount_rate,
        )
        drifted = self._projector.drifted_rows()
        outcomes = np.empty(trials, dtype=float)
        for idx in range(trials):
            series = self.trial_series(drifted)
            try:
                outcomes[idx] = present_value(series, self.trial_rate())
            except DomainError as exc:
                raise SimulationError(f"Trial {idx + 1} of {trials} failed: {exc}") from exc

        if outcomes.size != trials or not np.all(np.isfinite(outcomes)):
            raise SimulationError(
                f"Simulation produced invalid outcomes; expected {trials} finite present values."
            )
        outcomes.flags.writeable = False
        return outcomes


def run_simulation(
    schedule: CashFlowSchedule,
    initial_outlay: float,
    base_discount_rate: float,
    config: Optional[SimulationConfig] = None,
    driver: Optional[StandardNormalDriver] = None,
) -> np.ndarray:
    """Functional entry point around :class:`MonteCarloSimulator`."""
    simulator = MonteCarloSimulator(
        schedule,
        initial_outlay,
        base_discount_rate,
        config=config,
        driver=driver,
    )
    return simulator.run()


__all__ = [
    "SimulationConfig",
    "MonteCarloSimulator",
    "run_simulation",
    "SIMULATED_RATE_BOUNDS",
    "TRIAL_BOUNDS",
    "SLIDER_TRIAL_BOUNDS",
]
