"""Capital project valuation, Monte Carlo simulation and risk scoring."""

from .engine import CapitalProjectEngine, ProjectInputs

__version__ = "0.1.0"

__all__ = ["CapitalProjectEngine", "ProjectInputs", "__version__"]
