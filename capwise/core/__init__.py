"""Numerical core: valuation maths, simulation, summaries and risk scoring."""
