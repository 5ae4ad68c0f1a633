"""Injectable sources of randomness for the Monte Carlo simulator."""

from __future__ import annotations

from itertools import cycle
from math import cos, log, pi, sqrt
from typing import Iterable, Optional, Protocol

import numpy as np


class UniformSource(Protocol):
    """Anything able to produce uniform draws on [0, 1)."""

    def uniform(self) -> float:
        ...


class NumpyUniformSource:
    """Uniform draws backed by ``numpy.random.default_rng``."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self._rng.random())


class SequenceUniformSource:
    """Replay a fixed sequence of uniform values, cycling when exhausted."""

    def __init__(self, values: Iterable[float]) -> None:
        values = [float(v) for v in values]
        if not values:
            raise ValueError("SequenceUniformSource needs at least one value.")
        if any(v < 0.0 or v >= 1.0 for v in values):
            raise ValueError("Uniform values must lie in [0, 1).")
        self._values = cycle(values)

    def uniform(self) -> float:
        return next(self._values)


class StandardNormalDriver:
    """
    Box-Muller transform over an injected :class:`UniformSource`.

    Each draw consumes two uniforms; a uniform of exactly zero is redrawn so
    the logarithm stays finite.
    """

    def __init__(self, source: Optional[UniformSource] = None) -> None:
        self.source = source if source is not None else NumpyUniformSource()

    def _nonzero_uniform(self) -> float:
        value = 0.0
        while value == 0.0:
            value = self.source.uniform()
        return value

    def standard_normal(self) -> float:
        u = self._nonzero_uniform()
        v = self._nonzero_uniform()
        return sqrt(-2.0 * log(u)) * cos(2.0 * pi * v)


def seeded_driver(seed: Optional[int]) -> StandardNormalDriver:
    """Convenience constructor for a reproducible driver."""
    return StandardNormalDriver(NumpyUniformSource(seed))


__all__ = [
    "UniformSource",
    "NumpyUniformSource",
    "SequenceUniformSource",
    "StandardNormalDriver",
    "seeded_driver",
]
