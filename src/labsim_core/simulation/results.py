# src/labsim_core/simulation/results.py
"""
Result contracts produced by the sweep machinery.
"""
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from ..data_structures import SweepPoint


@dataclass(frozen=True)
class SweepCurve:
    """
    An ordered, immutable sweep curve.

    Attributes:
        param: The swept parameter.
        y_field: The sample field recorded as `y`.
        points: The evaluated points in sweep order. Points whose response was
                non-finite are absent, so `len(points) <= steps`.
    """
    param: str
    y_field: str
    points: Tuple[SweepPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[SweepPoint]:
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]

    @property
    def x(self) -> np.ndarray:
        return np.array([p.x for p in self.points], dtype=float)

    @property
    def y(self) -> np.ndarray:
        return np.array([p.y for p in self.points], dtype=float)

    @property
    def p(self) -> np.ndarray:
        return np.array([p.p for p in self.points], dtype=float)

    def peak(self) -> Optional[SweepPoint]:
        """The point with the largest |y|, or None for an empty curve."""
        if not self.points:
            return None
        return max(self.points, key=lambda point: abs(point.y))
