# src/labsim_core/simulation/history.py
"""
Bounded, FIFO rolling history of accepted samples.
"""
import logging
import numbers
from collections import deque
from typing import Deque, List, Optional

import numpy as np

from ..constants import DEFAULT_HISTORY_CAPACITY
from ..data_structures import Sample

logger = logging.getLogger(__name__)


class HistoryBuffer:
    """
    A fixed-capacity window over the most recent samples.

    Pushing onto a full buffer evicts the oldest sample, so `len(buffer)` never
    exceeds `capacity` and the retained samples are always the most recent ones in
    insertion order. A buffer is never shared between scenario instances; switching
    scenario replaces it rather than clearing it.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}.")
        self._samples: Deque[Sample] = deque(maxlen=capacity)
        logger.debug(f"HistoryBuffer created with capacity {capacity}.")

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    def push(self, sample: Sample) -> None:
        self._samples.append(sample)

    def latest(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    def snapshot(self) -> List[Sample]:
        """A copy of the retained samples, oldest first."""
        return list(self._samples)

    def series(self, field: str) -> np.ndarray:
        """
        The values of one field across the retained samples as a float array.
        Samples lacking the field (or holding a non-numeric value) yield NaN.
        """
        values = []
        for sample in self._samples:
            value = sample.get(field)
            if isinstance(value, bool):
                value = float(value)
            values.append(value if isinstance(value, numbers.Real) else np.nan)
        return np.asarray(values, dtype=float)

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self):
        return iter(list(self._samples))
