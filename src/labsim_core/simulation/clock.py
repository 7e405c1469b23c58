# src/labsim_core/simulation/clock.py
"""
The wall-clock gate that decides when the next simulation step runs.
"""
import logging
import time
from typing import Callable, Optional

from ..constants import DEFAULT_MIN_INTERVAL_S

logger = logging.getLogger(__name__)

TimeSource = Callable[[], float]


class StepClock:
    """
    Converts irregular host callbacks into simulation steps with a bounded rate.

    `advance` is called as often as the host likes (every animation frame, every
    timer tick). It returns the elapsed seconds since the last accepted step once
    that interval reaches `min_interval_s`, and `None` otherwise. Deltas that do not
    fire are carried forward, not discarded.

    While paused, every `advance` call rebases the reference time and returns
    `None`, so a long pause never turns into one huge catch-up step. The first step
    after `resume` is additionally capped at `min_interval_s`.
    """

    def __init__(self, min_interval_s: float = DEFAULT_MIN_INTERVAL_S, time_source: TimeSource = time.monotonic):
        if min_interval_s <= 0:
            raise ValueError(f"Minimum step interval must be positive, got {min_interval_s}.")
        self.min_interval_s = float(min_interval_s)
        self._time_source = time_source
        self._last: Optional[float] = None
        self._paused = False
        self._cap_next = False

    @property
    def paused(self) -> bool:
        return self._paused

    def advance(self, now: Optional[float] = None) -> Optional[float]:
        """Returns the elapsed seconds to simulate, or None if no step is due."""
        if now is None:
            now = self._time_source()

        if self._last is None or self._paused:
            self._last = now
            return None

        elapsed = now - self._last
        if elapsed < 0:
            # The host's clock went backwards; start a new reference.
            logger.debug(f"Clock moved backwards by {-elapsed:.4f} s; rebasing.")
            self._last = now
            return None
        if elapsed < self.min_interval_s:
            return None

        self._last = now
        if self._cap_next:
            self._cap_next = False
            elapsed = min(elapsed, self.min_interval_s)
        return elapsed

    def pause(self) -> None:
        self._paused = True

    def resume(self, now: Optional[float] = None) -> None:
        if not self._paused:
            return
        self._paused = False
        self._cap_next = True
        if now is None and self._last is None:
            return
        self._last = now if now is not None else self._time_source()

    def reset(self) -> None:
        """Forgets the reference time; the next `advance` only re-establishes it."""
        self._last = None
        self._cap_next = False
