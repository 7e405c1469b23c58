# src/labsim_core/data_structures.py
"""
Defines the core data contracts exchanged between the scenario models, the
simulation engine and its consumers.

`Sample`, `SweepPoint` and `SweepRange` are immutable value objects. `ScenarioState`
is the single piece of mutable state in the system: it is owned by exactly one
scenario instance and passed explicitly into every model call.
"""
import logging
import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

ExtraValue = Union[float, int, str, bool]


@dataclass(frozen=True)
class Sample:
    """
    One simulation step's output.

    Attributes:
        V: Voltage-like primary quantity of the scenario, in volts (or the
           scenario's documented primary unit).
        I: Current-like primary quantity, in amperes.
        P: Power-like quantity, consistent with the scenario's V/I convention.
        extra: Scenario-specific derived values (slip, efficiency, balance flags...).
        index: Step counter, monotonic within one scenario instance. Models leave
               it at zero; the engine stamps it when the sample is accepted.
    """
    V: float
    I: float
    P: float
    extra: Mapping[str, ExtraValue] = field(default_factory=dict)
    index: int = 0

    def __post_init__(self):
        # Freeze the extra mapping so a Sample can be shared with any reader.
        if not isinstance(self.extra, MappingProxyType):
            object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def is_finite(self) -> bool:
        """True if V, I and P are all finite floats."""
        return all(math.isfinite(v) for v in (self.V, self.I, self.P))

    def with_index(self, index: int) -> "Sample":
        return replace(self, index=index)

    def get(self, name: str, default: Any = None) -> Any:
        """Looks up a primary field ('V', 'I', 'P', 'index') or an extra value."""
        if name in ("V", "I", "P", "index"):
            return getattr(self, name)
        return self.extra.get(name, default)

    def as_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {"index": self.index, "V": self.V, "I": self.I, "P": self.P}
        row.update(self.extra)
        return row


@dataclass
class ScenarioState:
    """
    Mutable per-instance state carried between steps of one scenario.

    Attributes:
        time_s: Accumulated simulated time in seconds. Advanced by the engine
                before each call of a time-dependent model.
        motor_speed: Rotor angular speed in rad/s (DC motor).
        phase_drift: Accumulated phase drift in degrees (alternator synchronization).
        rng: Seedable random generator used for measurement noise.
        memo: Scenario-private scratch space.
    """
    time_s: float = 0.0
    motor_speed: float = 0.0
    phase_drift: float = 0.0
    rng: np.random.Generator = field(default_factory=np.random.default_rng)
    memo: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def fresh(cls, seed: Optional[int] = None) -> "ScenarioState":
        return cls(rng=np.random.default_rng(seed))


@dataclass(frozen=True)
class SweepPoint:
    """One point of a sweep curve: the swept value, the response and its power."""
    x: float
    y: float
    p: float


@dataclass(frozen=True)
class SweepRange:
    """
    Describes a parameter sweep.

    Attributes:
        param: Name of the scenario parameter that is swept (e.g. 'freq', 'Vs').
        start: First value of the sweep, inclusive.
        stop: Last value of the sweep, inclusive.
        steps: Number of points; the curve never grows beyond it.
        y_field: Sample field plotted against the swept value ('I' by default,
                 or any primary/extra field name).
    """
    param: str
    start: float
    stop: float
    steps: int
    y_field: str = "I"

    def x_values(self) -> np.ndarray:
        """Inclusive, evenly spaced sweep values."""
        return np.linspace(self.start, self.stop, self.steps, dtype=float)
