# src/labsim_core/parameters/specs.py
"""
Declarative parameter specifications and the coercion rules applied to raw,
caller-supplied parameter maps before any scenario physics runs.

Coercion never raises: a missing, unparsable or non-finite value falls back to
the declared default and any numeric value is clamped into the declared range.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from ..units import to_magnitude
from .exceptions import ParameterSpecError

logger = logging.getLogger(__name__)


def clamp(value: float, lo: float, hi: float) -> float:
    return lo if value < lo else hi if value > hi else value


@dataclass(frozen=True)
class Number:
    """
    A numeric scenario parameter.

    Attributes:
        name: Key in the parameter map.
        default: Value used when the key is missing or unusable. None means the
                 scenario derives the value itself (e.g. the Wien bridge source
                 frequency defaults to the bridge's own balance frequency).
        lo, hi: Inclusive clamp range.
        unit: Unit in which the scenario expects the magnitude (e.g. 'mH'). Bare
              numbers are taken to be in this unit; quantity strings such as
              "0.01 H" are converted to it.
        description: Human-readable label for UIs and reports.
    """
    name: str
    default: Optional[float]
    lo: float = -math.inf
    hi: float = math.inf
    unit: Optional[str] = None
    description: str = ""

    def __post_init__(self):
        if not self.name:
            raise ParameterSpecError(name="<unnamed>", details="Parameter name must be a non-empty string.")
        if self.lo > self.hi:
            raise ParameterSpecError(name=self.name, details=f"Range is inverted: lo={self.lo} > hi={self.hi}.")
        if self.default is not None and not (self.lo <= self.default <= self.hi):
            raise ParameterSpecError(
                name=self.name,
                details=f"Default {self.default} lies outside the range [{self.lo}, {self.hi}]."
            )

    def coerce(self, raw: Any) -> Optional[float]:
        if raw is None:
            return self.default
        try:
            value = to_magnitude(raw, self.unit)
        except Exception as e:  # pint raises several unrelated types for bad strings
            logger.debug(f"Parameter '{self.name}': could not interpret {raw!r} ({e}); using default.")
            return self.default
        if not math.isfinite(value):
            logger.debug(f"Parameter '{self.name}': non-finite value {raw!r}; using default.")
            return self.default
        return clamp(value, self.lo, self.hi)


@dataclass(frozen=True)
class Choice:
    """A parameter restricted to a fixed set of string values."""
    name: str
    choices: Tuple[str, ...]
    default: str
    description: str = ""

    def __post_init__(self):
        if not self.choices:
            raise ParameterSpecError(name=self.name, details="Choice list must not be empty.")
        if self.default not in self.choices:
            raise ParameterSpecError(
                name=self.name,
                details=f"Default '{self.default}' is not one of {list(self.choices)}."
            )

    def coerce(self, raw: Any) -> str:
        if raw is None:
            return self.default
        text = str(raw).strip().lower()
        for choice in self.choices:
            if choice.lower() == text:
                return choice
        logger.debug(f"Parameter '{self.name}': '{raw}' is not one of {list(self.choices)}; using default.")
        return self.default


ParamSpec = Union[Number, Choice]


def validate_specs(specs: Sequence[ParamSpec]) -> None:
    """Rejects duplicate parameter names within one scenario declaration."""
    seen = set()
    for spec in specs:
        if spec.name in seen:
            raise ParameterSpecError(name=spec.name, details="Parameter is declared more than once.")
        seen.add(spec.name)


def coerce_parameters(raw: Optional[Mapping[str, Any]], specs: Iterable[ParamSpec]) -> Dict[str, Any]:
    """
    Returns a new parameter dict with every declared parameter coerced and clamped.

    Undeclared keys (lists of resistors, activities, appliances, ...) are passed
    through untouched for the scenario to read. The caller's mapping is never
    mutated.
    """
    resolved: Dict[str, Any] = dict(raw or {})
    for spec in specs:
        resolved[spec.name] = spec.coerce(resolved.get(spec.name))
    return resolved


def default_parameters(specs: Iterable[ParamSpec]) -> Dict[str, Any]:
    """The parameter map a freshly selected scenario starts from."""
    return {spec.name: spec.default for spec in specs if spec.default is not None}
