# src/labsim_core/simulation/sweep.py
"""
Parameter sweeps: progressive (one point per scheduler tick) and headless.
"""
import logging
import math
import numbers
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from ..data_structures import ScenarioState, SweepPoint, SweepRange
from ..errors import DiagnosableError, SimulationRunError
from ..scenarios.base import ModelFn, ScenarioModel, get_scenario
from .config import validate_sweep_range
from .results import SweepCurve

logger = logging.getLogger(__name__)


def evaluate_point(
    model: ModelFn,
    params: Mapping[str, Any],
    sweep_range: SweepRange,
    x: float,
    state: ScenarioState,
    elapsed_s: float,
) -> Optional[SweepPoint]:
    """Evaluates the model with the swept parameter set to `x`; None if non-finite."""
    overridden = dict(params)
    overridden[sweep_range.param] = float(x)
    sample = model(overridden, state, elapsed_s)
    y = sample.get(sweep_range.y_field)
    if isinstance(y, bool):
        y = float(y)
    if not isinstance(y, numbers.Real) or not (math.isfinite(y) and math.isfinite(sample.P)):
        logger.debug(f"Dropping sweep point {sweep_range.param}={x:.6g}: non-finite response.")
        return None
    return SweepPoint(x=float(x), y=float(y), p=float(sample.P))


class SweepGenerator:
    """
    A progressive sweep that evaluates exactly one point per call to `step`.

    Once every point has been evaluated the sweep is `done` and each further
    `step` re-evaluates the final point, returning it without growing the curve,
    so a time-dependent display keeps updating at the last setting.
    """

    def __init__(self, model: ModelFn, params: Mapping[str, Any], sweep_range: SweepRange):
        self._model = model
        self._params: Dict[str, Any] = dict(params or {})
        self.sweep_range = validate_sweep_range(sweep_range)
        self._x_values: np.ndarray = sweep_range.x_values()
        self._points: List[SweepPoint] = []
        self._cursor = 0
        logger.debug(f"SweepGenerator created: {sweep_range}")

    @property
    def done(self) -> bool:
        return self._cursor >= len(self._x_values)

    @property
    def progress(self) -> float:
        return self._cursor / len(self._x_values)

    def step(self, state: ScenarioState, elapsed_s: float = 0.0) -> Optional[SweepPoint]:
        if self.done:
            return evaluate_point(self._model, self._params, self.sweep_range, self._x_values[-1], state, elapsed_s)

        x = self._x_values[self._cursor]
        self._cursor += 1
        point = evaluate_point(self._model, self._params, self.sweep_range, x, state, elapsed_s)
        if point is not None:
            self._points.append(point)
        if self.done:
            logger.info(f"Sweep over '{self.sweep_range.param}' complete: {len(self._points)} point(s).")
        return point

    def restart(self) -> None:
        self._points = []
        self._cursor = 0

    def curve(self) -> SweepCurve:
        return SweepCurve(
            param=self.sweep_range.param,
            y_field=self.sweep_range.y_field,
            points=tuple(self._points),
        )


def run_sweep(
    model: Union[str, ModelFn],
    params: Optional[Mapping[str, Any]],
    sweep_range: SweepRange,
    *,
    state: Optional[ScenarioState] = None,
    time_step_s: float = 0.0,
) -> SweepCurve:
    """
    Evaluates a whole sweep at once (headless use, reports, tests).

    Args:
        model: A scenario id or a model function.
        params: Base parameters; the swept parameter is overridden per point.
        sweep_range: The sweep to run.
        state: State to run against. A fresh state is used if omitted.
        time_step_s: Simulated time advanced between points for time-dependent
                     scenarios. Static scenarios are always evaluated with time
                     held fixed.

    Raises:
        SimulationRunError: If the sweep range is invalid.
    """
    model_fn = get_scenario(model) if isinstance(model, str) else model
    time_dependent = isinstance(model_fn, ScenarioModel) and model_fn.time_dependent
    state = state if state is not None else ScenarioState.fresh()

    try:
        generator = SweepGenerator(model_fn, params or {}, sweep_range)
    except DiagnosableError as e:
        logger.error(f"Sweep rejected: {e}")
        raise SimulationRunError(e.get_diagnostic_report()) from e

    while not generator.done:
        elapsed = time_step_s if time_dependent else 0.0
        state.time_s += elapsed
        generator.step(state, elapsed)
    return generator.curve()


def run_sweep_family(
    model: Union[str, ModelFn],
    params: Optional[Mapping[str, Any]],
    sweep_range: SweepRange,
    family_param: str,
    family_values: Iterable[float],
) -> Dict[float, SweepCurve]:
    """
    Runs one sweep per value of a second parameter, e.g. a BJT output family
    (Vcc swept, one curve per base current).
    """
    curves: Dict[float, SweepCurve] = {}
    for value in family_values:
        base = dict(params or {})
        base[family_param] = value
        curves[float(value)] = run_sweep(model, base, sweep_range)
    return curves
