# src/labsim_core/simulation/engine.py
"""
The lab session: the scheduler that owns one active scenario instance and
drives it from a `StepClock`.

A `ScenarioInstance` bundles everything that belongs to one run of one scenario
(its parameters, its mutable state, its rolling history and an optional sweep).
Switching or resetting a scenario builds a complete new instance and swaps it in
with a single assignment, so no reader can ever observe the new scenario's state
mixed with the old scenario's history or sweep.

Everything here is single-threaded and cooperative: a host calls `tick()` from
its frame or timer callback and reads results through `LabAccessor`.
"""
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

from ..constants import DEFAULT_HISTORY_CAPACITY, DEFAULT_MIN_INTERVAL_S
from ..data_structures import Sample, ScenarioState, SweepPoint, SweepRange
from ..errors import DiagnosableError, SimulationRunError
from ..scenarios.base import GENERIC_SCENARIO_ID, ScenarioModel, get_scenario
from .accessor import LabAccessor
from .clock import StepClock
from .exceptions import SweepConfigError
from .history import HistoryBuffer
from .sweep import SweepGenerator

if TYPE_CHECKING:
    from ..config import LabConfig

logger = logging.getLogger(__name__)

StepResult = Union[Sample, SweepPoint, None]


@dataclass
class ScenarioInstance:
    """All per-run state of one scenario. Never shared, never partially reset."""
    scenario: ScenarioModel
    params: Dict[str, Any]
    state: ScenarioState
    history: HistoryBuffer
    sweep: Optional[SweepGenerator] = None
    next_index: int = 0
    dropped_steps: int = field(default=0)

    @property
    def mode(self) -> str:
        return "sweep" if self.sweep is not None else "continuous"


class LabSession:
    """
    One simulated lab bench.

    Multiple sessions may coexist; they share nothing but the read-only scenario
    registry.
    """

    def __init__(
        self,
        scenario_id: str = GENERIC_SCENARIO_ID,
        params: Optional[Mapping[str, Any]] = None,
        *,
        history_capacity: int = DEFAULT_HISTORY_CAPACITY,
        min_interval_s: float = DEFAULT_MIN_INTERVAL_S,
        seed: Optional[int] = None,
        clock: Optional[StepClock] = None,
    ):
        self.clock = clock if clock is not None else StepClock(min_interval_s)
        self.history_capacity = history_capacity
        self.seed = seed
        self._instance = self._build_instance(scenario_id, params)
        logger.info(f"LabSession started on scenario '{self.scenario_id}'.")

    @classmethod
    def from_config(cls, config: "LabConfig") -> "LabSession":
        """Creates a session from a loaded lab configuration, starting its sweep if one is given."""
        session = cls(
            config.scenario,
            config.parameters,
            history_capacity=config.engine.history_capacity,
            min_interval_s=config.engine.min_interval_ms / 1000.0,
            seed=config.engine.seed,
        )
        if config.sweep is not None:
            session.start_sweep(config.sweep)
        return session

    # --- Introspection ---

    @property
    def instance(self) -> ScenarioInstance:
        return self._instance

    @property
    def scenario(self) -> ScenarioModel:
        return self._instance.scenario

    @property
    def scenario_id(self) -> str:
        return self._instance.scenario.scenario_id

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self._instance.params)

    @property
    def mode(self) -> str:
        return self._instance.mode

    @property
    def paused(self) -> bool:
        return self.clock.paused

    def accessor(self) -> LabAccessor:
        return LabAccessor(self)

    # --- Scenario Lifecycle ---

    def _build_instance(self, scenario_id: str, params: Optional[Mapping[str, Any]]) -> ScenarioInstance:
        scenario = get_scenario(scenario_id)
        merged = scenario.defaults()
        merged.update(params or {})
        return ScenarioInstance(
            scenario=scenario,
            params=merged,
            state=ScenarioState.fresh(self.seed),
            history=HistoryBuffer(self.history_capacity),
        )

    def select(self, scenario_id: str, params: Optional[Mapping[str, Any]] = None) -> ScenarioInstance:
        """
        Switches to another scenario. State, history and any running sweep are
        replaced together; the new scenario starts in continuous mode.
        """
        instance = self._build_instance(scenario_id, params)
        self._instance = instance
        self.clock.reset()
        logger.info(f"Switched to scenario '{instance.scenario.scenario_id}'.")
        return instance

    def reset(self) -> ScenarioInstance:
        """Restarts the current scenario from a fresh state with the current parameters."""
        current = self._instance
        instance = self._build_instance(current.scenario.scenario_id, current.params)
        self._instance = instance
        self.clock.reset()
        logger.info(f"Reset scenario '{instance.scenario.scenario_id}'.")
        return instance

    def set_params(self, params: Mapping[str, Any]) -> None:
        """Replaces the parameter map (declared defaults fill any gaps)."""
        merged = self._instance.scenario.defaults()
        merged.update(params or {})
        self._apply_params(merged)

    def update_params(self, **changes: Any) -> None:
        """Merges the given parameter changes into the current map."""
        merged = dict(self._instance.params)
        merged.update(changes)
        self._apply_params(merged)

    def _apply_params(self, params: Dict[str, Any]) -> None:
        instance = self._instance
        instance.params = params
        if instance.sweep is not None:
            # A running sweep restarts from its first point with the new base parameters.
            instance.sweep = SweepGenerator(instance.scenario, params, instance.sweep.sweep_range)

    # --- Sweep Control ---

    def start_sweep(self, sweep_range: Optional[SweepRange] = None) -> SweepGenerator:
        """
        Puts the session into sweep mode. Without an explicit range, the
        scenario's default sweep is used.

        Raises:
            SimulationRunError: If no range is available or the range is invalid.
        """
        instance = self._instance
        sweep_range = sweep_range if sweep_range is not None else instance.scenario.default_sweep
        try:
            if sweep_range is None:
                raise SweepConfigError(
                    "This scenario has no default sweep; pass an explicit sweep range.",
                    scenario=instance.scenario.scenario_id,
                )
            generator = SweepGenerator(instance.scenario, instance.params, sweep_range)
        except DiagnosableError as e:
            logger.error(f"Could not start sweep: {e}")
            raise SimulationRunError(e.get_diagnostic_report()) from e
        instance.sweep = generator
        logger.info(f"Sweep started on '{instance.scenario.scenario_id}': {sweep_range}")
        return generator

    def stop_sweep(self) -> None:
        """Returns to continuous mode. The sweep curve is discarded."""
        self._instance.sweep = None

    # --- Stepping ---

    def pause(self) -> None:
        self.clock.pause()

    def resume(self, now: Optional[float] = None) -> None:
        self.clock.resume(now)

    def tick(self, now: Optional[float] = None) -> StepResult:
        """
        One scheduler pass: asks the clock whether a step is due and, if so,
        runs it. Returns the new sample (continuous mode), the new sweep point
        (sweep mode), or None if nothing was produced.
        """
        elapsed = self.clock.advance(now)
        if elapsed is None:
            return None
        return self.step(elapsed)

    def step(self, elapsed_s: float) -> StepResult:
        """Runs exactly one simulation step of `elapsed_s` seconds, bypassing the clock."""
        instance = self._instance
        scenario = instance.scenario
        elapsed = elapsed_s if scenario.time_dependent else 0.0
        instance.state.time_s += elapsed

        if instance.sweep is not None:
            return instance.sweep.step(instance.state, elapsed)

        sample = scenario(instance.params, instance.state, elapsed_s)
        if not sample.is_finite():
            instance.dropped_steps += 1
            if instance.dropped_steps == 1:
                logger.warning(f"Scenario '{scenario.scenario_id}' produced a non-finite sample; dropping it.")
            else:
                logger.debug(f"Dropped non-finite sample #{instance.dropped_steps} from '{scenario.scenario_id}'.")
            return None

        sample = sample.with_index(instance.next_index)
        instance.next_index += 1
        instance.history.push(sample)
        return sample
