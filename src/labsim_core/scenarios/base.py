# src/labsim_core/scenarios/base.py
"""
The scenario model contract, the global scenario registry and its decorator.

A scenario model is a named function

    model(params, state, elapsed_s) -> Sample

that owns the physics of one lab experiment. Scenario modules declare their
physics with `@register_scenario`, which records the parameter declarations,
the CSV column contract and whether the model depends on simulated time. The
registered `ScenarioModel` coerces and clamps the raw parameter map before the
physics function ever sees it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..data_structures import Sample, ScenarioState, SweepRange
from ..errors import ScenarioRegistrationError
from ..parameters import Number, ParamSpec, coerce_parameters, default_parameters, validate_specs
from ..parameters.exceptions import ParameterSpecError

logger = logging.getLogger(__name__)

ModelFn = Callable[[Mapping[str, Any], ScenarioState, float], Sample]
PhysicsFn = Callable[[Dict[str, Any], ScenarioState, float], Sample]

BASE_COLUMNS: Tuple[str, ...] = ("index", "V", "I", "P")


@dataclass(frozen=True)
class ScenarioModel:
    """
    A registered scenario: its physics plus everything the engine and the
    accessor need to know about it.

    Attributes:
        scenario_id: Stable identifier used by hosts and configuration files.
        label: Human-readable title.
        group: Catalogue grouping (Circuits, Measurements, Motors, ...).
        physics: The physics function; receives coerced parameters.
        parameters: Declared numeric and choice parameters.
        columns: Extra-field names exported after index, V, I, P.
        time_dependent: True if the model reads `state.time_s` or integrates
                        over `elapsed_s`. Static models are evaluated with time
                        held fixed during sweeps.
        default_sweep: The sweep a host offers by default, if any.
    """
    scenario_id: str
    label: str
    group: str
    physics: PhysicsFn = field(repr=False)
    parameters: Tuple[ParamSpec, ...] = ()
    columns: Tuple[str, ...] = ()
    time_dependent: bool = False
    default_sweep: Optional[SweepRange] = None

    def __call__(self, params: Optional[Mapping[str, Any]], state: ScenarioState, elapsed_s: float) -> Sample:
        return self.physics(coerce_parameters(params, self.parameters), state, elapsed_s)

    @property
    def csv_columns(self) -> List[str]:
        return list(BASE_COLUMNS) + list(self.columns)

    def defaults(self) -> Dict[str, Any]:
        return default_parameters(self.parameters)

    def parameter(self, name: str) -> Optional[ParamSpec]:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None


# --- Global Scenario Registry and Decorator ---

SCENARIO_REGISTRY: Dict[str, ScenarioModel] = {}


def register_scenario(
    scenario_id: str,
    *,
    label: str,
    group: str,
    parameters: Sequence[ParamSpec] = (),
    columns: Sequence[str] = (),
    time_dependent: bool = False,
    default_sweep: Optional[SweepRange] = None,
):
    """
    A function decorator that registers a physics function in the global scenario
    registry, making it resolvable by id.
    """
    def decorator(fn: PhysicsFn) -> PhysicsFn:
        if not isinstance(scenario_id, str) or not scenario_id.strip():
            raise ScenarioRegistrationError(
                f"Scenario function '{fn.__name__}' must be registered under a non-empty string id."
            )
        if not callable(fn):
            raise ScenarioRegistrationError(f"Scenario '{scenario_id}' physics must be callable.")
        try:
            validate_specs(parameters)
        except ParameterSpecError as e:
            raise ScenarioRegistrationError(
                f"Scenario '{scenario_id}' violates its parameter contract: {e}"
            ) from e
        if not all(isinstance(c, str) and c for c in columns):
            raise ScenarioRegistrationError(
                f"Scenario '{scenario_id}' columns must be non-empty strings, but got: {list(columns)}."
            )
        clashes = set(columns) & set(BASE_COLUMNS)
        if clashes:
            raise ScenarioRegistrationError(
                f"Scenario '{scenario_id}' columns {sorted(clashes)} clash with the base columns {list(BASE_COLUMNS)}."
            )

        if scenario_id in SCENARIO_REGISTRY:
            logger.warning(f"Scenario '{scenario_id}' is being redefined/overwritten.")
        SCENARIO_REGISTRY[scenario_id] = ScenarioModel(
            scenario_id=scenario_id,
            label=label,
            group=group,
            physics=fn,
            parameters=tuple(parameters),
            columns=tuple(columns),
            time_dependent=time_dependent,
            default_sweep=default_sweep,
        )
        logger.info(f"Registered scenario '{scenario_id}' -> {fn.__name__}")
        return fn
    return decorator


# --- Generic Fallback ---

GENERIC_SCENARIO_ID = "generic"
_FALLBACK_LIMIT = 1e6


@register_scenario(
    GENERIC_SCENARIO_ID,
    label="Generic simulation",
    group="General",
    parameters=[
        Number("Vs", 10.0, -_FALLBACK_LIMIT, _FALLBACK_LIMIT, "V", "Source voltage"),
        Number("load", 0.1, -_FALLBACK_LIMIT, _FALLBACK_LIMIT, "A", "Load current"),
    ],
    columns=["note"],
)
def generic_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    v = params["Vs"]
    i = params["load"]
    return Sample(V=v, I=i, P=v * i, extra={"note": "Generic simulation model"})


def get_scenario(scenario_id: str) -> ScenarioModel:
    """
    Returns the registered scenario, or the generic fallback for an unknown id.
    Never raises.
    """
    model = SCENARIO_REGISTRY.get(scenario_id)
    if model is None:
        logger.warning(f"Unknown scenario '{scenario_id}'; using the generic fallback model.")
        return SCENARIO_REGISTRY[GENERIC_SCENARIO_ID]
    return model


def resolve(scenario_id: str) -> ModelFn:
    """The model function for `scenario_id`, falling back to the generic model."""
    return get_scenario(scenario_id)


def list_scenarios(group: Optional[str] = None) -> List[ScenarioModel]:
    """All registered scenarios, optionally restricted to one group, ordered by id."""
    models = sorted(SCENARIO_REGISTRY.values(), key=lambda m: m.scenario_id)
    if group is not None:
        models = [m for m in models if m.group == group]
    return models
