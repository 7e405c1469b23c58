import logging
logger = logging.getLogger(__name__)

# Import base first to define the registry, decorator and generic fallback
from .base import (
    BASE_COLUMNS,
    GENERIC_SCENARIO_ID,
    SCENARIO_REGISTRY,
    ModelFn,
    ScenarioModel,
    get_scenario,
    list_scenarios,
    register_scenario,
    resolve,
)
# Import concrete scenario modules to trigger registration
from . import bridges, circuits, devices, energy, instruments, machines, transformers

logger.info(f"Available scenarios: {sorted(SCENARIO_REGISTRY.keys())}")

__all__ = [
    # Registry
    "SCENARIO_REGISTRY",
    "register_scenario",
    "resolve",
    "get_scenario",
    "list_scenarios",
    # Contracts
    "ModelFn",
    "ScenarioModel",
    "BASE_COLUMNS",
    "GENERIC_SCENARIO_ID",
]
