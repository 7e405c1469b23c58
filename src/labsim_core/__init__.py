# src/labsim_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("LabSim Core package initialized.")

from .units import ureg, pint, Quantity, to_magnitude
from .data_structures import Sample, ScenarioState, SweepPoint, SweepRange
# Scenarios register themselves on import and must load before the session layer.
from .scenarios import SCENARIO_REGISTRY, ScenarioModel, get_scenario, list_scenarios, register_scenario, resolve
from .simulation import (
    HistoryBuffer,
    LabAccessor,
    LabSession,
    OperatingPoint,
    StepClock,
    SweepCurve,
    SweepGenerator,
    run_sweep,
)
from .config import LabConfig, load_lab_config
from .errors import LabSimError, ConfigurationError, SimulationRunError, ScenarioRegistrationError

__all__ = [
    # Units
    "ureg", "pint", "Quantity", "to_magnitude",
    # Data Structures
    "Sample", "ScenarioState", "SweepPoint", "SweepRange",
    # Scenarios
    "SCENARIO_REGISTRY", "ScenarioModel", "get_scenario", "list_scenarios", "register_scenario", "resolve",
    # Simulation
    "LabSession", "LabAccessor", "StepClock", "HistoryBuffer", "OperatingPoint",
    "SweepGenerator", "SweepCurve", "run_sweep",
    # Configuration
    "LabConfig", "load_lab_config",
    # Top-Level Errors (Actionable Diagnostics)
    "LabSimError", "ConfigurationError", "SimulationRunError", "ScenarioRegistrationError",
]
