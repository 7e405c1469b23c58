# src/labsim_core/simulation/__init__.py
import logging
logger = logging.getLogger(__name__)

from .exceptions import SweepConfigError
# The solver has no engine dependencies; scenario modules import it directly.
from .solver import (
    OperatingPoint,
    bisect_root,
    default_widened_bracket,
    solve_bjt_loop,
    solve_diode_loop,
    solve_mosfet_loop,
    thermal_voltage,
)
from .clock import StepClock
from .history import HistoryBuffer
from .results import SweepCurve
from .config import parse_sweep_config, validate_sweep_range
from .sweep import SweepGenerator, evaluate_point, run_sweep, run_sweep_family
from .accessor import LabAccessor
from .engine import LabSession, ScenarioInstance

__all__ = [
    # Session
    "LabSession",
    "ScenarioInstance",
    "LabAccessor",
    # Building blocks
    "StepClock",
    "HistoryBuffer",
    # Solver
    "OperatingPoint",
    "bisect_root",
    "default_widened_bracket",
    "thermal_voltage",
    "solve_diode_loop",
    "solve_bjt_loop",
    "solve_mosfet_loop",
    # Sweeps
    "SweepGenerator",
    "SweepCurve",
    "evaluate_point",
    "run_sweep",
    "run_sweep_family",
    "parse_sweep_config",
    "validate_sweep_range",
    "SweepConfigError",
]
