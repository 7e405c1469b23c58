# --- src/labsim_core/constants.py ---
import logging

from scipy import constants as sc

logger = logging.getLogger(__name__)

# --- Physical Constants ---

#: Boltzmann constant in J/K.
BOLTZMANN_J_PER_K: float = sc.k

#: Elementary charge in C.
ELEMENTARY_CHARGE_C: float = sc.e

#: Default junction temperature for device models, in kelvin.
ROOM_TEMPERATURE_K: float = 300.0

# --- Numerical Guards ---

#: Smallest magnitude allowed in any denominator built from user input.
MIN_DENOMINATOR: float = 1e-12

#: The Shockley exponent is clamped into [-EXP_CLAMP, EXP_CLAMP] to avoid overflow.
EXP_CLAMP: float = 60.0

# --- Engine Defaults ---

#: Rolling history capacity shared by every chart.
DEFAULT_HISTORY_CAPACITY: int = 720

#: Minimum wall-clock interval between two simulation steps, in seconds.
DEFAULT_MIN_INTERVAL_S: float = 0.06

#: Operating-point solver defaults.
SOLVER_MAX_ITERATIONS: int = 60
SOLVER_TOLERANCE: float = 1e-9

logger.debug("Defined core constants: BOLTZMANN_J_PER_K, ELEMENTARY_CHARGE_C, DEFAULT_HISTORY_CAPACITY")
