# src/labsim_core/simulation/config.py
import logging
import math
from typing import Any, Dict, Optional

import pint

from ..data_structures import SweepRange
from ..units import to_magnitude
from .exceptions import SweepConfigError

logger = logging.getLogger(__name__)


def validate_sweep_range(sweep_range: SweepRange, scenario: str = "") -> SweepRange:
    """Checks that a sweep can be evaluated; returns it unchanged."""
    if not isinstance(sweep_range.param, str) or not sweep_range.param:
        raise SweepConfigError("Sweep parameter name must be a non-empty string.", sweep_range, scenario)
    if not (math.isfinite(sweep_range.start) and math.isfinite(sweep_range.stop)):
        raise SweepConfigError("Sweep start and stop must be finite.", sweep_range, scenario)
    if isinstance(sweep_range.steps, bool) or not isinstance(sweep_range.steps, int) or sweep_range.steps < 1:
        raise SweepConfigError(f"Sweep steps must be an integer >= 1, got {sweep_range.steps!r}.", sweep_range, scenario)
    return sweep_range


def parse_sweep_config(raw_sweep_config: Dict[str, Any], unit: Optional[str] = None, scenario: str = "") -> SweepRange:
    """
    Parses a raw sweep configuration dictionary into a validated `SweepRange`.

    `start` and `stop` may be numbers (already in `unit`) or quantity strings
    such as "10 kHz", which are converted to `unit`.
    """
    if not raw_sweep_config:
        raise SweepConfigError("Sweep configuration is missing or empty.", raw_sweep_config, scenario)
    try:
        param = raw_sweep_config['param']
        start = to_magnitude(raw_sweep_config['start'], unit)
        stop = to_magnitude(raw_sweep_config['stop'], unit)
        steps = raw_sweep_config['steps']
        y_field = raw_sweep_config.get('y_field', 'I')
    except KeyError as e:
        raise SweepConfigError(f"Missing required key {e}.", raw_sweep_config, scenario) from e
    except (ValueError, pint.DimensionalityError, pint.UndefinedUnitError) as e:
        raise SweepConfigError(f"Failed to parse sweep bounds: {e}", raw_sweep_config, scenario) from e

    sweep_range = SweepRange(param=param, start=start, stop=stop, steps=steps, y_field=y_field)
    logger.debug(f"Parsed sweep configuration: {sweep_range}")
    return validate_sweep_range(sweep_range, scenario)
