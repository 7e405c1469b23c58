# src/labsim_core/units.py
import logging
import numbers
from typing import Optional, Union

import pint

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.info("Pint Unit Registry initialized.")


def to_magnitude(value: Union[str, float, int, Quantity], unit: Optional[str] = None) -> float:
    """
    Converts a user-supplied value into a plain float expressed in `unit`.

    Accepts real numbers (numpy scalars included), numeric strings,
    `pint.Quantity` objects and quantity strings such as "10 mH" or "1 kHz".
    Bare numbers are taken to already be expressed in `unit`.
    When `unit` is None the value must be dimensionless.

    Raises:
        ValueError: If the value cannot be interpreted as a finite-or-infinite float.
        pint.DimensionalityError: If the value carries units incompatible with `unit`.
        pint.UndefinedUnitError: If a quantity string names an unknown unit.
    """
    if isinstance(value, bool):
        raise ValueError(f"Boolean '{value}' is not a numeric parameter value.")
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty string is not a numeric parameter value.")
        try:
            return float(text)
        except ValueError:
            pass
        value = Quantity(text)
    if isinstance(value, Quantity):
        if unit is None:
            return float(value.to("dimensionless").magnitude)
        return float(value.to(unit).magnitude)
    raise ValueError(f"Unsupported parameter value of type '{type(value).__name__}'.")
