# src/labsim_core/simulation/exceptions.py
"""
Defines custom, diagnosable exceptions specific to the simulation package.

Nothing in the stepping path raises: invalid parameters are clamped, the solver
returns a flagged approximation and unknown scenarios fall back to the generic
model. The only simulation-side failure is a malformed sweep description, which
is rejected before any point is evaluated.
"""
from dataclasses import dataclass
from typing import Any

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class SweepConfigError(DiagnosableError):
    """Raised when a sweep range or raw sweep configuration is invalid."""
    details: str
    user_input: Any = None
    scenario: str = ""

    def __str__(self):
        return f"Invalid sweep configuration: {self.details}"

    def get_diagnostic_report(self) -> str:
        """Generates the diagnostic report for an invalid sweep."""
        return format_diagnostic_report(
            error_type="Sweep Configuration Error",
            details=self.details,
            suggestion=(
                "A sweep needs a parameter name, finite 'start' and 'stop' values (optionally with units,\n"
                "e.g. '10 kHz') and an integer 'steps' >= 1."
            ),
            context={
                'scenario': self.scenario,
                'user_input': str(self.user_input) if self.user_input is not None else None,
            }
        )
