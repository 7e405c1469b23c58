# src/labsim_core/parameters/exceptions.py
"""
Defines the custom, diagnosable exceptions for the parameter subsystem.

Two failure families live here:
- `ParameterSpecError` is raised at import time when a scenario declares a
  malformed parameter (inverted range, default outside the range). It is a
  programming error in a scenario module.
- `ExpressionError` is raised when a user-supplied waveform expression cannot be
  parsed, uses a forbidden construct, or cannot be compiled. The waveform model
  catches it and degrades to its offset, so it never escapes a simulation step.
"""
from dataclasses import dataclass

from ..errors import DiagnosableError, format_diagnostic_report


class ParameterError(DiagnosableError):
    """
    A concrete base class for all parameter-related errors.
    """
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Parameter Error",
            details=str(self),
            suggestion="Review the parameter declarations and values for correctness.",
            context={}
        )


@dataclass(frozen=True)
class ParameterSpecError(ParameterError):
    """Raised for an invalid parameter declaration inside a scenario module."""
    name: str
    details: str

    def __str__(self):
        return f"Invalid declaration for parameter '{self.name}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Parameter Declaration Error",
            details=self.details,
            suggestion="Fix the Number/Choice declaration so that lo <= default <= hi and the choice list contains the default.",
            context={'parameter': self.name}
        )


@dataclass(frozen=True)
class ExpressionError(ParameterError):
    """Raised when a custom waveform expression is rejected or fails to compile."""
    expression: str
    details: str

    def __str__(self):
        return f"Invalid waveform expression '{self.expression}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Waveform Expression Error",
            details=self.details,
            suggestion=(
                "Use only the variables t, amp, freq and phase, numeric literals, the constants pi and E,\n"
                "arithmetic operators and the functions sin, cos, tan, asin, acos, atan, atan2, sinh, cosh,\n"
                "tanh, exp, log, sqrt, Abs, sign, floor, Mod, Min and Max."
            ),
            context={'user_input': self.expression}
        )
