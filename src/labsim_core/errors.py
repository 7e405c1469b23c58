# src/labsim_core/errors.py
import logging
from abc import abstractmethod
from typing import Any, Dict, Protocol
from typing import runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class LabSimError(Exception):
    """Base class for all custom, user-facing errors in LabSim Core."""
    pass

class ConfigurationError(LabSimError):
    """
    Raised when a lab configuration cannot be loaded, from reading the YAML file to
    validating its sweep and engine settings. The message is a pre-formatted,
    user-friendly diagnostic report.
    """
    pass

class SimulationRunError(LabSimError):
    """
    Raised when a headless sweep cannot be run, e.g. because its range is invalid.
    The message is a pre-formatted, user-friendly diagnostic report.
    """
    pass

class ScenarioRegistrationError(LabSimError, TypeError):
    """
    Raised at import time when a scenario model is declared with an invalid contract
    (empty id, duplicate parameter names, malformed column list).
    """
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """
    Anything that can describe itself as a LabSim diagnostic report.
    """
    def get_diagnostic_report(self) -> str:
        """Returns the full report text shown to the user."""
        ...

class DiagnosableError(Exception, Diagnosable):
    """
    Base for internal errors that know how to report themselves.

    It inherits from `Exception` so it can be used in `except` clauses, and declares
    `get_diagnostic_report` abstract so every subclass must say how it is reported.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        """
        Builds the report, usually via `format_diagnostic_report`.
        Every concrete error defines its own.
        """
        raise NotImplementedError


# --- Stateless Formatting Utility ---

def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    Renders a diagnostic report block so every error raised by LabSim Core reads
    the same way.

    Args:
        error_type: The high-level category of the error (e.g., "Sweep Configuration Error").
        details: What went wrong; may span several lines.
        suggestion: How to fix it. Omitted from the report when empty.
        context: A dictionary of contextual information (scenario id, file path, user input, ...).

    Returns:
        The report text.
    """
    lines = [
        "\n",
        "============== LabSim Core: Actionable Diagnostic Report ==============",
        f"Error Type:     {error_type}",
    ]
    if scenario := context.get('scenario'):
        lines.append(f"Scenario:       {scenario}")
    if parameter := context.get('parameter'):
        lines.append(f"Parameter:      {parameter}")
    if source_file := context.get('source_file'):
        lines.append(f"Source File:    {source_file}")
    if user_input := context.get('user_input'):
        lines.append(f"User Input:     '{user_input}'")

    lines.append("\nDetails:")
    for line in details.splitlines():
        lines.append(f"  {line}")

    if suggestion:
        lines.append("\nSuggestion:")
        for line in suggestion.splitlines():
            lines.append(f"  {line}")

    lines.append("=======================================================================")
    return "\n".join(lines)
