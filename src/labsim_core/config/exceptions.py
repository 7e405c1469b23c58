# src/labsim_core/config/exceptions.py
"""
Diagnosable exceptions for loading lab configuration files.

`ConfigParsingError` covers file-level and YAML syntax problems;
`ConfigSchemaError` covers documents that parse but do not match the Cerberus
schema. Both are wrapped into the user-facing `ConfigurationError` by
`load_lab_config`.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass(frozen=True)
class ConfigParsingError(DiagnosableError):
    """Raised when a configuration file is missing, unreadable or not valid YAML."""
    details: str
    file_path: Optional[Path] = None

    def __str__(self):
        return f"Configuration error in '{self.file_path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Configuration File Error",
            details=self.details,
            suggestion="Ensure the file exists, is readable, and contains a YAML mapping at its root.",
            context={'source_file': self.file_path}
        )


@dataclass(frozen=True)
class ConfigSchemaError(DiagnosableError):
    """Raised when a configuration document does not conform to the lab schema."""
    errors: Dict[str, Any]
    file_path: Optional[Path] = None

    def _error_lines(self):
        return [f"  - Field '{field}': {issues}" for field, issues in sorted(self.errors.items())]

    def __str__(self):
        return f"Configuration schema validation failed for '{self.file_path}':\n" + "\n".join(self._error_lines())

    def get_diagnostic_report(self) -> str:
        details = (
            "The configuration does not conform to the required schema.\n"
            f"See details for {len(self.errors)} issue(s) below:\n\n" + "\n".join(self._error_lines())
        )
        return format_diagnostic_report(
            error_type="Configuration Schema Error",
            details=details,
            suggestion=(
                "A lab configuration needs a 'scenario' id and may carry 'engine', 'parameters' and 'sweep'\n"
                "sections. Check for misspelled keys, out-of-range engine settings and non-integer 'steps'."
            ),
            context={'source_file': self.file_path}
        )
