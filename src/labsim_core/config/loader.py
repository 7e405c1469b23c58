# src/labsim_core/config/loader.py
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import cerberus
import yaml

from ..constants import DEFAULT_HISTORY_CAPACITY, DEFAULT_MIN_INTERVAL_S
from ..data_structures import SweepRange
from ..errors import ConfigurationError, DiagnosableError
from ..parameters import Number
from ..scenarios import GENERIC_SCENARIO_ID, SCENARIO_REGISTRY
from ..simulation.config import parse_sweep_config
from .exceptions import ConfigParsingError, ConfigSchemaError

logger = logging.getLogger(__name__)

# Scenario ids are lowercase identifiers, e.g. 'rlc_resonance' or 'wien_freq'.
SCENARIO_ID_REGEX = r"^[a-z][a-z0-9_]*$"

MIN_INTERVAL_MS_RANGE = (8, 1000)


class EnhancedValidator(cerberus.Validator):
    """Cerberus validator with the lab configuration's naming rules."""
    def __init__(self, *args, **kwargs):
        super(EnhancedValidator, self).__init__(*args, **kwargs)
        self.rules['scenario_id_regex'] = {'schema': {'type': 'boolean'}}

    def _validate_scenario_id_regex(self, constraint: bool, field: str, value: Any):
        if not constraint:
            return
        if not isinstance(value, str) or not re.match(SCENARIO_ID_REGEX, value):
            self._error(
                field,
                f"Scenario id '{value}' is invalid. Ids are lowercase identifiers made of letters, "
                "digits and underscores, e.g. 'rlc_resonance'.",
            )


@dataclass(frozen=True)
class EngineConfig:
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    min_interval_ms: float = DEFAULT_MIN_INTERVAL_S * 1000.0
    seed: Optional[int] = None

    @property
    def min_interval_s(self) -> float:
        return self.min_interval_ms / 1000.0


@dataclass(frozen=True)
class LabConfig:
    """A validated lab configuration, ready for `LabSession.from_config`."""
    scenario: str = GENERIC_SCENARIO_ID
    parameters: Dict[str, Any] = field(default_factory=dict)
    engine: EngineConfig = field(default_factory=EngineConfig)
    sweep: Optional[SweepRange] = None
    source_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], source_path: Optional[Path] = None) -> "LabConfig":
        """
        Validates a raw configuration mapping and builds a `LabConfig`.

        Raises:
            ConfigSchemaError: If the mapping does not match the schema.
            SweepConfigError: If the sweep bounds cannot be interpreted.
        """
        return LabConfigLoader().build(raw, source_path)


class LabConfigLoader:
    """Loads and validates lab configuration YAML files."""
    _engine_schema = {
        "history_capacity": {"type": "integer", "min": 1, "default": DEFAULT_HISTORY_CAPACITY},
        "min_interval_ms": {
            "type": "number",
            "min": MIN_INTERVAL_MS_RANGE[0],
            "max": MIN_INTERVAL_MS_RANGE[1],
            "default": DEFAULT_MIN_INTERVAL_S * 1000.0,
        },
        "seed": {"type": "integer", "nullable": True, "default": None},
    }

    _schema = {
        "engine": {"type": "dict", "required": False, "default_setter": lambda document: {}, "schema": _engine_schema},
        "scenario": {"type": "string", "required": True, "empty": False, "scenario_id_regex": True},
        "parameters": {"type": "dict", "required": False, "default_setter": lambda document: {}, "keysrules": {"type": "string", "empty": False}},
        "sweep": {
            "type": "dict", "required": False, "nullable": True, "schema": {
                "param": {"type": "string", "required": True, "empty": False},
                "start": {"type": ["string", "number"], "required": True},
                "stop": {"type": ["string", "number"], "required": True},
                "steps": {"type": "integer", "required": True, "min": 1},
                "y_field": {"type": "string", "required": False, "empty": False, "default": "I"},
            },
        },
    }

    def __init__(self):
        self._validator = EnhancedValidator(self._schema)
        self._validator.allow_unknown = False

    def load(self, path: Union[str, Path]) -> LabConfig:
        source = Path(path).resolve()
        logger.info(f"Loading lab configuration from: {source}")
        return self.build(self._load_yaml(source), source)

    def build(self, raw: Mapping[str, Any], source_path: Optional[Path] = None) -> LabConfig:
        if not isinstance(raw, Mapping) or not self._validator.validate(dict(raw)):
            errors = self._validator.errors if isinstance(raw, Mapping) else {"<root>": ["must be a mapping"]}
            raise ConfigSchemaError(errors, source_path)
        document = self._validator.document

        scenario_id = document["scenario"]
        if scenario_id not in SCENARIO_REGISTRY:
            logger.warning(f"Unknown scenario '{scenario_id}' in configuration; the generic model will be used.")

        sweep = None
        if document.get("sweep"):
            sweep = parse_sweep_config(document["sweep"], self._sweep_unit(scenario_id, document["sweep"]["param"]), scenario_id)

        engine = EngineConfig(**document["engine"])
        config = LabConfig(
            scenario=scenario_id,
            parameters=dict(document["parameters"]),
            engine=engine,
            sweep=sweep,
            source_path=source_path,
        )
        logger.debug(f"Built lab configuration: {config}")
        return config

    @staticmethod
    def _sweep_unit(scenario_id: str, param: str) -> Optional[str]:
        """Unit in which the scenario expects the swept parameter, so '160 kHz' becomes 160000."""
        model = SCENARIO_REGISTRY.get(scenario_id)
        spec = model.parameter(param) if model is not None else None
        return spec.unit if isinstance(spec, Number) else None

    def _load_yaml(self, source: Path) -> Dict[str, Any]:
        if not source.is_file():
            raise ConfigParsingError(details=f"Configuration file not found at path: {source}", file_path=source)
        try:
            with source.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except PermissionError as e:
            raise ConfigParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
        except yaml.YAMLError as e:
            raise ConfigParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
        if content is None:
            raise ConfigParsingError(details="The YAML file is empty or contains no valid content.", file_path=source)
        if not isinstance(content, dict):
            raise ConfigParsingError(details="The root of the YAML file must be a dictionary (mapping).", file_path=source)
        return content


def load_lab_config(path: Union[str, Path]) -> LabConfig:
    """
    Loads a lab configuration file.

    Raises:
        ConfigurationError: With a formatted diagnostic report if the file cannot be
            read, does not match the schema, or carries an invalid sweep.
    """
    try:
        return LabConfigLoader().load(path)
    except DiagnosableError as e:
        logger.error(f"Failed to load lab configuration '{path}': {e}")
        raise ConfigurationError(e.get_diagnostic_report()) from e
