from .exceptions import ConfigParsingError, ConfigSchemaError
from .loader import EngineConfig, LabConfig, LabConfigLoader, load_lab_config

__all__ = [
    # Exceptions
    "ConfigParsingError",
    "ConfigSchemaError",
    # Loading
    "EngineConfig",
    "LabConfig",
    "LabConfigLoader",
    "load_lab_config",
]
