"""Config module - YAML configuration parsing."""

from .schema import (
    DEFAULT_CONFIG_FILE,
    Config,
    EnvironmentSection,
    IndexSection,
    ToolsSection,
    ValidationError,
    ValidationResult,
)
from .parser import parse_config, parse_config_data
from .validator import validate_config

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "Config",
    "EnvironmentSection",
    "IndexSection",
    "ToolsSection",
    "ValidationError",
    "ValidationResult",
    "parse_config",
    "parse_config_data",
    "validate_config",
]
