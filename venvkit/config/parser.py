"""YAML config parser.

Parses ``venvkit.yaml`` files into Config dataclass objects.

Example::

    environment:
      path: .venv
      min_version: "3.9"
      requirements: [requirements.txt]
      packages: [black]
    index:
      pip_url: https://pypi.org/simple
    tools:
      python: /usr/bin/python3.12
"""

from dataclasses import fields
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..errors import ConfigError
from .schema import (
    DEFAULT_CONFIG_FILE,
    Config,
    EnvironmentSection,
    IndexSection,
    ToolsSection,
)

TOP_LEVEL_KEYS = ("environment", "index", "tools")


def parse_config(file_path: Optional[Union[str, Path]] = None) -> Config:
    """Parse a YAML config file into a Config object.

    Args:
        file_path: Path to the config file. Defaults to venvkit.yaml in the
            current directory.

    Returns:
        Parsed Config; relative paths in it resolve against the file's
        directory.

    Raises:
        ConfigError: If the file is missing, malformed or lacks required fields.
    """
    file_path = Path(file_path or DEFAULT_CONFIG_FILE)

    if not file_path.is_file():
        raise ConfigError(f"Config file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ConfigError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed YAML in {file_path}: {e}") from e

    if data is None:
        raise ConfigError(f"Empty config file: {file_path}")

    return parse_config_data(
        data,
        source=str(file_path),
        base_dir=file_path.resolve().parent,
    )


def parse_config_data(
    data: Any,
    source: str = "<inline>",
    base_dir: Optional[Path] = None,
) -> Config:
    """Parse a config from an already loaded mapping.

    Raises:
        ConfigError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a YAML mapping, got {type(data).__name__}")

    unknown = [str(k) for k in data if k not in TOP_LEVEL_KEYS]

    if "environment" not in data:
        raise ConfigError(f"Missing required field 'environment' in {source}")

    env_data = _section(data, "environment", source)
    if "path" not in env_data:
        raise ConfigError(f"Missing required field 'path' in environment ({source})")
    # Unquoted 3.10 loads as the float 3.1
    if isinstance(env_data.get("min_version"), float):
        raise ConfigError(
            f"'environment.min_version' must be a quoted string (\"3.10\", not 3.10) in {source}"
        )
    for list_field in ("requirements", "packages"):
        value = env_data.get(list_field)
        if isinstance(value, str):
            env_data[list_field] = [value]
        elif value is not None and not isinstance(value, list):
            raise ConfigError(f"'environment.{list_field}' must be a list in {source}")

    environment, extra = _build(EnvironmentSection, env_data, "environment", source)
    unknown += extra

    index, extra = _build(IndexSection, _section(data, "index", source), "index", source)
    unknown += extra

    tools, extra = _build(ToolsSection, _section(data, "tools", source), "tools", source)
    unknown += extra

    config = Config(
        environment=environment,
        index=index,
        tools=tools,
        source=source,
        unknown_keys=unknown,
    )
    if base_dir is not None:
        config.base_dir = Path(base_dir)
    return config


def _section(data: dict, name: str, source: str) -> dict:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping in {source}")
    return dict(value)


def _build(cls, data: dict, context: str, source: str):
    """Instantiate a section dataclass, returning it and the ignored keys."""
    known = {f.name for f in fields(cls)}
    try:
        section = cls(**{k: v for k, v in data.items() if k in known})
    except TypeError as e:
        raise ConfigError(f"Invalid '{context}' section in {source}: {e}") from e
    ignored = [f"{context}.{k}" for k in data if k not in known]
    return section, ignored
