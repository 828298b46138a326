"""Configuration data models.

Dataclasses for the ``venvkit.yaml`` file.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..installer.venv_manager import BootstrapOptions
from ..transport.retry_policy import RetryPolicy

DEFAULT_CONFIG_FILE = "venvkit.yaml"


@dataclass
class EnvironmentSection:
    """The environment to bootstrap."""
    path: str
    min_version: Optional[str] = None
    requirements: list[str] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)
    reinstall: bool = False
    upgrade_pip: bool = False
    use_virtualenv: bool = False

    def __post_init__(self):
        if self.min_version is not None:
            self.min_version = str(self.min_version)


@dataclass
class IndexSection:
    """Package index settings.

    api_url is the JSON API used for version lookups; pip_url is handed to
    pip as --index-url.
    """
    api_url: Optional[str] = None
    pip_url: Optional[str] = None
    timeout: float = 10.0
    retries: int = 2

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.retries)


@dataclass
class ToolsSection:
    """Explicit paths of the base runtime's tools."""
    python: Optional[str] = None
    virtualenv: Optional[str] = None

    def named(self) -> dict[str, str]:
        return {k: v for k, v in self.__dict__.items() if v}


@dataclass
class Config:
    """A complete venvkit configuration."""
    environment: EnvironmentSection
    index: IndexSection = field(default_factory=IndexSection)
    tools: ToolsSection = field(default_factory=ToolsSection)
    base_dir: Path = field(default_factory=Path.cwd)
    source: str = "<inline>"
    unknown_keys: list[str] = field(default_factory=list)

    def resolve_path(self, value: str) -> Path:
        """Resolve a config-relative path."""
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.base_dir / path

    def resolve_tool(self, value: Optional[str]) -> Optional[Union[str, Path]]:
        """Resolve a tool path against the config file, keeping bare names for PATH."""
        if value and ("/" in value or "\\" in value):
            return self.resolve_path(value)
        return value

    def to_bootstrap_options(self) -> BootstrapOptions:
        """Build bootstrapper options, resolving paths against the config file."""
        env = self.environment
        return BootstrapOptions(
            venv_path=self.resolve_path(env.path),
            python=self.resolve_tool(self.tools.python),
            virtualenv=self.resolve_tool(self.tools.virtualenv),
            min_version=env.min_version,
            requirements=[self.resolve_path(r) for r in env.requirements],
            packages=list(env.packages),
            reinstall=env.reinstall,
            upgrade_pip=env.upgrade_pip,
            use_virtualenv=env.use_virtualenv,
            index_url=self.index.pip_url,
        )


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of config validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
