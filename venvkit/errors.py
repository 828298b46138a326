"""Exception types raised by venvkit.

All errors derive from RuntimeError so callers that only know about
RuntimeError keep working.
"""

from pathlib import Path
from typing import Optional, Union


class VenvkitError(RuntimeError):
    """Base class for venvkit errors."""


class ExecutableNotFoundError(VenvkitError):
    """An interpreter or tool executable could not be located."""

    def __init__(self, path: Union[str, Path], detail: Optional[str] = None):
        self.path = str(path)
        message = f"Executable not found: {self.path}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class VersionConstraintError(VenvkitError):
    """Installed interpreter is older than the required minimum."""

    def __init__(self, installed: str, required: str):
        self.installed = installed
        self.required = required
        super().__init__(
            f"Python {installed} is too old: version {required} or newer is required"
        )


class EnvironmentCreationError(VenvkitError):
    """Virtual environment could not be created."""

    def __init__(self, path: Union[str, Path], output: str = ""):
        self.path = str(path)
        self.output = output
        message = f"Failed to create virtual environment at {self.path}"
        if output:
            message += f": {output.strip()}"
        super().__init__(message)


class CommandError(VenvkitError):
    """External command exited with a non-zero status."""

    def __init__(self, result):
        self.result = result
        super().__init__(
            f"Command failed with code {result.returncode}: {' '.join(result.args)}\n"
            f"stdout: {result.stdout}\n"
            f"stderr: {result.stderr}"
        )


class InvalidSourceError(VenvkitError):
    """Local source directory is not an installable project."""

    def __init__(self, path: Union[str, Path], detail: str = "no setup.py, setup.cfg or pyproject.toml"):
        self.path = str(path)
        super().__init__(f"Invalid package source {self.path}: {detail}")


class PackageIndexError(VenvkitError):
    """Package index returned a response that could not be interpreted."""


class PackageNotFoundError(PackageIndexError):
    """Package does not exist on the package index."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Package not found on index: {name}")


class ConfigError(VenvkitError):
    """Configuration file is missing, malformed or invalid."""


class BootstrapAborted(VenvkitError):
    """User declined a confirmation the bootstrap needs."""
