"""Executable resolution for interpreters and packaging tools.

Turns a user-supplied path (an environment directory, an executable file or
a bare command name) into the executable that should actually be invoked.
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from ..errors import ExecutableNotFoundError
from ..logging import get_logger

logger = get_logger(__name__)

PYTHON_ENV_VAR = "VENVKIT_PYTHON"

# Names tried on PATH when no interpreter is given
if os.name == "nt":  # Windows
    DEFAULT_PYTHON_NAMES = ("python", "python3")
else:  # Unix/macOS
    DEFAULT_PYTHON_NAMES = ("python3", "python")

AskPath = Callable[[str], Optional[str]]


def scripts_dir(root: Union[str, Path]) -> Path:
    """Directory holding an environment's executables."""
    if os.name == "nt":  # Windows
        return Path(root) / "Scripts"
    return Path(root) / "bin"


def _exe_name(name: str) -> str:
    return f"{name}.exe" if os.name == "nt" else name


def venv_python(root: Union[str, Path]) -> Path:
    """Conventional interpreter path inside an environment root."""
    return scripts_dir(root) / _exe_name("python")


def is_executable(path: Union[str, Path]) -> bool:
    """Check for an existing regular file with execute permission."""
    path = Path(path)
    return path.is_file() and os.access(path, os.X_OK)


def resolve_executable(path: Union[str, Path]) -> Path:
    """Resolve a directory, file or command name to an interpreter executable.

    Args:
        path: Environment root directory, path to an executable, or a bare
            command name to look up on PATH.

    Returns:
        Path of the executable to invoke.

    Raises:
        ExecutableNotFoundError: If nothing executable can be found.
    """
    candidate = Path(path).expanduser()

    if candidate.is_dir():
        python = venv_python(candidate)
        if is_executable(python):
            return python
        raise ExecutableNotFoundError(path, f"no interpreter at {python}")

    if is_executable(candidate):
        return candidate

    # Bare names like "python3" are looked up on PATH
    if candidate.parent == Path(".") and not candidate.exists():
        located = shutil.which(str(path))
        if located:
            return Path(located)

    raise ExecutableNotFoundError(path)


def resolve_interpreter(
    candidate: Optional[Union[str, Path]] = None,
    ask_path: Optional[AskPath] = None,
) -> Path:
    """Find the base interpreter to build environments with.

    Searches in order:
    1. The explicit candidate
    2. VENVKIT_PYTHON environment variable
    3. Common Python command names on PATH

    Args:
        candidate: Explicit interpreter path, directory or command name.
        ask_path: Called once with a prompt when nothing is found; its answer
            is resolved in turn. None or an empty answer gives up.

    Returns:
        Path of the interpreter executable.

    Raises:
        ExecutableNotFoundError: If no interpreter can be resolved.
    """
    if candidate is not None:
        candidates = [candidate]
    else:
        candidates = []
        env_python = os.environ.get(PYTHON_ENV_VAR)
        if env_python:
            candidates.append(env_python)
        candidates.extend(DEFAULT_PYTHON_NAMES)

    error: Optional[ExecutableNotFoundError] = None
    for name in candidates:
        try:
            return resolve_executable(name)
        except ExecutableNotFoundError as e:
            logger.debug("interpreter candidate rejected: %s", e)
            error = error or e

    if ask_path is not None:
        answer = ask_path(f"Python interpreter not found ({error}). Path to interpreter")
        if answer:
            return resolve_executable(answer.strip())

    raise error or ExecutableNotFoundError("python")


def find_virtualenv() -> Optional[Path]:
    """Locate the virtualenv tool on PATH."""
    located = shutil.which("virtualenv")
    return Path(located) if located else None


@dataclass
class ToolPaths:
    """Named tool executables belonging to one runtime root.

    pip may be absent, in which case pip is run as ``python -m pip``.
    """
    python: Path
    pip: Optional[Path] = None
    virtualenv: Optional[Path] = None
    root: Optional[Path] = None
    extra: dict[str, Path] = field(default_factory=dict)

    @classmethod
    def from_root(
        cls,
        root: Union[str, Path],
        overrides: Optional[dict[str, Union[str, Path]]] = None,
    ) -> "ToolPaths":
        """Derive tool paths for an environment root, then apply overrides."""
        root = Path(root).expanduser()
        bin_dir = scripts_dir(root)
        overrides = {k: Path(v).expanduser() for k, v in (overrides or {}).items() if v}

        pip = bin_dir / _exe_name("pip")
        tools = cls(
            python=overrides.pop("python", venv_python(root)),
            pip=overrides.pop("pip", pip if pip.exists() else None),
            virtualenv=overrides.pop("virtualenv", None),
            root=root,
        )
        tools.extra = overrides
        return tools

    @classmethod
    def for_interpreter(cls, python: Union[str, Path]) -> "ToolPaths":
        """Tools for an interpreter given by path, directory or name."""
        python = resolve_executable(python)
        return cls(python=python)

    def validate(self) -> "ToolPaths":
        """Check every configured tool, failing on the first missing one."""
        named = {"python": self.python, "pip": self.pip, "virtualenv": self.virtualenv}
        named.update(self.extra)
        for name, path in named.items():
            if path is None:
                continue
            if not is_executable(path):
                raise ExecutableNotFoundError(path, f"{name} is not an executable file")
        return self

    def pip_command(self) -> list[str]:
        """Command prefix for running pip."""
        if self.pip is not None:
            return [str(self.pip)]
        return [str(self.python), "-m", "pip"]
