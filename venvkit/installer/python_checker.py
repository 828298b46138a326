"""Python version inspection.

Reads an interpreter's version from its ``--version`` banner and checks it
against a required minimum.
"""

import os
import re
from pathlib import Path
from typing import Optional, Tuple, Union

from ..errors import VersionConstraintError
from ..process import Runner, run_command

# "Python 3.10.4", "Python 3.13.0rc1", "Python 3.9"
PYTHON_VERSION_PATTERN = re.compile(r"Python\s+(\d+\.\d+(?:\.\d+)?(?:[a-zA-Z0-9.+]*)?)")

# Leading numeric components of a version string
NUMERIC_VERSION_PATTERN = re.compile(r"^\d+(?:\.\d+)*")

VENV_MARKER = "pyvenv.cfg"


def parse_version_output(output: str) -> str:
    """Extract the version token from ``python --version`` output.

    Raises:
        ValueError: If the output has no recognizable version.
    """
    match = PYTHON_VERSION_PATTERN.search(output)
    if not match:
        raise ValueError(f"No Python version found in output: {output.strip()!r}")
    return match.group(1)


def version_tuple(version: str) -> Tuple[int, ...]:
    """Numeric components of a version: '3.11.0rc1' -> (3, 11, 0)."""
    match = NUMERIC_VERSION_PATTERN.match(version.strip())
    if not match:
        raise ValueError(f"Invalid version: {version!r}")
    numeric = match.group(0)
    return tuple(int(part) for part in numeric.split("."))


def _padded(a: Tuple[int, ...], b: Tuple[int, ...]) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    width = max(len(a), len(b))
    return a + (0,) * (width - len(a)), b + (0,) * (width - len(b))


def meets_minimum(installed: str, minimum: str) -> bool:
    """Whether ``installed`` is at least ``minimum`` ('3.8' == '3.8.0')."""
    have, need = _padded(version_tuple(installed), version_tuple(minimum))
    return have >= need


def check_minimum_version(installed: str, minimum: str) -> None:
    """Raise VersionConstraintError if ``installed`` is below ``minimum``."""
    if not meets_minimum(installed, minimum):
        raise VersionConstraintError(installed, minimum)


def get_python_version(python: Union[str, Path], runner: Runner = run_command) -> str:
    """Ask an interpreter for its version.

    Python 2 and early 3.x print the banner on stderr, so both streams
    are considered.
    """
    result = runner([str(python), "--version"]).check()
    return parse_version_output(f"{result.stdout}\n{result.stderr}")


def is_virtualenv_interpreter(python: Union[str, Path]) -> bool:
    """Whether an interpreter belongs to a virtual environment.

    Both venv and virtualenv (>= 20) write pyvenv.cfg at the environment
    root, one level above the scripts directory.
    """
    python = Path(python)
    return (python.parent.parent / VENV_MARKER).is_file()


def read_venv_config(root: Union[str, Path]) -> dict[str, str]:
    """Parse the ``key = value`` lines of an environment's pyvenv.cfg."""
    config: dict[str, str] = {}
    marker = Path(root) / VENV_MARKER
    if not marker.is_file():
        return config
    for line in marker.read_text(encoding="utf-8", errors="replace").splitlines():
        key, sep, value = line.partition("=")
        if sep:
            config[key.strip().lower()] = value.strip()
    return config


def venv_base_interpreter(python: Union[str, Path]) -> Optional[Path]:
    """The interpreter a virtual environment was built from.

    Uses pyvenv.cfg ``executable`` (Python >= 3.11), then looks in its
    ``home`` directory. Returns None when neither points at a runnable file.
    """
    python = Path(python)
    config = read_venv_config(python.parent.parent)

    candidates = []
    if config.get("executable"):
        candidates.append(Path(config["executable"]))
    if config.get("home"):
        home = Path(config["home"])
        for name in dict.fromkeys([python.name, "python3", "python"]):
            candidates.append(home / name)

    for candidate in candidates:
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return candidate
    return None
