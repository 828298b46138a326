import stat
from pathlib import Path

import pytest

from venvkit.process import CommandResult


def write_executable(path: Path, body: str = "exit 0\n") -> Path:
    """Write a small sh script and mark it executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def make_venv(root: Path, version: str = "3.11.4") -> Path:
    """Lay out a directory that looks like a virtual environment."""
    python = write_executable(root / "bin" / "python", f'echo "Python {version}"\n')
    (root / "pyvenv.cfg").write_text(f"home = /usr/bin\nversion = {version}\n")
    return python


class FakeRunner:
    """Command runner that answers like python/pip without running them."""

    def __init__(self, version: str = "3.11.4", freeze: str = "", fail_venv: bool = False):
        self.version = version
        self.freeze = freeze
        self.fail_venv = fail_venv
        self.calls: list[list[str]] = []

    def __call__(self, args, **kwargs) -> CommandResult:
        args = [str(a) for a in args]
        self.calls.append(args)

        if args[1:] == ["--version"]:
            return CommandResult(args, 0, stdout=f"Python {self.version}\n")

        if args[1:3] == ["-m", "venv"]:
            if self.fail_venv:
                return CommandResult(args, 1, stderr="Error: ensurepip is not available\n")
            make_venv(Path(args[3]), self.version)
            return CommandResult(args, 0)

        if "freeze" in args:
            return CommandResult(args, 0, stdout=self.freeze)

        return CommandResult(args, 0, stdout="ok\n")

    def commands(self, word: str) -> list[list[str]]:
        return [c for c in self.calls if word in c]


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def base_python(tmp_path):
    """A system-style interpreter (not inside a virtual environment)."""
    return write_executable(tmp_path / "system" / "bin" / "python3", 'echo "Python 3.11.4"\n')


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("VENVKIT_PYTHON", "VENVKIT_INDEX_URL", "VENVKIT_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
