"""Tests for Python version inspection."""
import pytest

from venvkit.errors import VersionConstraintError
from venvkit.installer.python_checker import (
    check_minimum_version,
    get_python_version,
    is_virtualenv_interpreter,
    meets_minimum,
    parse_version_output,
    venv_base_interpreter,
    version_tuple,
)
from venvkit.process import CommandResult

from conftest import make_venv, write_executable


@pytest.mark.parametrize("output,expected", [
    ("Python 3.10.4", "3.10.4"),
    ("Python 3.10.4\n", "3.10.4"),
    ("Python 3.13.0rc1", "3.13.0rc1"),
    ("Python 3.9", "3.9"),
])
def test_parse_version_output(output, expected):
    assert parse_version_output(output) == expected


def test_parse_version_output_without_version():
    with pytest.raises(ValueError):
        parse_version_output("command not found")


def test_version_tuple_ignores_suffix():
    assert version_tuple("3.11.0rc1") == (3, 11, 0)
    assert version_tuple("3.8") == (3, 8)


def test_version_tuple_rejects_garbage():
    with pytest.raises(ValueError):
        version_tuple("latest")


def test_minimum_version_too_old():
    with pytest.raises(VersionConstraintError) as exc_info:
        check_minimum_version("3.7.0", "3.8")

    error = exc_info.value
    assert error.installed == "3.7.0"
    assert error.required == "3.8"
    assert "3.7.0" in str(error) and "3.8" in str(error)


def test_minimum_version_satisfied():
    check_minimum_version("3.9.0", "3.8")
    assert meets_minimum("3.8.0", "3.8")
    assert meets_minimum("3.10.1", "3.9")
    assert not meets_minimum("3.9.18", "3.10")


def test_get_python_version_reads_stderr():
    def runner(args):
        return CommandResult(list(args), 0, stdout="", stderr="Python 2.7.18\n")

    assert get_python_version("python2", runner=runner) == "2.7.18"


def test_get_python_version_runs_interpreter(tmp_path):
    python = write_executable(tmp_path / "python", 'echo "Python 3.12.1"\n')

    assert get_python_version(python) == "3.12.1"


def test_is_virtualenv_interpreter(tmp_path, base_python):
    venv_python = make_venv(tmp_path / "env")

    assert is_virtualenv_interpreter(venv_python)
    assert not is_virtualenv_interpreter(base_python)


def test_venv_base_interpreter_follows_home(tmp_path):
    base = write_executable(tmp_path / "system" / "bin" / "python3")
    env_python = write_executable(tmp_path / "env" / "bin" / "python")
    (tmp_path / "env" / "pyvenv.cfg").write_text(
        f"home = {base.parent}\ninclude-system-site-packages = false\n"
    )

    assert venv_base_interpreter(env_python) == base


def test_venv_base_interpreter_prefers_executable(tmp_path):
    base = write_executable(tmp_path / "opt" / "python3.12")
    env_python = write_executable(tmp_path / "env" / "bin" / "python")
    (tmp_path / "env" / "pyvenv.cfg").write_text(
        f"home = {tmp_path / 'missing'}\nexecutable = {base}\n"
    )

    assert venv_base_interpreter(env_python) == base


def test_venv_base_interpreter_unknown(tmp_path):
    env_python = write_executable(tmp_path / "env" / "bin" / "python")

    assert venv_base_interpreter(env_python) is None
