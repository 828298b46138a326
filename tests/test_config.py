"""Tests for config parsing and validation."""
from pathlib import Path

import pytest

from venvkit.config import parse_config, parse_config_data, validate_config
from venvkit.errors import ConfigError

from conftest import write_executable

CONFIG_YAML = """\
environment:
  path: .venv
  min_version: "3.10"
  requirements: requirements.txt
  packages: [black, flake8]
  reinstall: false
index:
  api_url: https://mirror.test/pypi
  pip_url: https://mirror.test/simple
  retries: 1
"""


def test_parse_config_file(tmp_path):
    config_file = tmp_path / "venvkit.yaml"
    config_file.write_text(CONFIG_YAML)

    config = parse_config(config_file)

    assert config.environment.path == ".venv"
    assert config.environment.min_version == "3.10"
    assert config.environment.requirements == ["requirements.txt"]
    assert config.environment.packages == ["black", "flake8"]
    assert config.index.retries == 1
    assert config.base_dir == tmp_path.resolve()


def test_bootstrap_options_resolve_relative_paths(tmp_path):
    config_file = tmp_path / "venvkit.yaml"
    config_file.write_text(CONFIG_YAML)

    options = parse_config(config_file).to_bootstrap_options()

    assert options.venv_path == tmp_path.resolve() / ".venv"
    assert options.requirements == [tmp_path.resolve() / "requirements.txt"]
    assert options.index_url == "https://mirror.test/simple"
    assert options.min_version == "3.10"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        parse_config(tmp_path / "venvkit.yaml")


def test_wrong_suffix(tmp_path):
    config_file = tmp_path / "venvkit.json"
    config_file.write_text("{}")

    with pytest.raises(ConfigError):
        parse_config(config_file)


def test_malformed_yaml(tmp_path):
    config_file = tmp_path / "venvkit.yaml"
    config_file.write_text("environment: [unclosed\n")

    with pytest.raises(ConfigError):
        parse_config(config_file)


@pytest.mark.parametrize("data", [
    ["not", "a", "mapping"],
    {"index": {}},
    {"environment": {"min_version": "3.9"}},
    {"environment": "path"},
    {"environment": {"path": ".venv", "packages": 5}},
])
def test_structural_errors(data):
    with pytest.raises(ConfigError):
        parse_config_data(data)


def test_unquoted_min_version_rejected():
    with pytest.raises(ConfigError) as exc_info:
        parse_config_data({"environment": {"path": ".venv", "min_version": 3.1}})

    assert "quoted" in str(exc_info.value)


def test_validate_good_config(tmp_path):
    (tmp_path / "requirements.txt").write_text("black\n")
    config = parse_config_data(
        {"environment": {"path": ".venv", "requirements": ["requirements.txt"]}},
        base_dir=tmp_path,
    )

    result = validate_config(config)

    assert result.valid
    assert str(result) == "Valid"


def test_validate_reports_errors(tmp_path):
    config = parse_config_data(
        {
            "environment": {"path": ".venv", "min_version": "three", "requirements": ["missing.txt"]},
            "index": {"api_url": "ftp://index", "timeout": 0},
            "tools": {"python": "/nonexistent/python3"},
        },
        base_dir=tmp_path,
    )

    result = validate_config(config)

    assert not result.valid
    paths = {e.path for e in result.errors}
    assert paths == {
        "environment.min_version",
        "environment.requirements[0]",
        "index.api_url",
        "index.timeout",
        "tools.python",
    }


def test_validate_warns_on_unknown_keys(tmp_path):
    config = parse_config_data(
        {"environment": {"path": ".venv", "colour": "blue"}, "extras": {}},
        base_dir=tmp_path,
    )

    result = validate_config(config)

    assert result.valid
    assert {w.path for w in result.warnings} == {"environment.colour", "extras"}


def test_tools_accept_bare_names_and_executables(tmp_path):
    python = write_executable(tmp_path / "bin" / "python3")
    config = parse_config_data(
        {"environment": {"path": ".venv"}, "tools": {"python": str(python), "virtualenv": "virtualenv"}},
        base_dir=tmp_path,
    )

    assert validate_config(config).valid
    assert config.to_bootstrap_options().python == str(python)


def test_default_base_dir_is_cwd():
    config = parse_config_data({"environment": {"path": ".venv"}})
    assert config.base_dir == Path.cwd()


def test_relative_tool_paths_resolve_against_config_dir(tmp_path, monkeypatch):
    project = tmp_path / "project"
    python = write_executable(project / "rt" / "python3")
    config_file = project / "venvkit.yaml"
    config_file.write_text(
        "environment:\n  path: .venv\ntools:\n  python: rt/python3\n  virtualenv: virtualenv\n"
    )
    monkeypatch.chdir(tmp_path)

    config = parse_config(config_file)
    options = config.to_bootstrap_options()

    assert validate_config(config).valid
    assert options.python == python.resolve()
    assert options.python.is_file()
    assert options.virtualenv == "virtualenv"
