"""Tests for installed package inspection."""
import json
from pathlib import Path

from venvkit.installer.packages import (
    FREEZE_EDITABLE_PATTERN,
    FREEZE_PINNED_PATTERN,
    find_package,
    get_package_status,
    installed_version,
    list_installed_packages,
    parse_freeze_line,
)
from venvkit.installer.resolver import ToolPaths
from venvkit.process import CommandResult

from conftest import FakeRunner

FREEZE_OUTPUT = """\
certifi==2023.7.22
-e git+https://x/pkg@abc#egg=pkg
# Editable install with no version control (localpkg==0.3.0)
-e /home/dev/src/localpkg
requests==2.28.1
Typing_Extensions==4.8.0
wheelhouse @ file:///tmp/wheelhouse-1.0-py3-none-any.whl
"""


def test_patterns():
    assert FREEZE_PINNED_PATTERN.match("requests==2.28.1").group("version") == "2.28.1"
    assert FREEZE_EDITABLE_PATTERN.match("-e /src/pkg").group("location") == "/src/pkg"


def test_parse_pinned_line():
    status = parse_freeze_line("requests==2.28.1", "requests")

    assert status.version == "2.28.1"
    assert not status.editable
    assert installed_version(status) == "2.28.1"


def test_parse_editable_line():
    line = "-e git+https://x/pkg@abc#egg=pkg"

    status = parse_freeze_line(line, "pkg")

    assert status.editable
    assert status.location == "git+https://x/pkg@abc#egg=pkg"
    assert installed_version(status) == line


def test_parse_line_for_other_package():
    assert parse_freeze_line("requests==2.28.1", "urllib3") is None
    assert parse_freeze_line("-e git+https://x/pkg@abc#egg=pkg", "other") is None


def test_find_package_normalizes_names():
    status = find_package(FREEZE_OUTPUT, "typing-extensions")

    assert status.installed
    assert status.version == "4.8.0"


def test_find_editable_without_vcs():
    status = find_package(FREEZE_OUTPUT, "localpkg")

    assert status.editable
    assert status.version == "0.3.0"
    assert status.location == "/home/dev/src/localpkg"


def test_find_direct_reference():
    status = find_package(FREEZE_OUTPUT, "wheelhouse")

    assert status.installed
    assert status.version is None
    assert status.location.startswith("file://")


def test_find_missing_package():
    status = find_package(FREEZE_OUTPUT, "numpy")

    assert not status.installed
    assert installed_version(status) is None


def test_find_package_matches_normalized_names():
    status = find_package("Zope_Interface==6.0\n", "zope.interface")

    assert status.version == "6.0"


def test_get_package_status_runs_freeze():
    runner = FakeRunner(freeze=FREEZE_OUTPUT)
    tools = ToolPaths(python=Path("/env/bin/python"))

    status = get_package_status(tools, "requests", runner=runner)

    assert status.version == "2.28.1"
    assert runner.calls == [["/env/bin/python", "-m", "pip", "freeze", "--all"]]


def test_list_installed_packages_uses_json():
    listing = [{"name": "requests", "version": "2.28.1"}, {"name": "pip", "version": "23.3"}]

    def runner(args):
        assert "--format=json" in args
        return CommandResult(list(args), 0, stdout=json.dumps(listing))

    tools = ToolPaths(python=Path("/env/bin/python"), pip=Path("/env/bin/pip"))

    assert list_installed_packages(tools, runner=runner) == {"requests": "2.28.1", "pip": "23.3"}


def test_list_editable_packages():
    seen = []

    def runner(args):
        seen.append(args)
        return CommandResult(list(args), 0, stdout="[]")

    tools = ToolPaths(python=Path("/env/bin/python"))

    assert list_installed_packages(tools, editable_only=True, runner=runner) == {}
    assert "--editable" in seen[0]
