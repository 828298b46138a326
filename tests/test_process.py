"""Tests for external command execution."""
import asyncio

import pytest

from venvkit.errors import CommandError, ExecutableNotFoundError
from venvkit.process import CommandResult, run_command, run_command_async, start_command


def test_run_command_captures_output():
    result = run_command(["sh", "-c", "echo out; echo err >&2; exit 3"])

    assert result.returncode == 3
    assert result.stdout == "out\n"
    assert result.stderr == "err\n"
    assert not result.ok


def test_run_command_missing_program():
    with pytest.raises(ExecutableNotFoundError):
        run_command(["/nonexistent/venvkit-tool", "--version"])


def test_run_command_rejects_empty_command():
    with pytest.raises(ValueError):
        run_command([])


def test_output_falls_back_to_stderr():
    result = CommandResult(["python", "--version"], 0, stdout="", stderr="Python 2.7.18\n")
    assert result.output == "Python 2.7.18"


def test_check_raises_command_error():
    result = CommandResult(["pip", "install", "nope"], 1, stderr="No matching distribution")

    with pytest.raises(CommandError) as exc_info:
        result.check()

    assert exc_info.value.result is result
    assert "No matching distribution" in str(exc_info.value)


def test_check_returns_self_on_success():
    result = CommandResult(["true"], 0)
    assert result.check() is result


@pytest.mark.asyncio
async def test_run_command_async_streams_to_sink():
    lines = []

    result = await run_command_async(
        ["sh", "-c", "echo one; echo two"], on_output=lines.append
    )

    assert result.ok
    assert lines == ["one", "two"]
    assert result.stdout == "one\ntwo\n"


@pytest.mark.asyncio
async def test_run_command_async_reports_exit_status():
    result = await run_command_async(["sh", "-c", "echo failed >&2; exit 4"])

    assert result.returncode == 4
    assert result.stderr == "failed\n"


@pytest.mark.asyncio
async def test_run_command_async_missing_program():
    with pytest.raises(ExecutableNotFoundError):
        await run_command_async(["/nonexistent/venvkit-tool"])


@pytest.mark.asyncio
async def test_start_command_returns_task():
    task = start_command(["sh", "-c", "exit 0"])

    assert isinstance(task, asyncio.Task)
    result = await task
    assert result.ok
