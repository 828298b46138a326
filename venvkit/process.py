"""External command execution.

Commands are argv lists, never shell strings. The synchronous runner blocks
until the process exits; the asynchronous runner returns an awaitable result
so callers can observe the exit status of long installs.
"""

import asyncio
import subprocess
from dataclasses import dataclass
from os import PathLike
from typing import Callable, Mapping, Optional, Sequence, Union

from .errors import CommandError, ExecutableNotFoundError
from .logging import get_logger

logger = get_logger(__name__)

Arg = Union[str, PathLike]
OutputSink = Callable[[str], None]
Runner = Callable[..., "CommandResult"]


@dataclass
class CommandResult:
    """Outcome of a finished external command."""
    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout, or stderr when the tool wrote nothing to stdout."""
        return self.stdout.strip() or self.stderr.strip()

    def check(self) -> "CommandResult":
        """Raise CommandError unless the command succeeded."""
        if not self.ok:
            raise CommandError(self)
        return self


def _argv(args: Sequence[Arg]) -> list[str]:
    if not args:
        raise ValueError("Command must not be empty")
    return [str(a) for a in args]


def run_command(
    args: Sequence[Arg],
    cwd: Optional[Arg] = None,
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Run a command and wait for it to finish.

    Args:
        args: Program followed by its arguments.
        cwd: Working directory.
        env: Full environment for the child process (inherits when None).
        timeout: Seconds before subprocess.TimeoutExpired is raised.

    Returns:
        CommandResult with captured text output. A non-zero exit status
        is not an error here; call check() for that.

    Raises:
        ExecutableNotFoundError: If the program does not exist or cannot
            be executed.
    """
    argv = _argv(args)
    logger.debug("run: %s", " ".join(argv))

    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ExecutableNotFoundError(argv[0]) from e
    except PermissionError as e:
        raise ExecutableNotFoundError(argv[0], "not executable") from e

    logger.debug("exit %d: %s", completed.returncode, argv[0])
    return CommandResult(
        args=argv,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


async def _pump(
    stream: Optional[asyncio.StreamReader],
    chunks: list[str],
    sink: Optional[OutputSink],
) -> None:
    if stream is None:
        return
    while True:
        line = await stream.readline()
        if not line:
            break
        text = line.decode(errors="replace")
        chunks.append(text)
        if sink:
            sink(text.rstrip("\r\n"))


async def run_command_async(
    args: Sequence[Arg],
    cwd: Optional[Arg] = None,
    env: Optional[Mapping[str, str]] = None,
    on_output: Optional[OutputSink] = None,
) -> CommandResult:
    """Run a command without blocking the event loop.

    Output lines from both streams are handed to ``on_output`` as they
    arrive and are also captured in the returned result.
    """
    argv = _argv(args)
    logger.debug("run async: %s", " ".join(argv))

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise ExecutableNotFoundError(argv[0]) from e
    except PermissionError as e:
        raise ExecutableNotFoundError(argv[0], "not executable") from e

    stdout: list[str] = []
    stderr: list[str] = []
    await asyncio.gather(
        _pump(process.stdout, stdout, on_output),
        _pump(process.stderr, stderr, on_output),
    )
    returncode = await process.wait()

    logger.debug("exit %d: %s", returncode, argv[0])
    return CommandResult(
        args=argv,
        returncode=returncode,
        stdout="".join(stdout),
        stderr="".join(stderr),
    )


def start_command(
    args: Sequence[Arg],
    cwd: Optional[Arg] = None,
    env: Optional[Mapping[str, str]] = None,
    on_output: Optional[OutputSink] = None,
) -> "asyncio.Task[CommandResult]":
    """Schedule a command on the running loop and return its task.

    Must be called from inside a running event loop.
    """
    loop = asyncio.get_running_loop()
    return loop.create_task(
        run_command_async(args, cwd=cwd, env=env, on_output=on_output)
    )
