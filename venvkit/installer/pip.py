"""Package install and uninstall through pip."""

from pathlib import Path
from typing import Optional, Union

from ..errors import InvalidSourceError
from ..logging import get_logger
from ..process import (
    CommandResult,
    OutputSink,
    Runner,
    run_command,
    run_command_async,
)
from .resolver import ToolPaths

logger = get_logger(__name__)

SOURCE_MARKERS = ("setup.py", "pyproject.toml", "setup.cfg")

PIP_FLAGS = ["--disable-pip-version-check"]


def validate_source_dir(path: Union[str, Path]) -> Path:
    """Check that a directory is an installable project checkout.

    Raises:
        InvalidSourceError: If it is not a directory or has no marker file.
    """
    path = Path(path).expanduser()
    if not path.is_dir():
        raise InvalidSourceError(path, "not a directory")
    if not any((path / marker).is_file() for marker in SOURCE_MARKERS):
        raise InvalidSourceError(path)
    return path


def build_install_command(
    tools: ToolPaths,
    package: Optional[str] = None,
    source_dir: Optional[Union[str, Path]] = None,
    editable: bool = False,
    index_url: Optional[str] = None,
    upgrade: bool = False,
    requirements: Optional[Union[str, Path]] = None,
) -> list[str]:
    """Build a pip install command.

    Exactly one of ``package``, ``source_dir`` or ``requirements`` names
    what to install. ``editable`` only applies to a source directory.

    Raises:
        ValueError: If the install target is missing or ambiguous.
        InvalidSourceError: If source_dir is not a project checkout.
    """
    targets = [t for t in (package, source_dir, requirements) if t]
    if len(targets) != 1:
        raise ValueError("Specify exactly one of package, source_dir or requirements")
    if editable and not source_dir:
        raise ValueError("Editable installs need a source directory")

    args = tools.pip_command() + ["install"] + PIP_FLAGS
    if upgrade:
        args.append("--upgrade")
    if index_url:
        args += ["--index-url", index_url]

    if source_dir:
        source = validate_source_dir(source_dir)
        if editable:
            args.append("--editable")
        args.append(str(source))
    elif requirements:
        args += ["--requirement", str(requirements)]
    else:
        args.append(package)
    return args


def build_uninstall_command(tools: ToolPaths, package: str) -> list[str]:
    """Build a non-interactive pip uninstall command."""
    if not package:
        raise ValueError("Package name is required")
    return tools.pip_command() + ["uninstall"] + PIP_FLAGS + ["--yes", package]


def install_package(
    tools: ToolPaths,
    package: Optional[str] = None,
    source_dir: Optional[Union[str, Path]] = None,
    editable: bool = False,
    index_url: Optional[str] = None,
    upgrade: bool = False,
    runner: Runner = run_command,
) -> CommandResult:
    """Install a package and wait for pip to finish.

    Raises:
        CommandError: If pip exits with a non-zero status.
    """
    args = build_install_command(
        tools,
        package=package,
        source_dir=source_dir,
        editable=editable,
        index_url=index_url,
        upgrade=upgrade,
    )
    logger.info("Installing %s", package or source_dir)
    return runner(args).check()


def uninstall_package(
    tools: ToolPaths,
    package: str,
    runner: Runner = run_command,
) -> CommandResult:
    """Uninstall a package and wait for pip to finish."""
    logger.info("Uninstalling %s", package)
    return runner(build_uninstall_command(tools, package)).check()


async def install_package_async(
    tools: ToolPaths,
    package: Optional[str] = None,
    source_dir: Optional[Union[str, Path]] = None,
    editable: bool = False,
    index_url: Optional[str] = None,
    upgrade: bool = False,
    on_output: Optional[OutputSink] = None,
) -> CommandResult:
    """Install a package without blocking the event loop.

    pip's output is streamed to ``on_output`` line by line.

    Raises:
        CommandError: If pip exits with a non-zero status.
    """
    args = build_install_command(
        tools,
        package=package,
        source_dir=source_dir,
        editable=editable,
        index_url=index_url,
        upgrade=upgrade,
    )
    logger.info("Installing %s (async)", package or source_dir)
    result = await run_command_async(args, on_output=on_output)
    return result.check()


async def uninstall_package_async(
    tools: ToolPaths,
    package: str,
    on_output: Optional[OutputSink] = None,
) -> CommandResult:
    """Uninstall a package without blocking the event loop."""
    logger.info("Uninstalling %s (async)", package)
    result = await run_command_async(
        build_uninstall_command(tools, package), on_output=on_output
    )
    return result.check()


def install_requirements(
    tools: ToolPaths,
    requirements_file: Union[str, Path],
    index_url: Optional[str] = None,
    runner: Runner = run_command,
) -> CommandResult:
    """Install everything listed in a requirements file.

    Raises:
        FileNotFoundError: If the requirements file doesn't exist.
        CommandError: If pip fails.
    """
    requirements_file = Path(requirements_file)
    if not requirements_file.is_file():
        raise FileNotFoundError(f"Requirements file not found: {requirements_file}")

    logger.info("Installing dependencies from %s", requirements_file)
    args = build_install_command(
        tools, requirements=requirements_file, index_url=index_url
    )
    return runner(args).check()


def upgrade_pip(tools: ToolPaths, runner: Runner = run_command) -> CommandResult:
    """Upgrade pip inside the environment."""
    # Always through the interpreter; pip cannot replace its own script on Windows
    args = [str(tools.python), "-m", "pip", "install"] + PIP_FLAGS + ["--upgrade", "pip"]
    return runner(args).check()
