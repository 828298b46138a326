"""CLI entry point for venvkit.

Invoked by editor integrations:
    venvkit <command> [options]

Every command prints one JSON object on stdout:
    {"success": bool, "command": str, "data": ..., "message": str}
and exits with status 1 when it fails.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
import requests
from packaging.version import InvalidVersion

from .config import DEFAULT_CONFIG_FILE, parse_config, validate_config
from .errors import ConfigError, VenvkitError
from .installer import (
    BootstrapOptions,
    ToolPaths,
    VenvManager,
    always_confirm,
    get_package_status,
    get_python_version,
    install_package,
    install_package_async,
    installed_version,
    list_installed_packages,
    resolve_executable,
    uninstall_package,
)
from .logging import configure_logging, get_logger
from .transport import PackageIndexClient, is_outdated

logger = get_logger(__name__)


def output_result(command: str, data: Any = None, message: str = "") -> None:
    """Print a successful result in JSON format."""
    output = {
        "success": True,
        "command": command,
        "data": data,
        "message": message,
    }
    click.echo(json.dumps(output, ensure_ascii=False))


def output_error(command: str, message: str, **extra) -> None:
    """Print an error in JSON format."""
    output = {
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }
    click.echo(json.dumps(output, ensure_ascii=False))


def _fail(command: str, error: Exception) -> NoReturn:
    logger.debug("%s failed", command, exc_info=error)
    output_error(command, str(error), error=type(error).__name__)
    sys.exit(1)


def _tools(python: Optional[str]) -> ToolPaths:
    return ToolPaths.for_interpreter(python or sys.executable).validate()


def _ask_path(message: str) -> Optional[str]:
    # Only prompt when a user can answer
    if not sys.stdin.isatty():
        return None
    return click.prompt(message, default="", show_default=False, err=True)


def _confirm(message: str) -> bool:
    if not sys.stdin.isatty():
        return False
    return click.confirm(message, default=False, err=True)


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="DEBUG, INFO, WARNING or ERROR (default: $VENVKIT_LOG_LEVEL or WARNING).",
)
def main(log_level: Optional[str]) -> None:
    """Create and maintain Python virtual environments for editor tooling."""
    configure_logging(log_level)


@main.command()
@click.argument("python")
def version(python: str) -> None:
    """Print the version of the PYTHON interpreter."""
    try:
        exe = resolve_executable(python)
        data = {"python": str(exe), "version": get_python_version(exe)}
    except (VenvkitError, ValueError) as e:
        _fail("version", e)
    output_result("version", data, f"Python {data['version']}")


@main.command()
@click.argument("path")
def resolve(path: str) -> None:
    """Resolve PATH (environment directory, file or name) to an interpreter."""
    try:
        exe = resolve_executable(path)
    except VenvkitError as e:
        _fail("resolve", e)
    output_result("resolve", {"python": str(exe)}, str(exe))


@main.command()
@click.argument("name")
@click.option("--python", default=None, help="Interpreter or environment to inspect.")
def package(name: str, python: Optional[str]) -> None:
    """Show whether package NAME is installed, and how."""
    try:
        status = get_package_status(_tools(python), name)
    except VenvkitError as e:
        _fail("package", e)
    message = installed_version(status) or f"{name} is not installed"
    output_result("package", status.to_dict(), message)


@main.command()
@click.option("--python", default=None, help="Interpreter or environment to inspect.")
@click.option("--editable", is_flag=True, help="Only editable installs.")
def packages(python: Optional[str], editable: bool) -> None:
    """List installed packages and their versions."""
    try:
        data = list_installed_packages(_tools(python), editable_only=editable)
    except (VenvkitError, ValueError) as e:
        _fail("packages", e)
    output_result("packages", data, f"{len(data)} packages")


@main.command()
@click.argument("name")
@click.option("--index-url", default=None, help="JSON API base URL of the package index.")
@click.option("--python", default=None, help="Also report whether the installed copy is outdated.")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None,
              help="YAML config file whose index section is used.")
def latest(
    name: str,
    index_url: Optional[str],
    python: Optional[str],
    config_file: Optional[str],
) -> None:
    """Look up the latest published version of package NAME."""
    try:
        with _index_client(index_url, config_file) as client:
            newest = client.latest_version(name)
        data = {"name": name, "latest": newest}
        if python:
            status = get_package_status(_tools(python), name)
            data["installed"] = status.version
            data["outdated"] = (
                is_outdated(status.version, newest) if status.version else None
            )
    except (VenvkitError, requests.RequestException, InvalidVersion) as e:
        _fail("latest", e)
    output_result("latest", data, f"{name} {newest}")


@main.command()
@click.argument("name", required=False)
@click.option("--source", type=click.Path(file_okay=False), default=None,
              help="Install from a local project directory instead of the index.")
@click.option("--editable", "-e", is_flag=True, help="Editable install (needs --source).")
@click.option("--upgrade", "-U", is_flag=True, help="Upgrade if already installed.")
@click.option("--index-url", default=None, help="Index URL passed to pip.")
@click.option("--python", default=None, help="Interpreter or environment to install into.")
@click.option("--async", "run_async", is_flag=True, help="Stream pip output to stderr while it runs.")
def install(
    name: Optional[str],
    source: Optional[str],
    editable: bool,
    upgrade: bool,
    index_url: Optional[str],
    python: Optional[str],
    run_async: bool,
) -> None:
    """Install package NAME (or --source DIR) into an environment."""
    kwargs = dict(
        package=name,
        source_dir=source,
        editable=editable,
        index_url=index_url,
        upgrade=upgrade,
    )
    try:
        tools = _tools(python)
        if run_async:
            result = asyncio.run(install_package_async(
                tools, on_output=lambda line: click.echo(line, err=True), **kwargs
            ))
        else:
            result = install_package(tools, **kwargs)
    except (VenvkitError, ValueError) as e:
        _fail("install", e)
    output_result(
        "install",
        {"returncode": result.returncode, "output": result.output},
        f"Installed {name or source}",
    )


@main.command()
@click.argument("name")
@click.option("--python", default=None, help="Interpreter or environment to uninstall from.")
def uninstall(name: str, python: Optional[str]) -> None:
    """Uninstall package NAME from an environment."""
    try:
        result = uninstall_package(_tools(python), name)
    except (VenvkitError, ValueError) as e:
        _fail("uninstall", e)
    output_result(
        "uninstall",
        {"returncode": result.returncode, "output": result.output},
        f"Uninstalled {name}",
    )


@main.command()
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None,
              help="YAML config file (default: venvkit.yaml if present).")
@click.option("--venv", default=None, help="Environment directory.")
@click.option("--python", default=None, help="Base interpreter to build from.")
@click.option("-r", "--requirement", "requirements", multiple=True, help="Requirements file.")
@click.option("--package", "packages_", multiple=True, help="Package to install.")
@click.option("--min-version", default=None, help="Minimum Python version, e.g. 3.9.")
@click.option("--reinstall", is_flag=True, help="Delete and recreate an existing environment.")
@click.option("--virtualenv", "use_virtualenv", is_flag=True, help="Use virtualenv instead of venv.")
@click.option("--upgrade-pip", is_flag=True, help="Upgrade pip after creation.")
@click.option("--yes", "-y", is_flag=True, help="Answer yes to every question.")
def bootstrap(
    config_file: Optional[str],
    venv: Optional[str],
    python: Optional[str],
    requirements: tuple,
    packages_: tuple,
    min_version: Optional[str],
    reinstall: bool,
    use_virtualenv: bool,
    upgrade_pip: bool,
    yes: bool,
) -> None:
    """Create the environment if needed and install its requirements."""
    try:
        options = _bootstrap_options(config_file, venv)
    except (VenvkitError, ValueError) as e:
        _fail("bootstrap", e)

    # Command line wins over the config file
    if python:
        options.python = python
    if min_version:
        options.min_version = min_version
    options.requirements += [Path(r) for r in requirements]
    options.packages += list(packages_)
    options.reinstall = options.reinstall or reinstall
    options.use_virtualenv = options.use_virtualenv or use_virtualenv
    options.upgrade_pip = options.upgrade_pip or upgrade_pip

    manager = VenvManager(
        options,
        confirm=always_confirm if yes else _confirm,
        ask_path=_ask_path,
    )
    try:
        result = manager.bootstrap()
    except (VenvkitError, ValueError, OSError) as e:
        _fail("bootstrap", e)

    if result.created:
        message = f"Created environment at {result.venv_path}"
    else:
        message = f"Environment at {result.venv_path} is ready"
    output_result("bootstrap", result.to_dict(), message)


@main.command()
@click.option("--venv", default=None, help="Environment directory.")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None)
def info(venv: Optional[str], config_file: Optional[str]) -> None:
    """Report whether the environment exists and is usable."""
    try:
        options = _bootstrap_options(config_file, venv)
        data = VenvManager(options).get_info()
    except (VenvkitError, ValueError) as e:
        _fail("info", e)
    message = "valid" if data["valid"] else ("invalid" if data["exists"] else "missing")
    output_result("info", data, f"{data['path']}: {message}")


def _bootstrap_options(config_file: Optional[str], venv: Optional[str]) -> BootstrapOptions:
    """Options from the config file when one is given or present."""
    if config_file or (venv is None and Path(DEFAULT_CONFIG_FILE).is_file()):
        config = parse_config(config_file)
        validation = validate_config(config)
        for warning in validation.warnings:
            logger.warning("%s: %s", warning.path, warning.message)
        if not validation.valid:
            errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
            raise ConfigError(f"Invalid config: {errors_str}")
        options = config.to_bootstrap_options()
        if venv:
            options.venv_path = Path(venv).expanduser()
        return options

    return BootstrapOptions(venv_path=Path(venv or ".venv"))


def _index_client(index_url: Optional[str], config_file: Optional[str]) -> PackageIndexClient:
    """Index client configured from the config file's index section, if any.

    An explicit --config must parse. A venvkit.yaml picked up from the
    working directory is only a default, so a broken one is logged and skipped.
    """
    index = None
    if config_file:
        index = parse_config(config_file).index
    elif Path(DEFAULT_CONFIG_FILE).is_file():
        try:
            index = parse_config(DEFAULT_CONFIG_FILE).index
        except ConfigError as e:
            logger.warning("Ignoring %s: %s", DEFAULT_CONFIG_FILE, e)
    if index is not None:
        return PackageIndexClient(
            base_url=index_url or index.api_url,
            retry_policy=index.retry_policy(),
            request_timeout=index.timeout,
        )
    return PackageIndexClient(base_url=index_url)


if __name__ == "__main__":
    main()
