"""Installer module - Python environment management."""

from .packages import (
    PackageStatus,
    find_package,
    get_package_status,
    installed_version,
    list_installed_packages,
    parse_freeze_line,
)
from .pip import (
    build_install_command,
    build_uninstall_command,
    install_package,
    install_package_async,
    install_requirements,
    uninstall_package,
    uninstall_package_async,
    validate_source_dir,
)
from .python_checker import (
    check_minimum_version,
    get_python_version,
    meets_minimum,
    parse_version_output,
)
from .resolver import ToolPaths, resolve_executable, resolve_interpreter, venv_python
from .venv_manager import (
    BootstrapOptions,
    BootstrapResult,
    VenvManager,
    always_confirm,
    bootstrap_environment,
    never_confirm,
)

__all__ = [
    "PackageStatus",
    "find_package",
    "get_package_status",
    "installed_version",
    "list_installed_packages",
    "parse_freeze_line",
    "build_install_command",
    "build_uninstall_command",
    "install_package",
    "install_package_async",
    "install_requirements",
    "uninstall_package",
    "uninstall_package_async",
    "validate_source_dir",
    "check_minimum_version",
    "get_python_version",
    "meets_minimum",
    "parse_version_output",
    "ToolPaths",
    "resolve_executable",
    "resolve_interpreter",
    "venv_python",
    "BootstrapOptions",
    "BootstrapResult",
    "VenvManager",
    "always_confirm",
    "bootstrap_environment",
    "never_confirm",
]
