"""Config validator.

Checks a parsed Config against the things that would otherwise fail halfway
through a bootstrap: bad versions, missing files and missing tools.
"""

from pathlib import Path

from ..installer.python_checker import version_tuple
from ..installer.resolver import is_executable
from .schema import Config, ValidationError, ValidationResult


def validate_config(config: Config) -> ValidationResult:
    """Validate a parsed Config object.

    Checks:
    - Environment path and minimum version format
    - Requirement files exist
    - Explicit tool paths are executables
    - Index settings are in range
    - Unknown keys (warnings)

    Args:
        config: Parsed Config to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    _validate_environment(config, errors, warnings)
    _validate_tools(config, errors)
    _validate_index(config, errors)

    for key in config.unknown_keys:
        warnings.append(ValidationError(
            path=key,
            message=f"Unknown key '{key}' is ignored.",
            severity="warning",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_environment(
    config: Config,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    env = config.environment

    if not str(env.path or "").strip():
        errors.append(ValidationError(
            path="environment.path",
            message="'path' is required and must not be empty.",
        ))

    if env.min_version:
        try:
            version_tuple(env.min_version)
        except ValueError:
            errors.append(ValidationError(
                path="environment.min_version",
                message=f"Invalid version '{env.min_version}'. Expected a form like 3.9 or 3.10.2",
            ))

    for i, requirements in enumerate(env.requirements):
        if not config.resolve_path(requirements).is_file():
            errors.append(ValidationError(
                path=f"environment.requirements[{i}]",
                message=f"Requirements file not found: {requirements}",
            ))

    for i, package in enumerate(env.packages):
        if not isinstance(package, str) or not package.strip():
            errors.append(ValidationError(
                path=f"environment.packages[{i}]",
                message="Package entries must be non-empty strings.",
            ))

    if env.reinstall:
        warnings.append(ValidationError(
            path="environment.reinstall",
            message="Existing environment will be deleted after confirmation.",
            severity="warning",
        ))


def _validate_tools(config: Config, errors: list[ValidationError]) -> None:
    # Bare names like "python3" are resolved on PATH at run time
    for name, value in config.tools.named().items():
        path = config.resolve_tool(value)
        if isinstance(path, Path) and not is_executable(path):
            errors.append(ValidationError(
                path=f"tools.{name}",
                message=f"Not an executable file: {value}",
            ))


def _validate_index(config: Config, errors: list[ValidationError]) -> None:
    index = config.index

    for name in ("api_url", "pip_url"):
        url = getattr(index, name)
        if url and not url.startswith(("http://", "https://", "file://")):
            errors.append(ValidationError(
                path=f"index.{name}",
                message=f"Invalid URL '{url}'. Must start with http://, https:// or file://",
            ))

    if not isinstance(index.timeout, (int, float)) or index.timeout <= 0:
        errors.append(ValidationError(
            path="index.timeout",
            message="'timeout' must be a positive number of seconds.",
        ))

    if not isinstance(index.retries, int) or index.retries < 0:
        errors.append(ValidationError(
            path="index.retries",
            message="'retries' must be a non-negative integer.",
        ))
