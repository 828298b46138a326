"""Virtual environment bootstrapper.

Makes sure an environment exists at a given path, built from an interpreter
that satisfies a minimum version, with requirements installed. Questions that
need a user decision go through an injected ``confirm`` callback.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from ..errors import (
    BootstrapAborted,
    CommandError,
    EnvironmentCreationError,
    ExecutableNotFoundError,
)
from ..logging import get_logger
from ..process import CommandResult, Runner, run_command
from .packages import list_installed_packages
from .pip import install_package, install_requirements, upgrade_pip
from .python_checker import (
    check_minimum_version,
    get_python_version,
    is_virtualenv_interpreter,
    venv_base_interpreter,
    meets_minimum,
)
from .resolver import (
    AskPath,
    ToolPaths,
    find_virtualenv,
    is_executable,
    resolve_executable,
    resolve_interpreter,
)

logger = get_logger(__name__)

Confirm = Callable[[str], bool]


def always_confirm(message: str) -> bool:
    """Decision policy that answers yes to every question."""
    logger.info("%s -> yes", message)
    return True


def never_confirm(message: str) -> bool:
    """Decision policy that answers no to every question."""
    logger.info("%s -> no", message)
    return False


@dataclass
class BootstrapOptions:
    """What the bootstrapper should produce."""
    venv_path: Path
    python: Optional[Union[str, Path]] = None
    virtualenv: Optional[Union[str, Path]] = None
    min_version: Optional[str] = None
    requirements: list[Path] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)
    reinstall: bool = False
    upgrade_pip: bool = False
    use_virtualenv: bool = False
    index_url: Optional[str] = None

    def __post_init__(self):
        self.venv_path = Path(self.venv_path).expanduser()
        self.requirements = [Path(r).expanduser() for r in self.requirements]


@dataclass
class BootstrapResult:
    """What a bootstrap run did."""
    venv_path: Path
    python: Path
    version: str
    base_python: Optional[Path] = None
    created: bool = False
    deleted: bool = False
    installed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "venv_path": str(self.venv_path),
            "python": str(self.python),
            "version": self.version,
            "base_python": str(self.base_python) if self.base_python else None,
            "created": self.created,
            "deleted": self.deleted,
            "installed": list(self.installed),
        }


class VenvManager:
    """Creates, validates and populates one virtual environment."""

    def __init__(
        self,
        options: BootstrapOptions,
        confirm: Confirm = never_confirm,
        ask_path: Optional[AskPath] = None,
        runner: Runner = run_command,
    ):
        """Initialize VenvManager.

        Args:
            options: Target environment and what to install into it.
            confirm: Yes/no decision callback for destructive or doubtful steps.
            ask_path: Free-text prompt used when no base interpreter is found.
            runner: Command runner, replaceable for testing.
        """
        self.options = options
        self.confirm = confirm
        self.ask_path = ask_path
        self.runner = runner

    @property
    def venv_path(self) -> Path:
        return self.options.venv_path

    @property
    def tools(self) -> ToolPaths:
        """Tool paths inside the managed environment."""
        return ToolPaths.from_root(self.venv_path)

    @property
    def python_exe(self) -> Path:
        """Get the venv Python executable path."""
        return self.tools.python

    def exists(self) -> bool:
        """Check if venv directory exists."""
        return self.venv_path.exists()

    def valid_version(self) -> Optional[str]:
        """Version of the venv interpreter, or None if the venv is unusable.

        Unusable means the interpreter is missing, does not run, or is older
        than min_version.
        """
        if not is_executable(self.python_exe):
            return None

        try:
            version = get_python_version(self.python_exe, runner=self.runner)
        except (CommandError, ExecutableNotFoundError, ValueError) as e:
            logger.debug("venv interpreter unusable: %s", e)
            return None

        if self.options.min_version and not meets_minimum(version, self.options.min_version):
            logger.info("venv Python %s is older than %s", version, self.options.min_version)
            return None
        return version

    def is_valid(self) -> bool:
        """Check the venv interpreter runs and meets the minimum version."""
        return self.valid_version() is not None

    def base_interpreter(self) -> tuple[Path, str]:
        """Resolve the interpreter to build from and enforce the minimum version.

        Raises:
            ExecutableNotFoundError: If no interpreter can be found.
            VersionConstraintError: If it is older than min_version.
        """
        python = resolve_interpreter(self.options.python, ask_path=self.ask_path)
        if self._inside_target(python):
            # Rebuilding would delete the interpreter doing the rebuild
            base = venv_base_interpreter(python)
            if base is not None:
                logger.info("%s is inside %s, using its base %s", python, self.venv_path, base)
                python = base
        version = get_python_version(python, runner=self.runner)
        if self.options.min_version:
            check_minimum_version(version, self.options.min_version)
        logger.info("Using Python %s at %s", version, python)
        return python, version

    def create(self, base_python: Path) -> None:
        """Create the environment with one invocation of venv or virtualenv.

        Raises:
            EnvironmentCreationError: If the tool fails or leaves no interpreter.
        """
        if self.options.use_virtualenv:
            tool = (
                resolve_executable(self.options.virtualenv)
                if self.options.virtualenv
                else find_virtualenv()
            )
            if tool is None:
                raise ExecutableNotFoundError("virtualenv", "not found on PATH")
            args = [str(tool), "--python", str(base_python), str(self.venv_path)]
        else:
            args = [str(base_python), "-m", "venv", str(self.venv_path)]

        logger.info("Creating venv at %s", self.venv_path)
        result = self.runner(args)
        if not result.ok:
            raise EnvironmentCreationError(self.venv_path, result.output)

        if not is_executable(self.python_exe):
            raise EnvironmentCreationError(
                self.venv_path, f"no interpreter at {self.python_exe} after creation"
            )

    def remove(self) -> None:
        """Delete whatever is at the environment path."""
        logger.info("Removing existing venv at %s", self.venv_path)
        if self.venv_path.is_dir() and not self.venv_path.is_symlink():
            shutil.rmtree(self.venv_path)
        else:
            self.venv_path.unlink()

    def bootstrap(self) -> BootstrapResult:
        """Ensure the environment exists and has its requirements.

        An existing valid environment is kept unless ``reinstall`` is set
        and the user confirms deleting it.

        Raises:
            ExecutableNotFoundError: If no base interpreter is found.
            VersionConstraintError: If the base interpreter is too old.
            BootstrapAborted: If the user declines a required confirmation.
            EnvironmentCreationError: If the environment can't be created.
            CommandError: If an install step fails.
        """
        base_python, _ = self.base_interpreter()

        if is_virtualenv_interpreter(base_python) and not self._inside_target(base_python):
            question = (
                f"{base_python} belongs to a virtual environment. "
                f"Create {self.venv_path} from it anyway?"
            )
            if not self.confirm(question):
                raise BootstrapAborted(f"Declined to build from virtual environment {base_python}")

        self.venv_path.parent.mkdir(parents=True, exist_ok=True)

        created = False
        deleted = False

        if self.exists() and not self._is_empty_dir():
            if self.is_valid():
                if self.options.reinstall:
                    if self.confirm(f"Delete and recreate the virtual environment at {self.venv_path}?"):
                        self._remove_for_rebuild(base_python)
                        deleted = True
                    else:
                        logger.info("Keeping existing venv at %s", self.venv_path)
                else:
                    logger.info("Valid venv already exists at %s", self.venv_path)
            elif self.confirm(f"{self.venv_path} is not a usable virtual environment. Delete and recreate it?"):
                self._remove_for_rebuild(base_python)
                deleted = True
            else:
                raise BootstrapAborted(f"Unusable environment left in place at {self.venv_path}")

        if not self.exists() or self._is_empty_dir():
            self.create(base_python)
            created = True

        version = get_python_version(self.python_exe, runner=self.runner)
        installed = self.install_dependencies()

        return BootstrapResult(
            venv_path=self.venv_path,
            python=self.python_exe,
            version=version,
            base_python=base_python,
            created=created,
            deleted=deleted,
            installed=installed,
        )

    def ensure(self) -> bool:
        """Ensure venv exists and is valid. Creates if needed.

        Returns:
            True if venv is ready.
        """
        if self.exists() and self.is_valid():
            return True
        self.bootstrap()
        return True

    def install_dependencies(self) -> list[str]:
        """Install requirement files, then individual packages.

        Returns:
            Labels of what was installed, in order.
        """
        tools = self.tools
        installed: list[str] = []

        if self.options.upgrade_pip:
            upgrade_pip(tools, runner=self.runner)
            installed.append("pip")

        for requirements_file in self.options.requirements:
            install_requirements(
                tools,
                requirements_file,
                index_url=self.options.index_url,
                runner=self.runner,
            )
            installed.append(str(requirements_file))

        for package in self.options.packages:
            install_package(
                tools,
                package=package,
                index_url=self.options.index_url,
                runner=self.runner,
            )
            installed.append(package)

        if installed:
            logger.info("Installed into %s: %s", self.venv_path, ", ".join(installed))
        return installed

    def run_in_venv(self, args: list[str]) -> CommandResult:
        """Run the venv's Python with the given arguments.

        Raises:
            RuntimeError: If the venv is not valid.
        """
        if not self.is_valid():
            raise RuntimeError(
                f"Venv is not valid at {self.venv_path}. "
                "Run bootstrap() first."
            )
        return self.runner([str(self.python_exe)] + list(args))

    def get_installed_packages(self) -> dict[str, str]:
        """Get dictionary of installed packages and their versions."""
        if not self.is_valid():
            return {}
        return list_installed_packages(self.tools, runner=self.runner)

    def get_info(self) -> dict:
        """Get venv status details."""
        tools = self.tools
        version = self.valid_version() if self.exists() else None
        return {
            "path": str(self.venv_path),
            "exists": self.exists(),
            "valid": version is not None,
            "python_exe": str(tools.python),
            "pip_exe": str(tools.pip) if tools.pip else None,
            "version": version,
        }

    def _remove_for_rebuild(self, base_python: Path) -> None:
        if self._inside_target(base_python):
            raise BootstrapAborted(
                f"Cannot rebuild {self.venv_path} from its own interpreter {base_python}"
            )
        self.remove()

    def _inside_target(self, python: Path) -> bool:
        # venv interpreters are often symlinks out of the environment
        python = Path(python)
        if python.absolute().is_relative_to(self.venv_path.absolute()):
            return True
        try:
            return python.resolve().is_relative_to(self.venv_path.resolve())
        except OSError:
            return False

    def _is_empty_dir(self) -> bool:
        return self.venv_path.is_dir() and not any(self.venv_path.iterdir())


def bootstrap_environment(
    options: BootstrapOptions,
    confirm: Confirm = never_confirm,
    ask_path: Optional[AskPath] = None,
) -> BootstrapResult:
    """One-shot environment setup: ensure venv + install deps."""
    return VenvManager(options, confirm=confirm, ask_path=ask_path).bootstrap()
