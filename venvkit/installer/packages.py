"""Installed package inspection.

``pip list --format=json`` is used where a plain name -> version mapping is
enough. Editable status is only visible in ``pip freeze`` output, which is
parsed with the patterns below.
"""

import json
import re
from dataclasses import dataclass
from typing import Optional

from packaging.utils import canonicalize_name

from ..process import Runner, run_command
from .resolver import ToolPaths

# requests==2.28.1
FREEZE_PINNED_PATTERN = re.compile(
    r"^(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)\s*===?\s*(?P<version>[^\s;#]+)"
)

# pkg @ file:///src/pkg
FREEZE_DIRECT_URL_PATTERN = re.compile(
    r"^(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)\s+@\s+(?P<location>\S+)"
)

# -e git+https://host/pkg@abc#egg=pkg
FREEZE_EDITABLE_PATTERN = re.compile(r"^(?:-e|--editable)\s+(?P<location>\S+)")

EGG_FRAGMENT_PATTERN = re.compile(r"[#&]egg=(?P<name>[A-Za-z0-9._-]+)")

# pip >= 21 writes this above "-e /path/to/pkg" when there is no VCS url
FREEZE_EDITABLE_COMMENT_PATTERN = re.compile(
    r"^#\s*Editable\b.*\((?P<name>[^=()\s]+)==(?P<version>[^()\s]+)\)"
)


@dataclass
class PackageStatus:
    """Install state of one package in an environment."""
    name: str
    version: Optional[str] = None
    editable: bool = False
    location: Optional[str] = None
    descriptor: Optional[str] = None

    @property
    def installed(self) -> bool:
        return self.version is not None or self.descriptor is not None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "installed": self.installed,
            "version": self.version,
            "editable": self.editable,
            "location": self.location,
            "descriptor": self.descriptor,
        }


def installed_version(status: PackageStatus) -> Optional[str]:
    """Version of a package, or its editable descriptor if editable."""
    if status.editable:
        return status.descriptor
    return status.version


def parse_freeze_line(
    line: str,
    name: str,
    comment: Optional[str] = None,
) -> Optional[PackageStatus]:
    """Parse one ``pip freeze`` line if it describes ``name``.

    Args:
        line: A single freeze output line.
        name: Package to look for (compared after normalization).
        comment: The preceding "# Editable ..." comment line, if any;
            it carries name and version for path-based editables.

    Returns:
        PackageStatus for the package, or None if the line is about
        something else.
    """
    line = line.strip()
    wanted = canonicalize_name(name)

    editable = FREEZE_EDITABLE_PATTERN.match(line)
    if editable:
        location = editable.group("location")
        version = None
        egg = EGG_FRAGMENT_PATTERN.search(location)
        if egg:
            found = egg.group("name")
        else:
            meta = FREEZE_EDITABLE_COMMENT_PATTERN.match(comment.strip()) if comment else None
            if not meta:
                return None
            found, version = meta.group("name"), meta.group("version")
        if canonicalize_name(found) != wanted:
            return None
        return PackageStatus(
            name=found,
            version=version,
            editable=True,
            location=location,
            descriptor=line,
        )

    pinned = FREEZE_PINNED_PATTERN.match(line)
    if pinned:
        if canonicalize_name(pinned.group("name")) != wanted:
            return None
        return PackageStatus(name=pinned.group("name"), version=pinned.group("version"))

    direct = FREEZE_DIRECT_URL_PATTERN.match(line)
    if direct:
        if canonicalize_name(direct.group("name")) != wanted:
            return None
        return PackageStatus(
            name=direct.group("name"),
            location=direct.group("location"),
            descriptor=line,
        )

    return None


def find_package(freeze_output: str, name: str) -> PackageStatus:
    """Look up a package in full ``pip freeze`` output.

    Returns a status with ``installed == False`` when it is absent.
    """
    comment: Optional[str] = None
    for line in freeze_output.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("#"):
            comment = stripped
            continue
        status = parse_freeze_line(stripped, name, comment=comment)
        comment = None
        if status is not None:
            return status
    return PackageStatus(name=name)


def get_package_status(
    tools: ToolPaths,
    name: str,
    runner: Runner = run_command,
) -> PackageStatus:
    """Installed/editable status of a package in the tools' environment."""
    result = runner(tools.pip_command() + ["freeze", "--all"]).check()
    return find_package(result.stdout, name)


def list_installed_packages(
    tools: ToolPaths,
    editable_only: bool = False,
    runner: Runner = run_command,
) -> dict[str, str]:
    """Map installed package names to versions using pip's JSON output."""
    args = tools.pip_command() + ["list", "--format=json", "--disable-pip-version-check"]
    if editable_only:
        args.append("--editable")
    result = runner(args).check()
    packages = json.loads(result.stdout or "[]")
    return {pkg["name"]: pkg["version"] for pkg in packages}
