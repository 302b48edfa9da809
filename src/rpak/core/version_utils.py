"""Version utilities for R package specs"""

import re
from typing import Optional, Tuple
from packaging.version import InvalidVersion, Version

from .exceptions import UsageError

ANY_VERSION = "*"
VALID_OPERATORS = [">=", "==", "<=", ">", "<"]

# R package names: letters, digits and dots, starting with a letter
PACKAGE_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9.]*$")

# R versions: integers separated by '.' or '-' (e.g. 1.0.0, 0.4-12)
VERSION_PATTERN = re.compile(r"^\d+([.-]\d+)*$")

# Constraint inside a DESCRIPTION entry, e.g. '== 1.0.0' or '>=3.5'
CONSTRAINT_PATTERN = re.compile(r"^(>=|==|<=|>|<)\s*(\S+)$")


def parse_package_spec(spec: str) -> Tuple[str, Optional[str]]:
    """
    Split a `name` or `name@version` token on its first '@'.

    Only the first '@' separates name from version; anything after it is
    taken as the version, so tokens with several '@' characters end up with
    an invalid version and are rejected.

    Returns:
        Tuple of (name, version or None)

    Raises:
        UsageError: If the name or version is empty or malformed
    """
    name, sep, version = spec.strip().partition("@")
    name = name.strip()
    if not name:
        raise UsageError(f"Invalid package spec: '{spec}'", "missing name")
    if not PACKAGE_NAME_PATTERN.match(name):
        raise UsageError(f"Invalid package name: '{name}'")
    if not sep:
        return name, None

    version = version.strip()
    if not version:
        raise UsageError(f"Invalid package spec: '{spec}'", "missing version")
    if not VERSION_PATTERN.match(version):
        raise UsageError(f"Invalid version format: '{version}'")
    return name, version


def format_constraint(version: Optional[str]) -> str:
    """Exact-equality constraint for a version, or the wildcard"""
    if not version:
        return ANY_VERSION
    return f"== {version}"


def parse_constraint(constraint: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Parse a constraint such as '== 1.0.0'.

    Returns:
        Tuple of (operator, version); (None, None) for the wildcard

    Raises:
        ValueError: If the constraint is malformed
    """
    constraint = constraint.strip()
    if not constraint or constraint == ANY_VERSION:
        return None, None
    match = CONSTRAINT_PATTERN.match(constraint)
    if not match:
        raise ValueError(f"Invalid version constraint: {constraint}")
    return match.group(1), match.group(2)


def pinned_version(constraint: str) -> Optional[str]:
    """Version of an exact '==' pin, None for any other constraint"""
    operator, version = parse_constraint(constraint)
    return version if operator == "==" else None


def _to_version(value: str) -> Version:
    return Version(value.replace("-", "."))


def versions_equal(left: Optional[str], right: Optional[str]) -> bool:
    """
    Compare two R version strings.

    R treats '.' and '-' as equivalent separators, so '0.4-12' equals
    '0.4.12'.
    """
    if left is None or right is None:
        return left is right
    try:
        return _to_version(left) == _to_version(right)
    except InvalidVersion:
        return left.strip() == right.strip()


def compare_versions(old: Optional[str], new: Optional[str]) -> int:
    """
    Order two versions.

    Returns:
        -1 if new is older, 0 if equal or not comparable, 1 if newer
    """
    if old is None or new is None or versions_equal(old, new):
        return 0
    try:
        return 1 if _to_version(new) > _to_version(old) else -1
    except InvalidVersion:
        return 0
