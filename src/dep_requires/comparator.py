"""
Numeric version comparison.
"""

import operator
import re
from typing import Callable, Dict

from packaging.version import InvalidVersion, Version

from .error_handling import ErrorCategory, VersionException

_NUMERIC_VERSION_RE = re.compile(r"^\d+(?:\.\d+){0,2}$")

_COMPARISONS: Dict[str, Callable[[int, int], bool]] = {
    "=": operator.eq,
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}


def parse_version(version: str) -> Version:
    """
    Parse a ``major[.minor[.patch]]`` string, tolerating a leading ``v``.

    Raises:
        VersionException: If the string is not a plain numeric version
    """
    candidate = re.sub(r"^[vV]", "", (version or "").strip())
    if not _NUMERIC_VERSION_RE.match(candidate):
        raise VersionException(
            f'"{version}" is not a valid version.', ErrorCategory.VALIDATION
        )
    try:
        return Version(candidate)
    except InvalidVersion as e:
        raise VersionException(
            f'"{version}" is not a valid version.', ErrorCategory.VALIDATION
        ) from e


def version_ordering(actual: str, target: str) -> int:
    """Return -1, 0 or 1 as ``actual`` is lower than, equal to or above ``target``."""
    left = parse_version(actual)
    right = parse_version(target)
    if left < right:
        return -1
    if left == right:
        return 0
    return 1


def compare_versions(actual: str, target: str, token: str) -> bool:
    """
    Apply a comparison token to two versions.

    Missing trailing components count as zero, so ``1.2`` equals ``1.2.0``.
    """
    comparison = _COMPARISONS.get(token)
    if comparison is None:
        raise VersionException(f'"{token}" is invalid.', ErrorCategory.OPERATOR)
    return comparison(version_ordering(actual, target), 0)
