"""
Public entry points for dependency presence and version checks.
"""

from typing import Optional, Union

from .comparator import compare_versions
from .error_handling import ErrorLevel, VersionException, get_error_handler
from .operators import Operator, decode_operator
from .prober import probe_version
from .resolver import is_resolvable, resolve_executable


def exists(name: str) -> bool:
    """Return True if the executable ``name`` can be found on PATH."""
    return is_resolvable(name)


def satisfies(name: str, version: str, op: Union[Operator, int]) -> bool:
    """
    Check that an installed executable's version compares to ``version`` as ``op`` says.

    Args:
        name: Executable name
        version: Version to compare against, e.g. ``18.14.1``
        op: Comparison flags, e.g. ``GREATER | EQUAL``

    Returns:
        bool: Result of ``installed <op> version``

    Raises:
        VersionException: If the executable is missing, its version cannot be
            determined, or ``op`` is not a valid combination
    """
    try:
        resolve_executable(name)
        installed = probe_version(name)
        token = decode_operator(op)
        return compare_versions(installed, version, token)
    except VersionException as e:
        get_error_handler().report_exception(
            e,
            "api",
            "satisfies",
            level=ErrorLevel.DEBUG,
            details={"dependency": name},
        )
        raise


def requires(
    name: str,
    version: Optional[str] = None,
    op: Optional[Union[Operator, int]] = None,
) -> bool:
    """
    Check presence, or presence and version, of an executable.

    ``requires(name)`` never raises for a missing tool and returns False.
    ``requires(name, version, op)`` raises VersionException instead.
    """
    if version is None and op is None:
        return exists(name)
    if version is None or op is None:
        raise TypeError("requires() takes a name alone, or a name, version and operator")
    return satisfies(name, version, op)
