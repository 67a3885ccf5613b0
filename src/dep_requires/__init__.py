"""
dep-requires: check that external executables exist and report a suitable version.

Usage::

    from dep_requires import requires, GREATER, EQUAL

    if requires("git") and requires("git", "2.30.0", GREATER | EQUAL):
        ...
"""

__version__ = "1.0.0"

from .comparator import compare_versions
from .error_handling import VersionException
from .operators import EQUAL, GREATER, LESS, Operator, decode_operator
from .prober import extract_version, probe_version
from .api import exists, requires, satisfies

__all__ = [
    "EQUAL",
    "GREATER",
    "LESS",
    "Operator",
    "VersionException",
    "compare_versions",
    "decode_operator",
    "exists",
    "extract_version",
    "probe_version",
    "requires",
    "satisfies",
]
