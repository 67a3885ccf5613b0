"""
Executable resolution on the system search path.
"""

import os
import shutil

from .error_handling import ErrorCategory, VersionException
from .structured_logging import get_resolver_logger


def resolve_executable(name: str) -> str:
    """
    Find the absolute path of an executable.

    Args:
        name: Bare executable name, or a path to an executable

    Returns:
        str: Absolute path to the executable

    Raises:
        VersionException: If nothing on PATH matches
    """
    logger = get_resolver_logger()

    path = shutil.which(name) if name else None
    if path is None:
        logger.debug("executable_not_found", executable=name)
        raise VersionException(f'"{name}" not found.', ErrorCategory.RESOLUTION)

    path = os.path.abspath(path)
    logger.debug("executable_resolved", executable=name, path=path)
    return path


def is_resolvable(name: str) -> bool:
    """Return True if ``name`` resolves to an executable."""
    try:
        resolve_executable(name)
    except VersionException:
        return False
    return True
