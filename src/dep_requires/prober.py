"""
Version probing for external executables.

Tools disagree on how to ask for their version, so each candidate flag is
tried in turn until one prints something that looks like ``major.minor[.patch]``.
"""

import re
import subprocess
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .cli_config import ProbeConfig
from .error_handling import ErrorCategory, VersionException
from .resolver import resolve_executable
from .structured_logging import log_probe_attempt, log_version_detected

VERSION_ARGUMENTS: Tuple[str, ...] = ("-v", "--v", "-version", "--version", "-V", "--V")

VERSION_PATTERN = re.compile(r"v?\d+\.\d+(?:\.\d+)?")


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of invoking the executable with one candidate flag."""

    argument: str
    output: Optional[str] = None
    error: Optional[str] = None

    @property
    def version(self) -> Optional[str]:
        if self.output is None:
            return None
        return extract_version(self.output)


def extract_version(text: str) -> Optional[str]:
    """
    Return the first version token found in ``text``, without its ``v`` prefix.

    >>> extract_version("iptables-save v1.8.4 (legacy)")
    '1.8.4'
    """
    match = VERSION_PATTERN.search(text or "")
    if not match:
        return None
    return re.sub(r"^[vV]", "", match.group(0).strip()).strip()


def run_probe(path: str, argument: str, probe_config: ProbeConfig) -> ProbeOutcome:
    """Invoke ``path argument`` once and capture its output."""
    try:
        completed = subprocess.run(
            [path, argument],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if probe_config.merge_stderr else subprocess.DEVNULL,
            timeout=probe_config.timeout_seconds,
            encoding=probe_config.encoding,
            errors="replace",
            check=False,
        )
    except (OSError, ValueError, subprocess.SubprocessError) as e:
        return ProbeOutcome(argument=argument, error=f"{type(e).__name__}: {e}")

    if completed.returncode != 0:
        return ProbeOutcome(
            argument=argument, error=f"exited with status {completed.returncode}"
        )

    return ProbeOutcome(argument=argument, output=completed.stdout or "")


def iter_probe_outcomes(
    path: str, probe_config: Optional[ProbeConfig] = None
) -> Iterator[ProbeOutcome]:
    """Lazily yield one outcome per candidate flag, in order."""
    probe_config = probe_config or ProbeConfig()
    for argument in VERSION_ARGUMENTS:
        yield run_probe(path, argument, probe_config)


def probe_version(name_or_path: str, probe_config: Optional[ProbeConfig] = None) -> str:
    """
    Detect the version of an executable.

    The argument is resolved again even when it is already a path, so a tool
    removed since an earlier lookup fails here with a not-found error.

    Args:
        name_or_path: Executable name or path
        probe_config: Probe settings, built-in defaults when omitted

    Returns:
        str: Normalized version such as ``1.8.4``

    Raises:
        VersionException: If the executable is missing or no flag yields a version
    """
    path = resolve_executable(name_or_path)

    for outcome in iter_probe_outcomes(path, probe_config):
        version = outcome.version
        log_probe_attempt(path, outcome.argument, version is not None, outcome.error)
        if version:
            log_version_detected(path, outcome.argument, version)
            return version

    raise VersionException(
        f'"{name_or_path}" version not found.', ErrorCategory.PROBE
    )
