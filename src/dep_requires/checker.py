"""
Batch checking of declared tool requirements.

Evaluates each Dependency and records the outcome instead of raising, so a
whole manifest can be reported at once.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .cli_config import ProbeConfig
from .comparator import compare_versions
from .dependency import Dependency
from .error_handling import ErrorCategory, VersionException, get_error_handler
from .operators import decode_operator
from .prober import probe_version
from .resolver import resolve_executable
from .structured_logging import get_checker_logger, log_check_result


class CheckStatus(Enum):
    """Outcome of checking one dependency."""

    SATISFIED = "SATISFIED"  # Present and, if requested, version matches
    UNSATISFIED = "UNSATISFIED"  # Present but version does not match
    MISSING = "MISSING"  # Not found on PATH
    ERROR = "ERROR"  # Version undetectable or constraint invalid


@dataclass(frozen=True)
class CheckResult:
    """Result of checking a single dependency."""

    dependency: Dependency
    status: CheckStatus
    path: Optional[str] = None
    found_version: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == CheckStatus.SATISFIED


@dataclass(frozen=True)
class CheckReport:
    """Results for a batch of dependencies."""

    results: List[CheckResult] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    def by_status(self, status: CheckStatus) -> List[CheckResult]:
        return [r for r in self.results if r.status == status]

    @property
    def satisfied(self) -> List[CheckResult]:
        return self.by_status(CheckStatus.SATISFIED)

    @property
    def failures(self) -> List[CheckResult]:
        """Every result that is not satisfied."""
        return [r for r in self.results if not r.ok]

    @property
    def all_satisfied(self) -> bool:
        return not self.failures


class RequirementChecker:
    """Evaluates Dependency records against the local machine."""

    def __init__(self, probe_config: Optional[ProbeConfig] = None):
        self.probe_config = probe_config or ProbeConfig()

    def check(self, dependency: Dependency) -> CheckResult:
        """Check one dependency; never raises VersionException."""
        try:
            path = resolve_executable(dependency.name)
        except VersionException as e:
            result = CheckResult(dependency, CheckStatus.MISSING, message=e.message)
            self._log(result)
            return result

        if dependency.is_existence_only:
            result = CheckResult(
                dependency, CheckStatus.SATISFIED, path=path, message="found"
            )
            self._log(result)
            return result

        found_version = None
        try:
            found_version = probe_version(dependency.name, self.probe_config)
            token = decode_operator(dependency.operator)
            matched = compare_versions(found_version, dependency.version, token)
        except VersionException as e:
            if e.category == ErrorCategory.RESOLUTION:
                status = CheckStatus.MISSING
            else:
                status = CheckStatus.ERROR
                get_error_handler().report_exception(
                    e, "checker", "check", details={"dependency": dependency.name}
                )
            result = CheckResult(
                dependency,
                status,
                path=path,
                found_version=found_version,
                message=e.message,
            )
            self._log(result)
            return result

        if matched:
            status = CheckStatus.SATISFIED
            message = f"{found_version} {token} {dependency.version}"
        else:
            status = CheckStatus.UNSATISFIED
            message = f"{found_version} is not {token} {dependency.version}"

        result = CheckResult(
            dependency, status, path=path, found_version=found_version, message=message
        )
        self._log(result)
        return result

    def check_all(self, dependencies: List[Dependency]) -> CheckReport:
        """Check dependencies sequentially, in order."""
        logger = get_checker_logger()
        if not dependencies:
            logger.info("check_empty", total_dependencies=0)
            return CheckReport()

        start = time.monotonic()
        logger.info("check_started", total_dependencies=len(dependencies))

        results = [self.check(dependency) for dependency in dependencies]

        duration_ms = int((time.monotonic() - start) * 1000)
        report = CheckReport(results=results, duration_ms=duration_ms)
        logger.info(
            "check_completed",
            total_dependencies=report.total,
            satisfied=len(report.satisfied),
            failed=len(report.failures),
            duration_ms=duration_ms,
        )
        return report

    def _log(self, result: CheckResult) -> None:
        log_check_result(
            result.dependency.name,
            result.status.value,
            found_version=result.found_version,
            requirement=result.dependency.requirement,
        )


def get_requirement_checker(
    probe_config: Optional[ProbeConfig] = None,
) -> RequirementChecker:
    """Create a checker using the given or built-in probe settings."""
    return RequirementChecker(probe_config)
