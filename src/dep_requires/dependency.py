from dataclasses import dataclass
from typing import Optional

from .error_handling import VersionException
from .operators import Operator, decode_operator


@dataclass(frozen=True)
class Dependency:
    """A declared requirement on an external executable."""

    name: str
    version: Optional[str] = None
    operator: Optional[Operator] = None
    source_file: str = "<inline>"

    @property
    def is_existence_only(self) -> bool:
        return self.version is None or self.operator is None

    @property
    def requirement(self) -> str:
        """Human-readable constraint, e.g. ``>=2.30``."""
        if self.is_existence_only:
            return "*"
        try:
            token = decode_operator(self.operator)
        except VersionException:
            token = f"<invalid {int(self.operator)}> "
        return f"{token}{self.version}"
