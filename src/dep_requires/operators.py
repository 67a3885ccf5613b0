"""
Comparison operators for version checks.

Operators are bit flags so callers can write ``GREATER | EQUAL``. Only five
masks are meaningful; everything else is rejected when decoded.
"""

import re
from enum import IntFlag
from typing import List, Tuple, Union

from .error_handling import ErrorCategory, VersionException


class Operator(IntFlag):
    """Composable comparison flags."""

    LESS = 0x02
    GREATER = 0x04
    EQUAL = 0x08


LESS = Operator.LESS
GREATER = Operator.GREATER
EQUAL = Operator.EQUAL
LESS_OR_EQUAL = LESS | EQUAL
GREATER_OR_EQUAL = GREATER | EQUAL

# Composed masks first so they win over their single-flag parts
OPERATOR_TOKENS: List[Tuple[int, str]] = [
    (GREATER_OR_EQUAL, ">="),
    (LESS_OR_EQUAL, "<="),
    (EQUAL, "="),
    (GREATER, ">"),
    (LESS, "<"),
]

_TOKEN_ALIASES = {"==": "="}

_CONSTRAINT_RE = re.compile(r"^\s*(>=|<=|==|=|>|<)?\s*(v?\d+(?:\.\d+){0,2})\s*$")


def decode_operator(bitmask: Union[Operator, int]) -> str:
    """
    Decode an operator bitmask into its comparison token.

    Args:
        bitmask: Operator flags, e.g. ``GREATER | EQUAL``

    Returns:
        str: One of ``>=``, ``<=``, ``=``, ``>``, ``<``

    Raises:
        VersionException: If the mask is not one of the five valid values
    """
    if isinstance(bitmask, bool) or not isinstance(bitmask, int):
        raise VersionException(f'"{bitmask}" is invalid.', ErrorCategory.OPERATOR)
    value = int(bitmask)
    for mask, token in OPERATOR_TOKENS:
        if int(mask) == value:
            return token
    raise VersionException(f'"{value}" is invalid.', ErrorCategory.OPERATOR)


def parse_operator(token: str) -> Operator:
    """Map a comparison token such as ``>=`` back to its operator flags."""
    token = _TOKEN_ALIASES.get(token.strip(), token.strip())
    for mask, known in OPERATOR_TOKENS:
        if known == token:
            return Operator(mask)
    raise VersionException(f'"{token}" is invalid.', ErrorCategory.OPERATOR)


def parse_constraint(text: str) -> Tuple[Operator, str]:
    """
    Split a constraint like ``>=2.30`` into operator and version.

    A bare version means equality.
    """
    match = _CONSTRAINT_RE.match(text or "")
    if not match:
        raise VersionException(
            f'"{text}" is not a valid version constraint.', ErrorCategory.VALIDATION
        )
    token, version = match.groups()
    operator = parse_operator(token) if token else EQUAL
    return operator, version
