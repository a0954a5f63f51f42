"""Length constraint descriptors.

Three frozen value types describe what a buffer's length must be:

- :class:`FixedLen`: exactly ``value``.
- :class:`RangedLen`: ``start <= length < end``.
- :class:`RelativeLen`: ``operator(relative_to, by)`` for a length that
  is only supplied at check time.

Descriptors are plain data. The wrappers in :mod:`lenctl.domain.slices`
carry one alongside the borrowed buffer and delegate every check here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from lenctl.domain.errors import ConstraintViolation, OperatorFailure, PreconditionError
from lenctl.domain.type_math import MAX_LENGTH, Operator, require_length

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixedLen:
    """The length must equal ``value``."""

    value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", require_length(self.value, "fixed length"))

    def describe(self) -> str:
        return f"Fixed<{self.value}>"

    def is_satisfied_by(self, length: int) -> bool:
        return length == self.value

    def check(self, length: int) -> None:
        """Raise :class:`ConstraintViolation` unless *length* equals ``value``."""
        if not self.is_satisfied_by(length):
            violation = ConstraintViolation.fixed(self.value, length)
            logger.debug("%s", violation, extra=violation.to_dict())
            raise violation


@dataclass(frozen=True)
class RangedLen:
    """The length must lie in the half-open range ``[start, end)``."""

    start: int
    end: int

    def __post_init__(self) -> None:
        start = require_length(self.start, "range start")
        end = require_length(self.end, "range end")
        if start >= end:
            msg = f"Range start must be below its end, got {start}..{end}"
            raise PreconditionError(msg)
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def describe(self) -> str:
        return f"Range<{self.start} .. {self.end}>"

    def is_satisfied_by(self, length: int) -> bool:
        return self.start <= length < self.end

    def check(self, length: int) -> None:
        if not self.is_satisfied_by(length):
            violation = ConstraintViolation.ranged(self.start, self.end, length)
            logger.debug("%s", violation, extra=violation.to_dict())
            raise violation


@dataclass(frozen=True)
class RelativeLen:
    """The length must equal ``operator(relative_to, by)``.

    ``relative_to`` is not part of the descriptor: it is frequently unknown
    when the buffer is first wrapped and is supplied to :meth:`check`.
    """

    operator: Operator
    by: int
    limit: int = field(default=MAX_LENGTH, compare=False)

    def __post_init__(self) -> None:
        operator = self.operator
        if not isinstance(operator, Operator):
            operator = Operator.parse(str(operator))
        object.__setattr__(self, "operator", operator)
        object.__setattr__(self, "by", require_length(self.by, "relative offset"))

    def describe(self) -> str:
        return f"{self.operator.label}({self.by})"

    def expected(self, relative_to: int) -> int:
        """The absolute length required for *relative_to*.

        Raises:
            OperatorFailure: The relation is inapplicable to *relative_to*.
        """
        return self.operator.apply(relative_to, self.by, limit=self.limit)

    def is_satisfied_by(self, length: int, relative_to: int) -> bool:
        """Like :meth:`check` but returns a bool; operator failures still raise."""
        return length == self.expected(relative_to)

    def check(self, length: int, relative_to: int) -> None:
        """Validate *length* against the relation without consuming anything.

        Raises:
            OperatorFailure: Propagated unchanged from the operator.
            ConstraintViolation: The computed length and *length* disagree.
        """
        try:
            satisfied = self.is_satisfied_by(length, relative_to)
        except OperatorFailure as exc:
            logger.debug(
                "relation %s inapplicable to %d: %s",
                self.describe(),
                relative_to,
                exc,
                extra={
                    "constraint": self.describe(),
                    "relative_to": relative_to,
                    "failure": type(exc).__name__,
                },
            )
            raise
        if not satisfied:
            violation = ConstraintViolation.relative(
                self.operator, self.by, length, relative_to, limit=self.limit
            )
            logger.debug(
                "%s (relative to %d)",
                violation,
                relative_to,
                extra={**violation.to_dict(), "relative_to": relative_to},
            )
            raise violation


Constraint = FixedLen | RangedLen | RelativeLen


# ---------------------------------------------------------------------------
# Textual form (config files and the CLI)
# ---------------------------------------------------------------------------

_RANGE_PATTERN = re.compile(r"^\s*(\d+)\s*\.\.\s*(\d+)\s*$")
_RELATION_PATTERN = re.compile(r"^\s*([A-Za-z]+|[-+*/])\s*:?\s*(\d+)\s*$")


def parse_relation(text: str, *, limit: int = MAX_LENGTH) -> RelativeLen:
    """Parse ``"add:16"``, ``"sub:4"``, ``"+16"`` or ``"/2"`` into a :class:`RelativeLen`.

    Raises:
        ValueError: If *text* is not a relation.
    """
    match = _RELATION_PATTERN.match(text)
    if match is None:
        msg = f"Invalid relation {text!r}; expected OP:BY such as 'add:16'"
        raise ValueError(msg)
    return RelativeLen(Operator.parse(match.group(1)), int(match.group(2)), limit=limit)


def parse_constraint(text: str, *, limit: int = MAX_LENGTH) -> Constraint:
    """Parse a constraint from its textual form.

    - ``"32"``: :class:`FixedLen`
    - ``"0..65536"``: :class:`RangedLen`
    - ``"add:16"``: :class:`RelativeLen`

    Raises:
        ValueError: If *text* matches none of the forms, or a range is
            empty.
    """
    stripped = text.strip()
    if stripped.isdecimal():
        return FixedLen(int(stripped))

    match = _RANGE_PATTERN.match(stripped)
    if match is not None:
        start, end = int(match.group(1)), int(match.group(2))
        if start >= end:
            msg = f"Invalid range {text!r}; start must be below end"
            raise ValueError(msg)
        return RangedLen(start, end)

    return parse_relation(stripped, limit=limit)
