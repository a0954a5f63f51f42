"""Error taxonomy and the constraint-violation diagnostic model.

Recoverable failures derive from :class:`LenConstraintError`:

- :class:`ConstraintViolation`: an actual length disagrees with a declared
  constraint. Carries the constraint text and a signed ``by`` delta.
- :class:`OperatorFailure`: the arithmetic relation behind a relative
  constraint cannot be evaluated (``Overflow``, ``Underflow``,
  ``DivideByZero``).

Programmer errors are deliberately outside that hierarchy so an
``except LenConstraintError`` never hides them:

- :class:`PreconditionError`: an invariant of the validation logic itself
  was broken (e.g. a violation built for a length that satisfies its
  constraint, or a range declared with ``start >= end``).
- :class:`AlreadyConsumedError`: a one-shot wrapper was used after
  consumption.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lenctl.domain.type_math import Operator


class PreconditionError(AssertionError):
    """A bug in the calling code. Never caught by ``except LenConstraintError``."""


class AlreadyConsumedError(RuntimeError):
    """A constrained slice was accessed after it was consumed or released."""


class LenConstraintError(Exception):
    """Base class for recoverable length-constraint failures."""


# ---------------------------------------------------------------------------
# Operator failures
# ---------------------------------------------------------------------------


class OperatorFailure(LenConstraintError):
    """The relation ``lhs <op> rhs`` could not be evaluated.

    Attributes:
        operator: The operator that failed.
        lhs: Left operand (the relative-to length).
        rhs: Right operand (the constraint's ``by`` value).
    """

    reason = "Operator failure"

    def __init__(self, operator: Operator, lhs: int, rhs: int) -> None:
        self.operator = operator
        self.lhs = lhs
        self.rhs = rhs
        super().__init__(self._message())

    def _message(self) -> str:
        return f"{self.reason}: {self.lhs} {self.operator.symbol} {self.rhs}"


class Overflow(OperatorFailure):
    reason = "Integer overflow"

    def __init__(self, operator: Operator, lhs: int, rhs: int, *, limit: int) -> None:
        self.limit = limit
        super().__init__(operator, lhs, rhs)

    def _message(self) -> str:
        return f"{super()._message()} exceeds {self.limit}"


class Underflow(OperatorFailure):
    reason = "Integer underflow"


class DivideByZero(OperatorFailure):
    reason = "Division by zero"


# ---------------------------------------------------------------------------
# Constraint violations
# ---------------------------------------------------------------------------


class ConstraintViolation(LenConstraintError):
    """A length disagrees with its declared constraint.

    ``by`` is ``actual - boundary`` where the boundary is the nearest valid
    length: positive means too long, negative means too short. It is never
    zero; building a violation for a satisfying length raises
    :class:`PreconditionError`.

    Attributes:
        constraint: Human-readable constraint text (``Fixed<32>``,
            ``Range<0 .. 65536>``, ``Add(16)``).
        by: Signed distance from the nearest valid length.
        actual: The offending length, when known.
    """

    def __init__(self, constraint: str, by: int, actual: int | None = None) -> None:
        if by == 0:
            msg = f"Cannot construct ConstraintViolation for valid constraint {constraint}"
            raise PreconditionError(msg)
        self.constraint = constraint
        self.by = by
        self.actual = actual
        super().__init__(f"The length constraint `{constraint}` was violated by {by:+d}")

    @classmethod
    def fixed(cls, expected: int, actual: int) -> ConstraintViolation:
        """Violation of ``Fixed<expected>``."""
        return cls(f"Fixed<{expected}>", actual - expected, actual)

    @classmethod
    def ranged(cls, start: int, end: int, actual: int) -> ConstraintViolation:
        """Violation of the half-open ``Range<start .. end>``."""
        if actual < start:
            by = actual - start
        elif actual >= end:
            by = actual - (end - 1)
        else:
            msg = f"Cannot construct ConstraintViolation for {actual} in {start}..{end}"
            raise PreconditionError(msg)
        return cls(f"Range<{start} .. {end}>", by, actual)

    @classmethod
    def relative(
        cls,
        operator: Operator,
        by: int,
        actual: int,
        relative_to: int,
        *,
        limit: int | None = None,
    ) -> ConstraintViolation:
        """Violation of ``<Op>(by)`` evaluated against *relative_to*.

        *limit* bounds ``add`` and ``mul`` results (default ``MAX_LENGTH``).

        Raises:
            OperatorFailure: The expected length cannot be computed. This
                propagates as-is and is never reported as a violation.
        """
        if limit is None:
            from lenctl.domain.type_math import MAX_LENGTH

            limit = MAX_LENGTH
        expected = operator.apply(relative_to, by, limit=limit)
        return cls(f"{operator.label}({by})", actual - expected, actual)

    def to_dict(self) -> dict[str, Any]:
        return {"constraint": self.constraint, "by": self.by, "actual": self.actual}
