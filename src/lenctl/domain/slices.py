"""Immutable constrained slices.

A constrained slice couples a borrowed buffer with a length constraint.
The borrow is a read-only ``memoryview`` over any object that supports
the buffer protocol; holding it keeps a ``bytearray`` from being resized,
so a length validated at construction stays valid.

- :class:`Fixed` / :class:`Ranged` validate eagerly: construction fails
  with :class:`ConstraintViolation` and, once built, the invariant holds
  until the slice is consumed.
- :class:`Relative` validates lazily: construction never fails on length
  and the check happens when :meth:`Relative.slice` consumes the wrapper,
  because the length it relates to is often not known yet.

Every wrapper is two-state: live, then consumed (by ``into()``,
``slice()``, ``release()`` or leaving a ``with`` block). A consumed
wrapper raises :class:`AlreadyConsumedError` on any further access.
"""

from __future__ import annotations

from collections.abc import Buffer, Iterator
from typing import Any, ClassVar, Self

from lenctl.domain.constraints import Constraint, FixedLen, RangedLen, RelativeLen
from lenctl.domain.errors import AlreadyConsumedError
from lenctl.domain.type_math import Operator

# ---------------------------------------------------------------------------
# Shared plumbing
# ---------------------------------------------------------------------------


def borrow(buffer: Buffer, *, writable: bool) -> memoryview:
    """Take a one-dimensional view of *buffer*.

    Raises:
        TypeError: *buffer* does not support the buffer protocol, is not
            one-dimensional, or is read-only while *writable* is requested.
    """
    view = memoryview(buffer)
    if view.ndim != 1:
        view.release()
        msg = f"Expected a one-dimensional buffer, got {view.ndim} dimensions"
        raise TypeError(msg)
    if writable:
        if view.readonly:
            view.release()
            msg = f"{type(buffer).__name__} is read-only; a mutable slice needs a writable buffer"
            raise TypeError(msg)
        return view
    readonly = view.toreadonly()
    view.release()
    return readonly


class ConstrainedSlice:
    """Base for all constrained slices: length, read access and consumption."""

    writable: ClassVar[bool] = False

    def __init__(self, view: memoryview, constraint: Constraint) -> None:
        self._view: memoryview | None = view
        self._constraint = constraint

    @property
    def constraint(self) -> Constraint:
        return self._constraint

    @property
    def consumed(self) -> bool:
        return self._view is None

    def _live(self) -> memoryview:
        if self._view is None:
            msg = f"{type(self).__name__} has already been consumed"
            raise AlreadyConsumedError(msg)
        return self._view

    def _take(self) -> memoryview:
        view = self._live()
        self._view = None
        return view

    @classmethod
    def _borrow_checked(cls, buffer: Buffer, constraint: FixedLen | RangedLen) -> memoryview:
        view = borrow(buffer, writable=cls.writable)
        try:
            constraint.check(len(view))
        except BaseException:
            view.release()
            raise
        return view

    # --- pass-through accessors ---

    def __len__(self) -> int:
        return len(self._live())

    def __getitem__(self, index: int | slice) -> Any:
        return self._live()[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._live())

    def __bytes__(self) -> bytes:
        return self._live().tobytes()

    def tobytes(self) -> bytes:
        return self._live().tobytes()

    def tolist(self) -> list[Any]:
        return self._live().tolist()

    @property
    def slice(self) -> memoryview:
        """Read-only view of the elements, valid while the wrapper is live."""
        view = self._live()
        return view if view.readonly else view.toreadonly()

    # --- consumption ---

    def release(self) -> None:
        """End the borrow without handing the buffer back. Idempotent."""
        if self._view is not None:
            self._view.release()
            self._view = None

    def __enter__(self) -> Self:
        self._live()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __repr__(self) -> str:
        if self._view is None:
            return f"{type(self).__name__}({self._constraint.describe()}, consumed)"
        return f"{type(self).__name__}({self._constraint.describe()}, len={len(self._view)})"


class _EagerSlice(ConstrainedSlice):
    """A slice whose constraint held at construction and holds until consumed."""

    def into(self) -> memoryview:
        """Consume the wrapper and return the borrowed view.

        Always succeeds on a live wrapper: the invariant already holds.
        """
        return self._take()


# ---------------------------------------------------------------------------
# Eager wrappers
# ---------------------------------------------------------------------------


class Fixed(_EagerSlice):
    """A slice whose length is exactly ``value``.

    Usage::

        key = Fixed(key_bytes, Num.N32)   # raises ConstraintViolation on mismatch
    """

    def __init__(self, buffer: Buffer, value: int) -> None:
        constraint = FixedLen(value)
        super().__init__(self._borrow_checked(buffer, constraint), constraint)

    @classmethod
    def from_constraint(cls, buffer: Buffer, constraint: FixedLen) -> Self:
        return cls(buffer, constraint.value)


class Ranged(_EagerSlice):
    """A slice whose length lies in ``[start, end)``."""

    def __init__(self, buffer: Buffer, start: int, end: int) -> None:
        constraint = RangedLen(start, end)
        super().__init__(self._borrow_checked(buffer, constraint), constraint)

    @classmethod
    def from_constraint(cls, buffer: Buffer, constraint: RangedLen) -> Self:
        return cls(buffer, constraint.start, constraint.end)


# ---------------------------------------------------------------------------
# Lazy wrapper
# ---------------------------------------------------------------------------


class Relative(ConstrainedSlice):
    """A slice whose length must equal ``operator(relative_to, by)``.

    Construction never checks the length. The relation is checked by
    :meth:`slice`, which consumes the wrapper on success. On failure the
    wrapper stays live so the caller can still release or retry it.
    """

    def __init__(self, buffer: Buffer, operator: Operator | str, by: int) -> None:
        super().__init__(borrow(buffer, writable=self.writable), RelativeLen(operator, by))

    @property
    def constraint(self) -> RelativeLen:
        assert isinstance(self._constraint, RelativeLen)
        return self._constraint

    @classmethod
    def from_constraint(cls, buffer: Buffer, constraint: RelativeLen) -> Self:
        wrapper = cls(buffer, constraint.operator, constraint.by)
        wrapper._constraint = constraint
        return wrapper

    @classmethod
    def try_from(
        cls, buffer: Buffer, operator: Operator | str, by: int, relative_to: int
    ) -> Self:
        """Wrap *buffer* after validating it against *relative_to* up front.

        Raises:
            ConstraintViolation: The length does not match.
            OperatorFailure: The relation cannot be evaluated.
        """
        wrapper = cls(buffer, operator, by)
        try:
            wrapper.validate_against(relative_to)
        except BaseException:
            wrapper.release()
            raise
        return wrapper

    @staticmethod
    def validate(length: int, operator: Operator | str, by: int, relative_to: int) -> None:
        """Check *length* against the relation without wrapping anything."""
        RelativeLen(operator, by).check(length, relative_to)

    def __getitem__(self, index: int | slice) -> Any:
        """Element or read-only sub-view; nothing is writable before the check."""
        item = super().__getitem__(index)
        if isinstance(item, memoryview) and not item.readonly:
            readonly = item.toreadonly()
            item.release()
            return readonly
        return item

    def validate_against(self, relative_to: int) -> None:
        """Check the wrapped length against *relative_to* without consuming."""
        self.constraint.check(len(self._live()), relative_to)

    def slice(self, relative_to: int) -> memoryview:  # type: ignore[override]
        """Validate against *relative_to*, consume, and return a read-only view.

        Raises:
            ConstraintViolation: The length does not match; the wrapper
                stays live.
            OperatorFailure: Propagated unchanged; the wrapper stays live.
            AlreadyConsumedError: The wrapper was already consumed.
        """
        self.validate_against(relative_to)
        view = self._take()
        if view.readonly:
            return view
        readonly = view.toreadonly()
        view.release()
        return readonly


# ---------------------------------------------------------------------------
# Conversion entry points
# ---------------------------------------------------------------------------


def try_fixed(buffer: Buffer, value: int) -> Fixed:
    """Wrap *buffer* as a :class:`Fixed` slice or raise the violation."""
    return Fixed(buffer, value)


def try_ranged(buffer: Buffer, start: int, end: int) -> Ranged:
    """Wrap *buffer* as a :class:`Ranged` slice or raise the violation."""
    return Ranged(buffer, start, end)


def relative_from(buffer: Buffer, operator: Operator | str, by: int) -> Relative:
    """Wrap *buffer* lazily; the relation is checked on :meth:`Relative.slice`."""
    return Relative(buffer, operator, by)


def relative_try_from(
    buffer: Buffer, operator: Operator | str, by: int, relative_to: int
) -> Relative:
    """Wrap *buffer* as a :class:`Relative` slice, validating it immediately."""
    return Relative.try_from(buffer, operator, by, relative_to)
