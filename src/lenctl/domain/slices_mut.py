"""Mutable constrained slices.

Same algorithms as :mod:`lenctl.domain.slices`, over a writable borrow.
Each mutable wrapper subclasses its immutable counterpart, so a
``FixedMut`` is accepted wherever a ``Fixed`` is.

Item and slice assignment go through the underlying ``memoryview``, which
refuses any assignment that would change the length.

A mutable wrapper expects to be the only reference used to touch the
buffer while it is live. Python cannot enforce that; callers must not
write through another alias in the meantime.
"""

from __future__ import annotations

from collections.abc import Buffer
from typing import Any, ClassVar

from lenctl.domain.slices import ConstrainedSlice, Fixed, Ranged, Relative
from lenctl.domain.type_math import Operator


class _WriteAccess(ConstrainedSlice):
    """Write accessors for eagerly validated slices."""

    writable: ClassVar[bool] = True

    def __setitem__(self, index: int | slice, value: Any) -> None:
        self._live()[index] = value

    @property
    def slice_mut(self) -> memoryview:
        """Writable view of the elements, valid while the wrapper is live."""
        return self._live()


class FixedMut(_WriteAccess, Fixed):
    """A writable slice whose length is exactly ``value``."""


class RangedMut(_WriteAccess, Ranged):
    """A writable slice whose length lies in ``[start, end)``."""


class RelativeMut(Relative):
    """A writable slice checked against its relation on consumption.

    There is no write access before the check: :meth:`slice_mut` is the
    only way to obtain a writable view.
    """

    writable: ClassVar[bool] = True

    def slice_mut(self, relative_to: int) -> memoryview:
        """Validate against *relative_to*, consume, and return a writable view.

        Raises:
            ConstraintViolation: The length does not match; the wrapper
                stays live.
            OperatorFailure: Propagated unchanged; the wrapper stays live.
            AlreadyConsumedError: The wrapper was already consumed.
        """
        self.validate_against(relative_to)
        return self._take()


def try_fixed_mut(buffer: Buffer, value: int) -> FixedMut:
    return FixedMut(buffer, value)


def try_ranged_mut(buffer: Buffer, start: int, end: int) -> RangedMut:
    return RangedMut(buffer, start, end)


def relative_mut_from(buffer: Buffer, operator: Operator | str, by: int) -> RelativeMut:
    return RelativeMut(buffer, operator, by)


def relative_mut_try_from(
    buffer: Buffer, operator: Operator | str, by: int, relative_to: int
) -> RelativeMut:
    return RelativeMut.try_from(buffer, operator, by, relative_to)
