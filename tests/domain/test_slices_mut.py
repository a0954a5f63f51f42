"""Tests for the mutable FixedMut/RangedMut/RelativeMut constrained slices."""

import pytest

from lenctl.domain.errors import (
    AlreadyConsumedError,
    ConstraintViolation,
    LenConstraintError,
    Overflow,
)
from lenctl.domain.slices import Fixed, Ranged, Relative
from lenctl.domain.slices_mut import (
    FixedMut,
    RangedMut,
    RelativeMut,
    relative_mut_from,
    relative_mut_try_from,
    try_fixed_mut,
    try_ranged_mut,
)
from lenctl.domain.type_math import MAX_LENGTH, Num, Operator


def s(length: int) -> bytearray:
    return bytearray([7]) * length


class TestFixedMut:
    @pytest.mark.parametrize(("value", "length"), [(Num.N4, 4), (Num.N8, 8)])
    def test_accepts(self, value: int, length: int) -> None:
        assert len(try_fixed_mut(s(length), value)) == length

    @pytest.mark.parametrize(("value", "length"), [(4, 3), (4, 5), (8, 7), (8, 9)])
    def test_rejects(self, value: int, length: int) -> None:
        with pytest.raises(ConstraintViolation):
            FixedMut(s(length), value)

    def test_requires_writable_buffer(self) -> None:
        with pytest.raises(TypeError, match="read-only"):
            FixedMut(bytes(4), 4)

    def test_writes_through(self) -> None:
        buf = s(4)
        wrapper = FixedMut(buf, 4)
        wrapper[0] = 1
        wrapper[1:3] = b"\x02\x03"
        wrapper.slice_mut[3] = 4
        wrapper.release()
        assert buf == bytearray([1, 2, 3, 4])

    def test_cannot_change_length(self) -> None:
        wrapper = FixedMut(s(4), 4)
        with pytest.raises(ValueError):
            wrapper[0:2] = b"\x00"
        assert len(wrapper) == 4

    def test_read_view_is_read_only(self) -> None:
        wrapper = FixedMut(s(4), 4)
        assert wrapper.slice.readonly
        assert not wrapper.slice_mut.readonly

    def test_into_is_writable(self) -> None:
        buf = s(4)
        view = FixedMut(buf, 4).into()
        view[0] = 9
        assert buf[0] == 9

    def test_is_a_fixed(self) -> None:
        assert isinstance(FixedMut(s(4), 4), Fixed)


class TestRangedMut:
    @pytest.mark.parametrize("length", [4, 7])
    def test_accepts(self, length: int) -> None:
        wrapper = try_ranged_mut(s(length), Num.N4, Num.N8)
        assert isinstance(wrapper, Ranged)
        assert len(wrapper) == length

    @pytest.mark.parametrize("length", [3, 8])
    def test_rejects(self, length: int) -> None:
        with pytest.raises(ConstraintViolation):
            RangedMut(s(length), 4, 8)


class TestRelativeMut:
    @pytest.mark.parametrize(
        ("by", "length", "relative_to"),
        [(Num.N4, 4, 8), (Num.N8, 9, 17)],
    )
    def test_slice_mut(self, by: int, length: int, relative_to: int) -> None:
        buf = s(length)
        view = relative_mut_from(buf, Operator.SUB, by).slice_mut(relative_to)
        view[0] = 0
        assert buf[0] == 0

    @pytest.mark.parametrize(
        ("by", "length", "relative_to"),
        [(4, 0, 3), (4, 3, 8), (8, 9, 16)],
    )
    def test_slice_mut_err(self, by: int, length: int, relative_to: int) -> None:
        wrapper = RelativeMut(s(length), Operator.SUB, by)
        with pytest.raises(LenConstraintError):
            wrapper.slice_mut(relative_to)
        assert not wrapper.consumed

    def test_immutable_consumption(self) -> None:
        view = RelativeMut(s(16), Operator.ADD, 16).slice(0)
        assert view.readonly
        assert len(view) == 16

    def test_no_write_before_check(self) -> None:
        wrapper = RelativeMut(s(16), Operator.ADD, 16)
        with pytest.raises(TypeError):
            wrapper[0] = 1  # type: ignore[index]

    def test_no_write_through_subview(self) -> None:
        buf = s(4)
        wrapper = RelativeMut(buf, Operator.ADD, 16)
        view = wrapper[:]
        assert view.readonly
        with pytest.raises(TypeError):
            view[0] = 1
        with pytest.raises(TypeError):
            wrapper[1:3][0] = 9
        assert buf == s(4)
        assert wrapper[0] == 7
        with pytest.raises(ConstraintViolation):
            wrapper.slice_mut(0)

    def test_subview_writable_after_check(self) -> None:
        buf = s(16)
        out = RelativeMut(buf, Operator.ADD, 16).slice_mut(0)
        out[:2] = b"\x01\x02"
        assert buf[:2] == b"\x01\x02"

    def test_one_shot(self) -> None:
        wrapper = RelativeMut(s(16), Operator.ADD, 16)
        wrapper.slice_mut(0)
        with pytest.raises(AlreadyConsumedError):
            wrapper.slice_mut(0)
        with pytest.raises(AlreadyConsumedError):
            wrapper.slice(0)

    def test_overflow_propagates(self) -> None:
        wrapper = RelativeMut(s(1), Operator.ADD, 1)
        with pytest.raises(Overflow):
            wrapper.slice_mut(MAX_LENGTH)

    def test_try_from(self) -> None:
        wrapper = relative_mut_try_from(s(20), Operator.ADD, 16, 4)
        assert isinstance(wrapper, Relative)
        assert len(wrapper.slice_mut(4)) == 20

    def test_requires_writable_buffer(self) -> None:
        with pytest.raises(TypeError):
            RelativeMut(b"abc", Operator.ADD, 0)
