"""Bulk conversion helpers.

Two ways to state several constraints at once:

``constraints()`` converts named buffers in one call and either returns
every wrapper or raises the first failure::

    c = constraints(
        buf=relative(buf, Operator.ADD, 16, mutable=True),
        plaintext=ranged(plaintext, 0, 65536),
        key=fixed(key, 32),
        nonce=fixed(nonce, 12),
    )
    out = c["buf"].slice_mut(len(c["plaintext"]))

``@length_checked`` reads the same constraints from ``Annotated``
parameter annotations and applies them before the function body runs::

    @length_checked
    def encrypt(
        buf: Annotated[RelativeMut, RelativeLen(Operator.ADD, 16)],
        plaintext: Annotated[Ranged, RangedLen(0, 65536)],
        key: Annotated[Fixed, FixedLen(32)],
        nonce: Annotated[bytes, FixedLen(12)],
    ) -> int: ...

A wrapper class as the base type means the argument arrives wrapped; any
other base type means the length is checked and the raw argument passed
through. ``RelativeTo("plaintext")`` next to a ``RelativeLen`` validates
eagerly against another parameter's length.
"""

from __future__ import annotations

import functools
import inspect
import logging
import types
from collections.abc import Buffer, Callable
from dataclasses import dataclass
from typing import Annotated, Any, ParamSpec, TypeVar, get_args, get_origin, get_type_hints

from lenctl.domain.constraints import Constraint, FixedLen, RangedLen, RelativeLen
from lenctl.domain.errors import LenConstraintError
from lenctl.domain.slices import ConstrainedSlice, Fixed, Ranged, Relative
from lenctl.domain.slices_mut import FixedMut, RangedMut, RelativeMut
from lenctl.domain.type_math import Operator

logger = logging.getLogger(__name__)

_WRAPPERS: dict[tuple[type, bool], type[ConstrainedSlice]] = {
    (FixedLen, False): Fixed,
    (FixedLen, True): FixedMut,
    (RangedLen, False): Ranged,
    (RangedLen, True): RangedMut,
    (RelativeLen, False): Relative,
    (RelativeLen, True): RelativeMut,
}


# ---------------------------------------------------------------------------
# Conversion requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConversionRequest:
    """One buffer and the constraint it should be wrapped under.

    ``relative_to`` only applies to relative constraints: when set the
    relation is checked immediately, otherwise the wrapper stays lazy.
    """

    buffer: Buffer
    constraint: Constraint
    mutable: bool = False
    relative_to: int | None = None

    @property
    def wrapper_type(self) -> type[ConstrainedSlice]:
        return _WRAPPERS[(type(self.constraint), self.mutable)]

    def convert(self) -> ConstrainedSlice:
        """Build the wrapper.

        Raises:
            ConstraintViolation: An eager check failed.
            OperatorFailure: An eager relative check could not be evaluated.
        """
        return _wrap(self.wrapper_type, self.buffer, self.constraint, self.relative_to)


def fixed(buffer: Buffer, value: int, *, mutable: bool = False) -> ConversionRequest:
    return ConversionRequest(buffer, FixedLen(value), mutable=mutable)


def ranged(buffer: Buffer, start: int, end: int, *, mutable: bool = False) -> ConversionRequest:
    return ConversionRequest(buffer, RangedLen(start, end), mutable=mutable)


def relative(
    buffer: Buffer,
    operator: Operator | str,
    by: int,
    *,
    relative_to: int | None = None,
    mutable: bool = False,
) -> ConversionRequest:
    return ConversionRequest(
        buffer, RelativeLen(operator, by), mutable=mutable, relative_to=relative_to
    )


def constraints(**requests: ConversionRequest) -> dict[str, ConstrainedSlice]:
    """Convert every request in declaration order.

    Returns a dict mapping each keyword to its wrapper. The first failure
    is re-raised with a note naming the offending keyword, and every
    wrapper built so far is released.
    """
    converted: dict[str, ConstrainedSlice] = {}
    try:
        for name, request in requests.items():
            try:
                converted[name] = request.convert()
            except LenConstraintError as exc:
                exc.add_note(f"while converting {name!r}")
                raise
    except BaseException:
        for wrapper in converted.values():
            wrapper.release()
        raise
    return converted


def _wrap(
    wrapper_type: type[ConstrainedSlice],
    buffer: Buffer,
    constraint: Constraint,
    relative_to: int | None,
) -> ConstrainedSlice:
    if isinstance(constraint, RelativeLen):
        assert issubclass(wrapper_type, Relative)
        wrapper = wrapper_type.from_constraint(buffer, constraint)
        if relative_to is not None:
            try:
                wrapper.validate_against(relative_to)
            except BaseException:
                wrapper.release()
                raise
        return wrapper
    assert issubclass(wrapper_type, Fixed | Ranged)
    return wrapper_type.from_constraint(buffer, constraint)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Signature-driven checks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RelativeTo:
    """Names the parameter whose length a ``RelativeLen`` is relative to.

    The referenced argument may be a buffer, a constrained slice, or a
    plain ``int`` length.
    """

    parameter: str


@dataclass(frozen=True)
class _ParamPlan:
    name: str
    constraint: Constraint
    wrapper_type: type[ConstrainedSlice] | None
    relative_to: str | None
    optional: bool


def _length_of(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, ConstrainedSlice):
        return len(value)
    with memoryview(value) as view:
        return len(view)


def _plan_for(name: str, hint: Any, parameters: set[str]) -> _ParamPlan | None:
    if get_origin(hint) is not Annotated:
        return None
    base, *metadata = get_args(hint)
    found = [m for m in metadata if isinstance(m, FixedLen | RangedLen | RelativeLen)]
    if not found:
        return None
    if len(found) > 1:
        msg = f"Parameter {name!r} declares more than one length constraint"
        raise TypeError(msg)
    constraint = found[0]
    anchors = [m.parameter for m in metadata if isinstance(m, RelativeTo)]
    anchor = anchors[0] if anchors else None

    members = [a for a in get_args(base) if a is not types.NoneType]
    optional = base in (None, types.NoneType) or len(members) < len(get_args(base))
    if optional and len(members) == 1:
        base = members[0]

    if anchor is not None:
        if not isinstance(constraint, RelativeLen):
            msg = f"Parameter {name!r}: RelativeTo only applies to RelativeLen"
            raise TypeError(msg)
        if anchor not in parameters:
            msg = f"Parameter {name!r} is relative to unknown parameter {anchor!r}"
            raise TypeError(msg)

    wrapper_type: type[ConstrainedSlice] | None = None
    if isinstance(base, type) and issubclass(base, ConstrainedSlice):
        mutable = base.writable
        wrapper_type = _WRAPPERS[(type(constraint), mutable)]
        if not issubclass(wrapper_type, base):
            msg = (
                f"Parameter {name!r} is annotated as {base.__name__} "
                f"but declares {constraint.describe()}"
            )
            raise TypeError(msg)
    elif isinstance(constraint, RelativeLen) and anchor is None:
        msg = (
            f"Parameter {name!r}: a raw buffer with RelativeLen needs RelativeTo(...) "
            "or a Relative/RelativeMut annotation"
        )
        raise TypeError(msg)

    return _ParamPlan(name, constraint, wrapper_type, anchor, optional)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def length_checked(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Decorator: enforce ``Annotated`` length constraints on arguments.

    Misdeclared annotations raise ``TypeError`` at decoration time.
    Violations and operator failures raise at call time, before the body
    runs, with a note naming the argument.
    """
    signature = inspect.signature(func)
    hints = get_type_hints(func, include_extras=True)
    names = set(signature.parameters)
    plans = [
        plan
        for name in signature.parameters
        if (plan := _plan_for(name, hints.get(name), names)) is not None
    ]

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        bound = signature.bind(*args, **kwargs)
        bound.apply_defaults()
        raw = dict(bound.arguments)
        built: list[ConstrainedSlice] = []
        try:
            for plan in plans:
                value = raw[plan.name]
                if value is None:
                    if plan.optional:
                        continue
                    msg = (
                        f"Argument {plan.name!r} of {func.__qualname__} is None; "
                        f"expected a buffer of {plan.constraint.describe()}"
                    )
                    raise TypeError(msg)
                relative_to = _length_of(raw[plan.relative_to]) if plan.relative_to else None
                try:
                    if isinstance(value, ConstrainedSlice):
                        _check_wrapped(value, plan, relative_to)
                    elif plan.wrapper_type is None:
                        _check_raw(value, plan.constraint, relative_to)
                    else:
                        wrapped = _wrap(plan.wrapper_type, value, plan.constraint, relative_to)
                        built.append(wrapped)
                        bound.arguments[plan.name] = wrapped
                except LenConstraintError as exc:
                    exc.add_note(f"argument {plan.name!r} of {func.__qualname__}")
                    raise
        except BaseException:
            for wrapped in built:
                wrapped.release()
            logger.debug("length check failed for %s", func.__qualname__)
            raise
        return func(*bound.args, **bound.kwargs)

    return wrapper


def _check_wrapped(value: ConstrainedSlice, plan: _ParamPlan, relative_to: int | None) -> None:
    """Accept an already-wrapped argument only if it carries the same constraint."""
    if value.constraint != plan.constraint:
        msg = (
            f"Argument {plan.name!r} is wrapped as {value.constraint.describe()} "
            f"but the parameter declares {plan.constraint.describe()}"
        )
        raise TypeError(msg)
    if plan.wrapper_type is not None and not isinstance(value, plan.wrapper_type):
        msg = f"Argument {plan.name!r} must be a {plan.wrapper_type.__name__}"
        raise TypeError(msg)
    if isinstance(value, Relative) and relative_to is not None:
        value.validate_against(relative_to)


def _check_raw(value: Any, constraint: Constraint, relative_to: int | None) -> None:
    length = _length_of(value)
    if isinstance(constraint, RelativeLen):
        assert relative_to is not None
        constraint.check(length, relative_to)
    else:
        constraint.check(length)
