"""Constant values and checked arithmetic operators for length relations.

Two closed families:
- ``Num``: named non-negative integers usable as constraint parameters.
- ``Operator``: add, subtract, multiply and divide with explicit
  overflow/underflow/divide-by-zero detection.

Lengths are machine words, so results are bounded by ``MAX_LENGTH``
(the largest unsigned 64-bit machine word).
"""

from __future__ import annotations

from enum import IntEnum, StrEnum

from lenctl.domain.errors import DivideByZero, Overflow, PreconditionError, Underflow

MAX_LENGTH = 2**64 - 1


class Num(IntEnum):
    """Named constants for fixed lengths, range bounds and relative offsets."""

    N0 = 0
    N1 = 1
    N2 = 2
    N4 = 4
    N8 = 8
    N12 = 12
    N16 = 16
    N24 = 24
    N32 = 32
    N48 = 48
    N64 = 64
    N96 = 96
    N128 = 128
    N256 = 256
    N384 = 384
    N512 = 512
    N1024 = 1024
    N2048 = 2048
    N4096 = 4096
    N8192 = 8192
    N16384 = 16384
    N32768 = 32768
    N65536 = 65536


_SYMBOLS: dict[str, str] = {
    "+": "add",
    "-": "sub",
    "*": "mul",
    "/": "div",
}


class Operator(StrEnum):
    """Binary operators over non-negative lengths."""

    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"

    @property
    def label(self) -> str:
        """Capitalized name used in constraint descriptions (``Add``, ``Sub``...)."""
        return self.value.capitalize()

    @property
    def symbol(self) -> str:
        return {"add": "+", "sub": "-", "mul": "*", "div": "/"}[self.value]

    @classmethod
    def parse(cls, text: str) -> Operator:
        """Resolve an operator from its name or symbol (``"add"``, ``"+"``...).

        Raises:
            ValueError: If *text* names no operator.
        """
        key = text.strip().lower()
        key = _SYMBOLS.get(key, key)
        try:
            return cls(key)
        except ValueError:
            msg = f"Unknown operator {text!r}; expected one of add, sub, mul, div, +, -, *, /"
            raise ValueError(msg) from None

    def apply(self, a: int, b: int, *, limit: int = MAX_LENGTH) -> int:
        """Compute ``a <op> b``.

        Raises:
            Overflow: ``add``/``mul`` result exceeds *limit*.
            Underflow: ``sub`` with ``a < b``.
            DivideByZero: ``div`` with ``b == 0``.
            PreconditionError: An operand is negative.
        """
        require_length(a, "left operand")
        require_length(b, "right operand")

        if self is Operator.ADD:
            result = a + b
            if result > limit:
                raise Overflow(self, a, b, limit=limit)
        elif self is Operator.SUB:
            if a < b:
                raise Underflow(self, a, b)
            result = a - b
        elif self is Operator.MUL:
            result = a * b
            if result > limit:
                raise Overflow(self, a, b, limit=limit)
        else:
            if b == 0:
                raise DivideByZero(self, a, b)
            result = a // b
        return result


def require_length(value: int, what: str = "length") -> int:
    """Return *value* as a plain int after checking it is a usable length.

    Declarations with negative or non-integer values are programmer
    errors, not recoverable violations.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{what} must be an int, got {type(value).__name__}"
        raise TypeError(msg)
    if value < 0:
        msg = f"{what} must be a non-negative length, got {value}"
        raise PreconditionError(msg)
    return int(value)
