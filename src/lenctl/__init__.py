"""lenctl: length-constrained buffers for binary-protocol and crypto APIs."""

from __future__ import annotations

from lenctl.domain.constraints import (
    Constraint,
    FixedLen,
    RangedLen,
    RelativeLen,
    parse_constraint,
    parse_relation,
)
from lenctl.domain.errors import (
    AlreadyConsumedError,
    ConstraintViolation,
    DivideByZero,
    LenConstraintError,
    OperatorFailure,
    Overflow,
    PreconditionError,
    Underflow,
)
from lenctl.domain.shorthand import (
    ConversionRequest,
    RelativeTo,
    constraints,
    fixed,
    length_checked,
    ranged,
    relative,
)
from lenctl.domain.slices import (
    ConstrainedSlice,
    Fixed,
    Ranged,
    Relative,
    relative_from,
    relative_try_from,
    try_fixed,
    try_ranged,
)
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

__version__ = "0.1.0"

__all__ = [
    "MAX_LENGTH",
    "AlreadyConsumedError",
    "ConstrainedSlice",
    "Constraint",
    "ConstraintViolation",
    "ConversionRequest",
    "DivideByZero",
    "Fixed",
    "FixedLen",
    "FixedMut",
    "LenConstraintError",
    "Num",
    "Operator",
    "OperatorFailure",
    "Overflow",
    "PreconditionError",
    "Ranged",
    "RangedLen",
    "RangedMut",
    "Relative",
    "RelativeLen",
    "RelativeMut",
    "RelativeTo",
    "Underflow",
    "__version__",
    "constraints",
    "fixed",
    "length_checked",
    "parse_constraint",
    "parse_relation",
    "ranged",
    "relative",
    "relative_from",
    "relative_mut_from",
    "relative_mut_try_from",
    "relative_try_from",
    "try_fixed",
    "try_fixed_mut",
    "try_ranged",
    "try_ranged_mut",
]
