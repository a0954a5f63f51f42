"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, lenctl.toml only holds
overrides and the named constraints a project wants to check::

    [limits]
    max_length = 4294967295

    [constraints.key]
    fixed = 32

    [constraints.plaintext]
    range = [0, 65536]

    [constraints.ciphertext]
    relative = "add:16"
    relative_to = "plaintext"
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, model_validator

from lenctl.domain.constraints import Constraint, FixedLen, RangedLen, parse_relation
from lenctl.domain.type_math import MAX_LENGTH


class LimitsConfig(BaseModel):
    """[limits] section."""

    model_config = {"frozen": True}

    max_length: int = Field(default=MAX_LENGTH, ge=1)


class ConstraintConfig(BaseModel):
    """[constraints.<name>] section: exactly one of fixed, range, relative."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "forbid"}

    fixed: int | None = Field(default=None, ge=0)
    range_: tuple[int, int] | None = Field(default=None, alias="range")
    relative: str | None = None
    relative_to: str | int | None = None
    description: str = ""

    @model_validator(mode="after")
    def _exactly_one_kind(self) -> Self:
        declared = [k for k in ("fixed", "range_", "relative") if getattr(self, k) is not None]
        if len(declared) != 1:
            msg = "Declare exactly one of 'fixed', 'range' or 'relative'"
            raise ValueError(msg)
        if self.range_ is not None:
            start, end = self.range_
            if start < 0 or start >= end:
                msg = f"Range must satisfy 0 <= start < end, got [{start}, {end}]"
                raise ValueError(msg)
        if self.relative is not None:
            parse_relation(self.relative)
        elif self.relative_to is not None:
            msg = "'relative_to' only applies to relative constraints"
            raise ValueError(msg)
        if isinstance(self.relative_to, int) and self.relative_to < 0:
            msg = "'relative_to' must be a non-negative length or a constraint name"
            raise ValueError(msg)
        return self

    def to_constraint(self, *, limit: int = MAX_LENGTH) -> Constraint:
        """Build the domain descriptor for this declaration."""
        if self.fixed is not None:
            return FixedLen(self.fixed)
        if self.range_ is not None:
            return RangedLen(*self.range_)
        assert self.relative is not None
        return parse_relation(self.relative, limit=limit)
