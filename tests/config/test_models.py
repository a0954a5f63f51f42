"""Tests for the config section models."""

import pytest
from pydantic import ValidationError

from lenctl.config.models import ConstraintConfig, LimitsConfig
from lenctl.domain.constraints import FixedLen, RangedLen, RelativeLen
from lenctl.domain.type_math import MAX_LENGTH, Operator


class TestLimitsConfig:
    def test_default(self) -> None:
        assert LimitsConfig().max_length == MAX_LENGTH

    def test_rejects_zero(self) -> None:
        with pytest.raises(ValidationError):
            LimitsConfig(max_length=0)


class TestConstraintConfig:
    def test_fixed(self) -> None:
        cfg = ConstraintConfig(fixed=32)
        assert cfg.to_constraint() == FixedLen(32)

    def test_range_alias(self) -> None:
        cfg = ConstraintConfig.model_validate({"range": [0, 65536]})
        assert cfg.range_ == (0, 65536)
        assert cfg.to_constraint() == RangedLen(0, 65536)

    def test_relative(self) -> None:
        cfg = ConstraintConfig(relative="add:16", relative_to="plaintext")
        assert cfg.to_constraint() == RelativeLen(Operator.ADD, 16)

    def test_relative_limit_passed_through(self) -> None:
        constraint = ConstraintConfig(relative="mul:2").to_constraint(limit=10)
        assert isinstance(constraint, RelativeLen)
        assert constraint.limit == 10

    def test_relative_to_int(self) -> None:
        cfg = ConstraintConfig(relative="sub:4", relative_to=20)
        assert cfg.relative_to == 20

    @pytest.mark.parametrize(
        "raw",
        [
            {},
            {"fixed": 1, "range": [0, 2]},
            {"fixed": -1},
            {"range": [4, 4]},
            {"range": [5, 1]},
            {"relative": "pow:2"},
            {"fixed": 4, "relative_to": "key"},
            {"relative": "add:1", "relative_to": -1},
            {"fixed": 4, "colour": "red"},
        ],
    )
    def test_invalid(self, raw: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            ConstraintConfig.model_validate(raw)

    def test_frozen(self) -> None:
        cfg = ConstraintConfig(fixed=1)
        with pytest.raises(ValidationError):
            cfg.fixed = 2  # type: ignore[misc]
