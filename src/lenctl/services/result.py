"""ServiceResult and ServiceError: the contract between services and the CLI.

INVARIANT: Every service method returns a ServiceResult; recoverable
length failures are reported through ``error``, never raised.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from lenctl.domain.errors import ConstraintViolation, LenConstraintError, OperatorFailure


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: LenConstraintError, **detail: Any) -> ServiceError:
        """Map a length failure onto a stable error code.

        ``CONSTRAINT_VIOLATION`` and ``OPERATOR_FAILURE`` stay distinct so a
        caller can tell "resize the buffer" from "the relation is wrong".
        """
        if isinstance(exc, ConstraintViolation):
            return cls(
                code="CONSTRAINT_VIOLATION",
                message=str(exc),
                detail={**exc.to_dict(), **detail},
            )
        if isinstance(exc, OperatorFailure):
            return cls(
                code="OPERATOR_FAILURE",
                message=str(exc),
                detail={"kind": type(exc).__name__, **detail},
            )
        return cls(code="LENGTH_ERROR", message=str(exc), detail=detail)


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether every checked buffer satisfied its constraint.
        op: Name of the operation (``"check"``, ``"expect"``, ``"constants"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (config path, limits).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
