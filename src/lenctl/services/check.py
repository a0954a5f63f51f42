"""CheckService: check file lengths against named or ad-hoc constraints.

Each file is loaded and wrapped through the domain layer exactly as a
library caller would: fixed and ranged constraints through the eager
wrappers, relative constraints through a lazy ``Relative`` consumed
against the length it is declared relative to.

Every item is checked (no short-circuit) so one run reports all
failures. Violations and operator failures keep distinct codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from lenctl.domain.constraints import Constraint, RelativeLen, parse_constraint
from lenctl.domain.errors import LenConstraintError
from lenctl.domain.shorthand import ConversionRequest
from lenctl.domain.slices import Relative
from lenctl.domain.type_math import Num, Operator
from lenctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from lenctl.config.settings import LenSettings

log = structlog.get_logger(__name__)


class CheckService:
    """Length checks driven by :class:`LenSettings`."""

    def __init__(self, settings: LenSettings) -> None:
        self._settings = settings

    def _meta(self) -> dict[str, Any]:
        return {
            "config_path": str(self._settings.config_path) if self._settings.config_path else None,
            "max_length": self._settings.limits.max_length,
        }

    # ── check ────────────────────────────────────────────────────────

    def check(self, assignments: dict[str, Path]) -> ServiceResult:
        """Check each ``name -> file`` pair against ``[constraints.<name>]``.

        A relative constraint whose ``relative_to`` names another
        constraint takes that file's length, so both must be assigned.
        """
        op = "check"
        if not assignments:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="NO_INPUT", message="Nothing to check"),
            )

        contents: dict[str, bytes] = {}
        items: dict[str, dict[str, Any]] = {}
        for name, path in assignments.items():
            item: dict[str, Any] = {"name": name, "path": str(path), "ok": False}
            items[name] = item
            try:
                contents[name] = path.read_bytes()
            except OSError as exc:
                item["error"] = {"code": "FILE_UNREADABLE", "message": str(exc)}
                continue
            item["length"] = len(contents[name])

        for name, item in items.items():
            if "error" in item:
                continue
            try:
                constraint = self._settings.constraint(name)
            except KeyError as exc:
                item["error"] = {"code": "UNKNOWN_CONSTRAINT", "message": exc.args[0]}
                continue
            item["constraint"] = constraint.describe()

            relative_to: int | None = None
            if isinstance(constraint, RelativeLen):
                anchor = self._settings.constraints[name].relative_to
                relative_to = self._resolve_anchor(anchor, items)
                if relative_to is None:
                    item["error"] = {
                        "code": "UNRESOLVED_RELATIVE",
                        "message": f"Cannot resolve relative_to={anchor!r} for {name!r}",
                    }
                    continue
                item["relative_to"] = relative_to

            self._check_one(contents[name], constraint, relative_to, item)

        return self._summarize(op, list(items.values()))

    @staticmethod
    def _resolve_anchor(anchor: str | int | None, items: dict[str, dict[str, Any]]) -> int | None:
        if isinstance(anchor, int):
            return anchor
        if anchor is None or anchor not in items:
            return None
        length = items[anchor].get("length")
        return length if isinstance(length, int) else None

    # ── expect ───────────────────────────────────────────────────────

    def expect(
        self, path: Path, constraint_text: str, relative_to: int | None = None
    ) -> ServiceResult:
        """Check one file against an ad-hoc constraint (``32``, ``0..64``, ``add:16``)."""
        op = "expect"
        try:
            constraint = parse_constraint(constraint_text, limit=self._settings.limits.max_length)
        except ValueError as exc:
            return ServiceResult(
                ok=False, op=op, error=ServiceError(code="INVALID_CONSTRAINT", message=str(exc))
            )
        if isinstance(constraint, RelativeLen) and relative_to is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="MISSING_RELATIVE_TO",
                    message=f"{constraint.describe()} needs a relative-to length",
                ),
            )

        item: dict[str, Any] = {
            "name": path.name,
            "path": str(path),
            "ok": False,
            "constraint": constraint.describe(),
        }
        try:
            data = path.read_bytes()
        except OSError as exc:
            item["error"] = {"code": "FILE_UNREADABLE", "message": str(exc)}
            return self._summarize(op, [item])
        item["length"] = len(data)
        if relative_to is not None and isinstance(constraint, RelativeLen):
            item["relative_to"] = relative_to
        self._check_one(data, constraint, relative_to, item)
        return self._summarize(op, [item])

    # ── constants ────────────────────────────────────────────────────

    def constants(self) -> ServiceResult:
        """List the named constants and operators."""
        return ServiceResult(
            ok=True,
            op="constants",
            data={
                "constants": [{"name": n.name, "value": n.value} for n in Num],
                "operators": [{"name": o.value, "symbol": o.symbol} for o in Operator],
                "max_length": self._settings.limits.max_length,
            },
            meta=self._meta(),
        )

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _check_one(
        data: bytes,
        constraint: Constraint,
        relative_to: int | None,
        item: dict[str, Any],
    ) -> None:
        """Wrap *data* under *constraint* and record the outcome in *item*."""
        try:
            if isinstance(constraint, RelativeLen):
                assert relative_to is not None
                Relative.from_constraint(data, constraint).slice(relative_to).release()
            else:
                ConversionRequest(data, constraint).convert().release()
        except LenConstraintError as exc:
            error = ServiceError.from_exception(exc)
            item["error"] = {"code": error.code, "message": error.message}
            if "by" in error.detail:
                item["by"] = error.detail["by"]
            log.debug("length.check_failed", name=item["name"], code=error.code, reason=str(exc))
            return
        item["ok"] = True

    def _summarize(self, op: str, items: list[dict[str, Any]]) -> ServiceResult:
        failures = [i for i in items if not i["ok"]]
        data = {
            "items": items,
            "count": len(items),
            "failed": len(failures),
        }
        if not failures:
            return ServiceResult(ok=True, op=op, data=data, meta=self._meta())

        codes = sorted({i["error"]["code"] for i in failures})
        return ServiceResult(
            ok=False,
            op=op,
            data=data,
            error=ServiceError(
                code=codes[0] if len(codes) == 1 else "CHECK_FAILED",
                message=f"{len(failures)} of {len(items)} buffers failed their length constraint",
                detail={"failures": [i["name"] for i in failures], "codes": codes},
            ),
            meta=self._meta(),
        )
