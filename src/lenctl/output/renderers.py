"""Operation-specific Rich renderers for ServiceResult.

Renderers write to a StringIO-backed Console; the caller gets a string.
Dispatch is by ``result.op``; unknown ops fall through to a generic
key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from lenctl.output.console import create_console, get_output, style_for_delta

if TYPE_CHECKING:
    from rich.console import Console

    from lenctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Failed checks still render their item table, followed by the error.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        if result.data.get("items"):
            console.print(_items_table(result.data["items"], verbose=verbose))
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: one line per failure."""
    if result.ok:
        return f"OK: {result.op}"
    lines = [
        f"{item['name']}: {item['error']['message']}"
        for item in result.data.get("items", [])
        if not item.get("ok") and "error" in item
    ]
    if not lines:
        msg = result.error.message if result.error else "Unknown error"
        lines.append(f"ERROR: {result.op}: {msg}")
    return "\n".join(lines)


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="len.ok")
    op = Text(f"  {result.op}", style="len.op")
    console.print(label, op)


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="len.key")
    console.print(k, Text(str(value)))


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _delta_text(item: dict[str, Any]) -> Text:
    by = item.get("by")
    if by is None:
        return Text("")
    return Text(f"{by:+d}", style=style_for_delta(by))


def _items_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """One row per checked buffer."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("", no_wrap=True)
    table.add_column("Name", style="len.name", no_wrap=True)
    table.add_column("Length", justify="right")
    table.add_column("Constraint", style="len.constraint")
    table.add_column("By", justify="right")
    table.add_column("Detail")
    if verbose:
        table.add_column("Path", style="len.path")

    for item in items:
        mark = Text("ok", style="len.ok") if item.get("ok") else Text("FAIL", style="len.error")
        constraint = str(item.get("constraint", ""))
        if "relative_to" in item:
            constraint += f" of {item['relative_to']}"
        detail = item["error"]["code"] if "error" in item else ""
        row: list[Any] = [
            mark,
            str(item.get("name", "")),
            str(item.get("length", "")),
            constraint,
            _delta_text(item),
            detail,
        ]
        if verbose:
            row.append(str(item.get("path", "")))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="len.error")
    op = Text(f"  {result.op}", style="len.op")
    console.print(label, op, Text(": "), msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    console.print(_items_table(result.data.get("items", []), verbose=verbose))
    console.print(f"\n{result.data.get('count', 0)} checked, {result.data.get('failed', 0)} failed")
    if verbose:
        _render_meta(console, result)


def _render_constants(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Name", style="len.name")
    table.add_column("Value", justify="right")
    for const in result.data.get("constants", []):
        table.add_row(const["name"], str(const["value"]))
    console.print(table)

    ops = ", ".join(f"{o['name']} ({o['symbol']})" for o in result.data.get("operators", []))
    _field(console, "operators", ops)
    _field(console, "max_length", result.data.get("max_length", ""))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "check": _render_check,
    "expect": _render_check,
    "constants": _render_constants,
}
