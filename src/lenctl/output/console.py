"""Rich Console factory and theme for lenctl output.

Consoles render into a StringIO buffer so renderers keep a
``str``-returning contract. In non-TTY environments (tests, pipes) Rich
disables color codes automatically.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

LENCTL_THEME = Theme(
    {
        "len.ok": "bold green",
        "len.error": "bold red",
        "len.warning": "bold yellow",
        "len.op": "bold cyan",
        "len.key": "dim",
        "len.name": "bold blue",
        "len.path": "dim",
        "len.constraint": "magenta",
        "len.delta.long": "red",
        "len.delta.short": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=LENCTL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_delta(by: int) -> str:
    """Too long renders red, too short yellow."""
    return "len.delta.long" if by > 0 else "len.delta.short"
