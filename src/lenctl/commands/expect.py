"""Command: check one file against an ad-hoc constraint."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from lenctl.commands._base import LenCommand

if TYPE_CHECKING:
    from lenctl.commands._context import AppContext


@click.command(
    cls=LenCommand,
    examples="""\
  lenctl expect key.bin 32
  lenctl expect msg.txt 0..65536
  lenctl expect msg.enc add:16 --relative-to 48""",
)
@click.argument("file", type=click.Path(path_type=Path))
@click.argument("constraint")
@click.option(
    "--relative-to",
    type=click.IntRange(min=0),
    default=None,
    help="Length a relative constraint (OP:BY) is evaluated against.",
)
@click.pass_obj
def expect(app: AppContext, file: Path, constraint: str, relative_to: int | None) -> None:
    """Check FILE against CONSTRAINT: N, START..END or OP:BY."""
    from lenctl.services.check import CheckService

    app.emit(CheckService(app.settings).expect(file, constraint, relative_to))
