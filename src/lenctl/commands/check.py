"""Command: check files against named constraints from lenctl.toml."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from lenctl.commands._base import LenCommand

if TYPE_CHECKING:
    from lenctl.commands._context import AppContext


def _parse_assignment(value: str) -> tuple[str, Path]:
    name, sep, path = value.partition("=")
    if not sep or not name or not path:
        msg = f"Expected NAME=FILE, got {value!r}"
        raise click.BadParameter(msg)
    return name.strip(), Path(path)


@click.command(
    cls=LenCommand,
    examples="""\
  lenctl check key=key.bin nonce=nonce.bin
  lenctl check plaintext=msg.txt ciphertext=msg.enc
  lenctl --json check key=key.bin""",
)
@click.argument("assignments", nargs=-1, required=True)
@click.pass_obj
def check(app: AppContext, assignments: tuple[str, ...]) -> None:
    """Check each NAME=FILE against the constraint [constraints.NAME]."""
    from lenctl.services.check import CheckService

    pairs = dict(_parse_assignment(a) for a in assignments)
    app.emit(CheckService(app.settings).check(pairs))
