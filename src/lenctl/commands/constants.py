"""Command: list the named length constants and operators."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lenctl.commands._base import LenCommand

if TYPE_CHECKING:
    from lenctl.commands._context import AppContext


@click.command(cls=LenCommand)
@click.pass_obj
def constants(app: AppContext) -> None:
    """List named constants (N0 .. N65536) and operators."""
    from lenctl.services.check import CheckService

    app.emit(CheckService(app.settings).constants())
