"""Subcommand modules for lenctl.

Provides register_commands() which uses deferred imports to keep
``lenctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from lenctl.commands.check import check
    from lenctl.commands.constants import constants
    from lenctl.commands.expect import expect

    cli.add_command(check)
    cli.add_command(expect)
    cli.add_command(constants)
