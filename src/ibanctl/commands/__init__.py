"""Subcommand modules for ibanctl.

Each command lives in its own module; register_commands() attaches them
to the root group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from ibanctl.commands.serve import serve
    from ibanctl.commands.validate import validate

    cli.add_command(serve)
    cli.add_command(validate)
