"""Subcommand modules for gitwork.

Provides register_commands() which uses deferred imports to keep
``gitwork --help`` fast as the codebase grows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from gitwork.commands.diagnose import diagnose
    from gitwork.commands.list_cmd import list_cmd
    from gitwork.commands.run import run
    from gitwork.commands.show import show
    from gitwork.commands.status import status

    cli.add_command(list_cmd)
    cli.add_command(show)
    cli.add_command(run)
    cli.add_command(diagnose)
    cli.add_command(status)
