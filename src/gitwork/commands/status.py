"""Command: repository state with advice."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitwork.commands._base import GwCommand

if TYPE_CHECKING:
    from gitwork.commands._context import AppContext


@click.command(
    cls=GwCommand,
    examples="""\
  gitwork status
  gitwork -C ../other-repo status
  gitwork --json status""",
)
@click.pass_obj
def status(app: AppContext) -> None:
    """Show branch, upstream and working-tree state, plus anything to fix."""
    from gitwork.services.diagnose import DiagnoseService

    app.emit(DiagnoseService(app.workspace).status())
