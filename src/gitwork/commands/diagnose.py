"""Command: explain git error output."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from gitwork.commands._base import GwCommand

if TYPE_CHECKING:
    from gitwork.commands._context import AppContext


@click.command(
    cls=GwCommand,
    examples="""\
  git push 2>&1 | gitwork diagnose
  gitwork diagnose error.log
  gitwork --json diagnose - < error.log""",
)
@click.argument(
    "source",
    type=click.File("r", encoding="utf-8", errors="replace"),
    default="-",
)
@click.pass_obj
def diagnose(app: AppContext, source: IO[str]) -> None:
    """Recognize known git problems in SOURCE and suggest next steps.

    Reads standard input when SOURCE is ``-`` or omitted.
    """
    from gitwork.services.diagnose import DiagnoseService

    app.emit(DiagnoseService(app.workspace).diagnose(source.read()))
