"""Command: preview the commands a workflow would run."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitwork.commands._base import GwCommand
from gitwork.commands._params import collect_values, param_option

if TYPE_CHECKING:
    from gitwork.commands._context import AppContext


@click.command(
    cls=GwCommand,
    examples="""\
  gitwork show save "fix typo"
  gitwork show start-feature feature/login -p base=develop
  gitwork show open-pr -p title="Add login form" -p body="Closes #12"
  gitwork --json show sync""",
)
@click.argument("name")
@click.argument("args", nargs=-1)
@param_option
@click.pass_obj
def show(app: AppContext, name: str, args: tuple[str, ...], pairs: tuple[str, ...]) -> None:
    """Show the resolved commands of workflow NAME without running them.

    ARGS fill the workflow's parameters in order.
    """
    from gitwork.services.workflow import WorkflowService

    values = collect_values(app, name, args, pairs)
    app.emit(WorkflowService(app.workspace).show(name, values))
