"""Command: list registered workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitwork.commands._base import GwCommand

if TYPE_CHECKING:
    from gitwork.commands._context import AppContext


@click.command(
    "list",
    cls=GwCommand,
    examples="""\
  gitwork list
  gitwork -v list          # include step counts and where each workflow came from
  gitwork -q list          # names only, one per line
  gitwork --json list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List the available workflows (built-in, config and plugin)."""
    from gitwork.services.workflow import WorkflowService

    app.emit(WorkflowService(app.workspace).list_workflows())
