"""Command: run a workflow step by step."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitwork.commands._base import GwCommand
from gitwork.commands._params import collect_values, param_option

if TYPE_CHECKING:
    from gitwork.commands._context import AppContext
    from gitwork.services.workflow import WorkflowService


@click.command(
    cls=GwCommand,
    examples="""\
  gitwork run save "fix typo in README"
  gitwork run start-feature feature/login
  gitwork run sync -p base=develop
  gitwork run publish --dry-run
  gitwork run delete-branch old-spike --yes
  gitwork --no-interact run discard-changes --yes""",
)
@click.argument("name")
@click.argument("args", nargs=-1)
@param_option
@click.option("--dry-run", is_flag=True, help="Show what would run without executing.")
@click.option("--keep-going", is_flag=True, help="Continue after a failing step.")
@click.option("-y", "--yes", is_flag=True, help="Confirm destructive workflows.")
@click.pass_obj
def run(
    app: AppContext,
    name: str,
    args: tuple[str, ...],
    pairs: tuple[str, ...],
    dry_run: bool,
    keep_going: bool,
    yes: bool,
) -> None:
    """Run workflow NAME. ARGS fill the workflow's parameters in order."""
    from gitwork.services.workflow import WorkflowService

    values = collect_values(app, name, args, pairs)
    svc = WorkflowService(app.workspace)

    confirmed = yes
    if not yes and not dry_run and not app.settings.no_interact:
        confirmed = _confirm_destructive(app, svc, name, values)

    app.emit(svc.run(name, values, dry_run=dry_run, keep_going=keep_going, confirmed=confirmed))


def _confirm_destructive(
    app: AppContext, svc: WorkflowService, name: str, values: dict[str, str]
) -> bool:
    """Prompt before a destructive workflow. Aborts the command on "no"."""
    preview = svc.show(name, values)
    app.workspace.warnings.extend(preview.warnings)
    if not preview.ok or not preview.data["workflow"]["destructive"]:
        return False
    click.echo(f"{name} will run:", err=True)
    for step in preview.data["steps"]:
        click.echo(f"  {step['index']}. {step['command']}", err=True)
    click.confirm("This cannot be undone. Continue?", abort=True, err=True)
    return True
