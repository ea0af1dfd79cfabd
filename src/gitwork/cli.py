"""Root CLI group for gitwork with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from gitwork import __version__
from gitwork.commands import register_commands
from gitwork.commands._base import GwGroup
from gitwork.commands._context import AppContext
from gitwork.config.settings import GitworkSettings


@click.group(
    cls=GwGroup,
    invoke_without_command=True,
    examples="""\
  gitwork list
  gitwork show start-feature feature/login
  gitwork run save "first draft"
  gitwork -C ~/src/project status
  git pull 2>&1 | gitwork diagnose""",
)
@click.version_option(version=__version__, prog_name="gitwork")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--no-interact", is_flag=True, help="Non-interactive mode (no prompts).")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-C",
    "--repo",
    "repo_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Run as if started in this directory.",
)
@click.option("--sync", is_flag=True, help="Force synchronous event dispatch.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    no_interact: bool,
    config_path: str | None,
    repo_root: Path | None,
    sync: bool,
) -> None:
    """gitwork — run everyday Git recipes as named workflows."""
    ctx.ensure_object(dict)
    settings = GitworkSettings.from_cli(
        config_path=config_path,
        repo_root=repo_root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        no_interact=no_interact,
        sync=sync,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
