"""Click command classes shared by every gitwork command.

``GwCommand`` and ``GwGroup`` take an ``examples`` string that stays out
of ``--help``. ``--examples`` prints it and exits before arguments are
validated, so ``gitwork run --examples`` works without a workflow name.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click


class _ExamplesMixin:
    """Contributes an eager ``--examples`` option when examples are given."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = textwrap.dedent(examples).strip("\n") if examples else None

    def get_params(self, ctx: click.Context) -> list[click.Parameter]:
        params: list[click.Parameter] = super().get_params(ctx)  # type: ignore[misc]
        if not self.examples:
            return params
        examples_option = click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=self._print_examples,
            help="Show usage examples and exit.",
        )
        # Keep --help last in the option listing.
        return [*params[:-1], examples_option, *params[-1:]]

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(textwrap.indent(self.examples or "", "  "))
        ctx.exit(0)


class GwCommand(_ExamplesMixin, click.Command):
    """A gitwork subcommand."""


class GwGroup(_ExamplesMixin, click.Group):
    """The gitwork root group. Subcommands default to :class:`GwCommand`."""

    command_class = GwCommand
