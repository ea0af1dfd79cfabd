"""Shared argument handling for commands that take workflow parameters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from gitwork.domain.registry import UnknownWorkflowError

if TYPE_CHECKING:
    from gitwork.commands._context import AppContext


def param_option(func: Any) -> Any:
    """Decorator adding the repeatable ``-p/--param KEY=VALUE`` option."""
    return click.option(
        "-p",
        "--param",
        "pairs",
        multiple=True,
        metavar="KEY=VALUE",
        help="Set a workflow parameter by name (repeatable).",
    )(func)


def parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` strings into a dict. The last duplicate wins."""
    values: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(
                f"expected KEY=VALUE, got {pair!r}", param_hint="'-p' / '--param'"
            )
        values[key] = value
    return values


def collect_values(
    app: AppContext,
    name: str,
    args: tuple[str, ...],
    pairs: tuple[str, ...],
) -> dict[str, str]:
    """Merge positional *args* and ``-p`` *pairs* into workflow parameter values.

    Positional arguments fill the workflow's required parameters in
    declaration order, skipping the ones already set with ``-p``. Optional
    and defaulted parameters are only set with ``-p``.
    """
    values = parse_pairs(pairs)
    if not args:
        return values
    try:
        workflow = app.workspace.registry.get(name)
    except UnknownWorkflowError:
        # The service reports the unknown name with suggestions.
        return values

    open_params = [p.name for p in workflow.required_params if p.name not in values]
    if len(args) > len(open_params):
        accepted = ", ".join(open_params) or "none"
        raise click.UsageError(
            f"{name} takes at most {len(open_params)} positional argument(s) "
            f"({accepted}), got {len(args)}; set other parameters with -p KEY=VALUE"
        )
    values.update(zip(open_params, args, strict=False))
    return values
