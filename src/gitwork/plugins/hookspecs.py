"""Pluggy hook specifications for gitwork.

Two setup-time hooks let plugins contribute workflows and diagnostic
rules. Two lifecycle hooks fire after each step and after each run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from gitwork.domain.diagnostics import DiagnosticRule
    from gitwork.domain.workflows import Workflow

hookspec = pluggy.HookspecMarker("gitwork")


class GitworkHookSpec:
    """Hook specifications for the gitwork plugin system."""

    @hookspec
    def register_workflows(self) -> list[Workflow] | None:
        """Return extra workflows. Names already registered are skipped."""

    @hookspec
    def register_diagnostic_rules(self) -> list[DiagnosticRule] | None:
        """Return extra rules, checked after the built-in ones."""

    @hookspec
    def post_step(
        self,
        workflow: str,
        index: int,
        argv: list[str],
        returncode: int,
    ) -> None:
        """Called after each workflow step has run."""

    @hookspec
    def post_workflow(
        self,
        workflow: str,
        ok: bool,
        steps_run: int,
    ) -> None:
        """Called after a workflow run finishes (successfully or not)."""
