"""WorkflowRegistry — maps short workflow names to Workflow definitions.

Layering (later layers win only where noted):
  1. Built-ins from :mod:`gitwork.domain.catalog`
  2. ``[workflows.<name>]`` tables from gitwork.toml (may replace built-ins)
  3. Plugin-provided workflows (never replace; collisions are skipped)
"""

from __future__ import annotations

import difflib
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from gitwork.config.models import WorkflowConfig
from gitwork.domain.workflows import Param, Step, Workflow, WorkflowError

logger = logging.getLogger(__name__)


class UnknownWorkflowError(WorkflowError, KeyError):
    """No workflow is registered under the requested name."""

    def __init__(self, name: str, suggestions: list[str]) -> None:
        self.name = name
        self.suggestions = suggestions
        msg = f"Unknown workflow {name!r}"
        if suggestions:
            msg += f" (did you mean: {', '.join(suggestions)}?)"
        super().__init__(msg)

    def __str__(self) -> str:
        return str(self.args[0])


class DuplicateWorkflowError(WorkflowError):
    """A workflow name is already taken and replacement was not requested."""


class WorkflowRegistry:
    """Name → Workflow lookup with close-match suggestions."""

    def __init__(self, workflows: Iterable[Workflow] = ()) -> None:
        self._workflows: dict[str, Workflow] = {}
        for wf in workflows:
            self.register(wf)

    @classmethod
    def with_builtins(cls) -> WorkflowRegistry:
        """Registry preloaded with the built-in catalog."""
        from gitwork.domain.catalog import BUILTIN_WORKFLOWS

        return cls(BUILTIN_WORKFLOWS)

    def register(self, workflow: Workflow, *, replace: bool = False) -> None:
        """Add *workflow*. Raises DuplicateWorkflowError unless *replace*."""
        existing = self._workflows.get(workflow.name)
        if existing is not None and not replace:
            raise DuplicateWorkflowError(
                f"Workflow {workflow.name!r} already registered (source: {existing.source})"
            )
        if existing is not None:
            logger.debug("Workflow %s replaced by %s", workflow.name, workflow.source)
        self._workflows[workflow.name] = workflow

    def get(self, name: str) -> Workflow:
        """Look up a workflow by name."""
        try:
            return self._workflows[name]
        except KeyError:
            suggestions = difflib.get_close_matches(name, self._workflows, n=3)
            raise UnknownWorkflowError(name, suggestions) from None

    def names(self) -> list[str]:
        return sorted(self._workflows)

    def all(self) -> list[Workflow]:
        return [self._workflows[n] for n in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._workflows

    def __len__(self) -> int:
        return len(self._workflows)

    def __iter__(self) -> Iterator[Workflow]:
        return iter(self.all())

    # ------------------------------------------------------------------
    # Layering
    # ------------------------------------------------------------------

    def load_config(self, tables: Mapping[str, Any]) -> list[str]:
        """Register ``[workflows.<name>]`` tables. Returns warnings.

        Config workflows replace built-ins of the same name. An invalid
        table, or an entry that is not a table at all, is skipped with a
        warning naming the workflow.
        """
        warnings: list[str] = []
        for name, table in tables.items():
            if not isinstance(table, Mapping):
                warnings.append(
                    f"Skipping workflow {name!r} from config: expected a table, "
                    f"got {type(table).__name__}"
                )
                continue
            try:
                cfg = WorkflowConfig.model_validate(dict(table))
                workflow = Workflow(
                    name=name,
                    description=cfg.description,
                    destructive=cfg.destructive,
                    params=[Param(**p.model_dump()) for p in cfg.params],
                    steps=[Step(**s) for s in cfg.step_dicts()],
                    source="config",
                )
            except ValidationError as exc:
                first = exc.errors()[0]["msg"] if exc.errors() else str(exc)
                warnings.append(f"Skipping workflow {name!r} from config: {first}")
                logger.debug("Invalid workflow %s in config", name, exc_info=True)
                continue
            self.register(workflow, replace=True)
        return warnings

    def load_plugin_workflows(self, plugin_name: str, workflows: Iterable[Any]) -> list[str]:
        """Register workflows contributed by a plugin. Returns warnings."""
        warnings: list[str] = []
        for wf in workflows:
            if not isinstance(wf, Workflow):
                warnings.append(f"Plugin {plugin_name} returned a non-Workflow: {wf!r}")
                continue
            if wf.name in self._workflows:
                warnings.append(
                    f"Plugin {plugin_name} workflow {wf.name!r} collides with an "
                    "existing workflow; skipped"
                )
                continue
            self.register(wf.model_copy(update={"source": f"plugin:{plugin_name}"}))
        return warnings
