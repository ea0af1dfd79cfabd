"""Workflow model — a named, parameterized sequence of git/gh invocations.

Step argv tokens are ``str.format`` templates: ``{branch}`` is replaced by
the value of the ``branch`` parameter, and ``{{``/``}}`` produce literal
braces (so ``@{{u}}`` renders as ``@{u}``). A token that is a bare
placeholder and resolves to an empty string is dropped from argv.
"""

from __future__ import annotations

import re
import shlex
import string
from typing import Any

from pydantic import BaseModel, Field, model_validator

# Keys supplied by configuration rather than by the user.
CONTEXT_KEYS: frozenset[str] = frozenset({"remote", "default_branch"})

_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_FORMATTER = string.Formatter()


class WorkflowError(Exception):
    """Base class for workflow definition and resolution errors."""


class WorkflowDefinitionError(WorkflowError, ValueError):
    """A workflow definition is internally inconsistent."""


class WorkflowParamError(WorkflowError):
    """User-supplied parameters do not satisfy a workflow."""

    def __init__(
        self,
        message: str,
        *,
        missing: list[str] | None = None,
        unknown: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.missing = missing or []
        self.unknown = unknown or []


def template_fields(template: str) -> list[str]:
    """Return placeholder names used in *template*, in order of appearance.

    Raises:
        WorkflowDefinitionError: malformed braces or non-identifier fields
            such as ``{a.b}`` or ``{0}``.
    """
    try:
        parsed = list(_FORMATTER.parse(template))
    except ValueError as exc:
        raise WorkflowDefinitionError(f"Malformed template {template!r}: {exc}") from exc
    fields: list[str] = []
    for _literal, field_name, _spec, _conv in parsed:
        if field_name is None:
            continue
        if not _IDENT_RE.match(field_name):
            raise WorkflowDefinitionError(
                f"Placeholder {{{field_name}}} in {template!r} is not a plain name"
            )
        fields.append(field_name)
    return fields


def _render(template: str, values: dict[str, str]) -> str:
    missing = [f for f in template_fields(template) if f not in values]
    if missing:
        raise WorkflowParamError(
            f"No value for {', '.join(missing)} in {template!r}",
            missing=missing,
        )
    return template.format_map(values)


class Param(BaseModel):
    """A named input to a workflow."""

    model_config = {"frozen": True}

    name: str
    help: str = ""
    required: bool = True
    default: str | None = None


class Step(BaseModel):
    """One external command in a workflow."""

    model_config = {"frozen": True}

    argv: list[str]
    description: str = ""
    when: str | None = None
    unless: str | None = None
    allow_failure: bool = False

    def applies(self, values: dict[str, str]) -> bool:
        """Whether the ``when``/``unless`` guards let this step run."""
        if self.when is not None and not values.get(self.when):
            return False
        if self.unless is not None and values.get(self.unless):
            return False
        return True

    def render(self, values: dict[str, str]) -> list[str]:
        """Substitute *values* into argv, dropping empty bare placeholders."""
        argv: list[str] = []
        for token in self.argv:
            rendered = _render(token, values)
            if rendered == "" and token.startswith("{") and token.endswith("}"):
                continue
            argv.append(rendered)
        return argv


class PlannedStep(BaseModel):
    """A step with every placeholder resolved, ready for the executor."""

    model_config = {"frozen": True}

    index: int
    argv: list[str]
    description: str = ""
    allow_failure: bool = False

    @property
    def command_line(self) -> str:
        """Shell-style rendering for display only."""
        return shlex.join(self.argv)


class Workflow(BaseModel):
    """A named sequence of steps plus the parameters they need."""

    model_config = {"frozen": True}

    name: str
    description: str = ""
    params: list[Param] = Field(default_factory=list)
    steps: list[Step]
    destructive: bool = False
    source: str = "builtin"

    @model_validator(mode="after")
    def _check_consistency(self) -> Workflow:
        if not _NAME_RE.match(self.name):
            raise ValueError(f"Workflow name {self.name!r} must be lowercase kebab-case")
        if not self.steps:
            raise ValueError(f"Workflow {self.name!r} has no steps")

        names = [p.name for p in self.params]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Workflow {self.name!r} repeats parameters: {', '.join(dupes)}")
        clash = sorted(set(names) & CONTEXT_KEYS)
        if clash:
            raise ValueError(f"Workflow {self.name!r} shadows config keys: {', '.join(clash)}")

        known = set(names) | CONTEXT_KEYS
        for step in self.steps:
            if not step.argv:
                raise ValueError(f"Workflow {self.name!r} has a step with empty argv")
            for guard in (step.when, step.unless):
                if guard is not None and guard not in names:
                    raise ValueError(f"Workflow {self.name!r} guards on unknown param {guard!r}")
            for token in step.argv:
                undeclared = [f for f in template_fields(token) if f not in known]
                if undeclared:
                    raise ValueError(
                        f"Workflow {self.name!r} uses undeclared placeholders: "
                        f"{', '.join(undeclared)}"
                    )
        for param in self.params:
            if param.default is None:
                continue
            undeclared = [f for f in template_fields(param.default) if f not in CONTEXT_KEYS]
            if undeclared:
                raise ValueError(
                    f"Default of {param.name!r} may only reference config keys, "
                    f"not {', '.join(undeclared)}"
                )
        return self

    @property
    def required_params(self) -> list[Param]:
        """Parameters that need a value from the user (no default)."""
        return [p for p in self.params if p.required and p.default is None]

    def resolve_params(
        self,
        values: dict[str, Any],
        context: dict[str, str],
    ) -> dict[str, str]:
        """Merge user *values*, parameter defaults and config *context*.

        Raises:
            WorkflowParamError: unknown names were given, or required
                parameters are still missing. Both lists are reported at once.
        """
        declared = {p.name for p in self.params}
        unknown = sorted(k for k in values if k not in declared)

        resolved: dict[str, str] = {k: str(v) for k, v in context.items()}
        missing: list[str] = []
        for param in self.params:
            raw = values.get(param.name)
            if raw is not None and str(raw) != "":
                resolved[param.name] = str(raw)
            elif param.default is not None:
                resolved[param.name] = _render(param.default, context)
            elif param.required:
                missing.append(param.name)
            else:
                resolved[param.name] = ""

        if unknown or missing:
            parts: list[str] = []
            if missing:
                parts.append(f"missing required parameter(s): {', '.join(missing)}")
            if unknown:
                parts.append(f"unknown parameter(s): {', '.join(unknown)}")
            raise WorkflowParamError(
                f"{self.name}: {'; '.join(parts)}",
                missing=missing,
                unknown=unknown,
            )
        return resolved

    def plan(self, values: dict[str, Any], context: dict[str, str]) -> list[PlannedStep]:
        """Resolve parameters and render the steps that apply."""
        resolved = self.resolve_params(values, context)
        planned: list[PlannedStep] = []
        for step in self.steps:
            if not step.applies(resolved):
                continue
            planned.append(
                PlannedStep(
                    index=len(planned) + 1,
                    argv=step.render(resolved),
                    description=step.description,
                    allow_failure=step.allow_failure,
                )
            )
        return planned

    def summary(self) -> dict[str, Any]:
        """Serializable overview used by ``list`` and ``show``."""
        return {
            "name": self.name,
            "description": self.description,
            "params": [p.model_dump() for p in self.params],
            "steps": len(self.steps),
            "destructive": self.destructive,
            "source": self.source,
        }
