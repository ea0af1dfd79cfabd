"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, gitwork.toml only contains
overrides. A repository needs no config file at all.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# --- gitwork.toml sections ---


class GitConfig(BaseModel):
    """[git] section."""

    model_config = {"frozen": True}

    binary: str = "git"
    remote: str = "origin"
    default_branch: str = "main"
    timeout: float = 120.0


class GitHubConfig(BaseModel):
    """[github] section."""

    model_config = {"frozen": True}

    binary: str = "gh"


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".gitwork/plugins"


class WorkflowParamConfig(BaseModel):
    """One entry of ``[workflows.<name>].params``."""

    model_config = {"frozen": True}

    name: str
    help: str = ""
    required: bool = True
    default: str | None = None


class WorkflowStepConfig(BaseModel):
    """One entry of ``[workflows.<name>].steps``.

    A bare list of strings in TOML is accepted as shorthand for ``{argv = [...]}``.
    """

    model_config = {"frozen": True}

    argv: list[str]
    description: str = ""
    when: str | None = None
    unless: str | None = None
    allow_failure: bool = False


class WorkflowConfig(BaseModel):
    """[workflows.<name>] section."""

    model_config = {"frozen": True}

    description: str = ""
    destructive: bool = False
    params: list[WorkflowParamConfig] = Field(default_factory=list)
    steps: list[WorkflowStepConfig | list[str]] = Field(default_factory=list)

    def step_dicts(self) -> list[dict[str, Any]]:
        """Normalize shorthand steps into keyword dicts."""
        out: list[dict[str, Any]] = []
        for step in self.steps:
            if isinstance(step, list):
                out.append({"argv": step})
            else:
                out.append(step.model_dump())
        return out
