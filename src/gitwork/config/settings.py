"""gitwork settings assembled from the command line, environment and config file.

A value set by a CLI flag beats a ``GITWORK_*`` environment variable, which
beats ``gitwork.toml``, which beats the defaults in :mod:`gitwork.config.models`.
The TOML file is the one :func:`gitwork.config.discovery.locate_config` picks.
Every configuration problem surfaces as a :class:`click.ClickException`
naming the file.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from gitwork.config.discovery import ConfigNotFoundError, locate_config
from gitwork.config.models import GitConfig, GitHubConfig, PluginsConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``gitwork.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class GitworkSettings(BaseSettings):
    """Unified settings for the entire gitwork CLI.

    Merges CLI flags, environment variables, TOML config sections,
    and code-baked defaults into a single frozen object.

    Attributes:
        repo_root: Working tree the workflows run in (``--repo``, else the
            directory holding ``gitwork.toml``, else CWD).
        config_path: The TOML file that was loaded, if any.
        workflows: Raw ``[workflows.<name>]`` entries. They are validated
            one by one when the registry is built so a broken entry (even
            one that is not a table) only costs that entry.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "GITWORK_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved path (derived from the config file location) ---
    repo_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_interact: bool = False
    sync: bool = False

    # --- TOML sections ---
    git: GitConfig = Field(default_factory=GitConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    workflows: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @property
    def binaries(self) -> dict[str, str]:
        """Map of logical tool name to the executable actually invoked."""
        return {"git": self.git.binary, "gh": self.github.binary}

    @property
    def workflow_context(self) -> dict[str, str]:
        """Values every workflow template may reference."""
        return {"remote": self.git.remote, "default_branch": self.git.default_branch}

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        repo_root: Path | None = None,
        **cli_flags: Any,
    ) -> GitworkSettings:
        """Construct settings from CLI invocation.

        Locates ``gitwork.toml`` (explicit *config_path*, ``GITWORK_CONFIG``,
        or walk-up from *repo_root*), resolves the repository root, and
        merges CLI flags as highest-priority overrides.

        Raises:
            click.ClickException: The named config file is missing, or a
                value from TOML or the environment does not validate.
        """
        try:
            toml_path = locate_config(repo_root, explicit=config_path)
        except ConfigNotFoundError as exc:
            raise click.ClickException(str(exc)) from exc

        resolved_root = repo_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                repo_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        except ValidationError as exc:
            raise click.ClickException(_describe_invalid(exc, toml_path)) from exc
        finally:
            _tls.toml_path = None


def _describe_invalid(exc: ValidationError, toml_path: Path | None) -> str:
    """One line per invalid setting, e.g. ``git.timeout: Input should be ...``."""
    where = f" in {toml_path}" if toml_path else ""
    lines = [f"Invalid settings{where}:"]
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"]) or "(root)"
        lines.append(f"  {loc}: {error['msg']}")
    return "\n".join(lines)
