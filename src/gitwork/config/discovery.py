"""Locate the gitwork.toml that applies to a working tree.

Lookup order:
  1. ``--config PATH``
  2. ``GITWORK_CONFIG``
  3. ``gitwork.toml`` in the working tree or one of its parents, stopping
     at the repository boundary (the first directory holding ``.git``)

A file named explicitly (1 or 2) must exist.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "gitwork.toml"
CONFIG_ENV_VAR = "GITWORK_CONFIG"


class ConfigNotFoundError(FileNotFoundError):
    """A config file named by ``--config`` or ``GITWORK_CONFIG`` does not exist."""

    def __init__(self, path: Path, origin: str) -> None:
        self.path = path
        self.origin = origin
        super().__init__(f"Config file from {origin} not found: {path}")


def locate_config(start: Path | None = None, *, explicit: str | Path | None = None) -> Path | None:
    """Return the config file for *start* (default: cwd), or None if there is none."""
    if explicit:
        return _named(explicit, "--config")
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return _named(env_path, CONFIG_ENV_VAR)

    for directory in _upwards(start or Path.cwd()):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if (directory / ".git").exists():
            break
    return None


def _named(raw: str | Path, origin: str) -> Path:
    path = Path(raw).expanduser()
    if not path.is_file():
        raise ConfigNotFoundError(path, origin)
    return path


def _upwards(start: Path) -> Iterator[Path]:
    current = start.resolve()
    yield current
    yield from current.parents
