"""Shared pytest fixtures and test helpers for gitwork tests."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from gitwork.config.settings import GitworkSettings
from gitwork.services.workspace import Workspace


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own config and git identity out of every test."""
    for name in [k for k in os.environ if k.startswith("GITWORK_")]:
        monkeypatch.delenv(name)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@test.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@test.com")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


def git(cwd: Path, *args: str) -> str:
    """Run a git command in *cwd*, asserting success; return stdout."""
    proc = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str) -> None:
    """Write *name* and commit it."""
    (repo / name).write_text(content, encoding="utf-8")
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Temporary repository on branch ``main`` with one commit."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q", "-b", "main")
    git(repo, "config", "user.email", "test@test.com")
    git(repo, "config", "user.name", "Test")
    git(repo, "config", "commit.gpgsign", "false")
    commit_file(repo, "README.md", "hello\n", "init")
    return repo


@pytest.fixture
def remote_repo(tmp_path: Path, git_repo: Path) -> Path:
    """A bare ``origin`` for *git_repo*, with ``main`` pushed and tracked."""
    bare = tmp_path / "origin.git"
    git(tmp_path, "init", "-q", "--bare", "-b", "main", str(bare))
    git(git_repo, "remote", "add", "origin", str(bare))
    git(git_repo, "push", "-q", "-u", "origin", "main")
    return bare


@pytest.fixture
def settings(git_repo: Path) -> GitworkSettings:
    """Settings rooted at *git_repo* with synchronous events."""
    return GitworkSettings.from_cli(repo_root=git_repo, sync=True)


@pytest.fixture
def workspace(settings: GitworkSettings) -> Workspace:
    """Workspace over *git_repo*, closed after the test."""
    ws = Workspace(settings)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def _in_repo(git_repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the test repository so the CLI picks it up.

    Use via ``@pytest.mark.usefixtures("_in_repo")`` on command test classes.
    """
    monkeypatch.chdir(git_repo)
