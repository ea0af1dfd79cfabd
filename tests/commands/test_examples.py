"""Tests for --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from gitwork.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--examples"], ["gitwork list"]),
    (["list", "--examples"], ["gitwork -q list"]),
    (["show", "--examples"], ["gitwork show save"]),
    (["run", "--examples"], ["--dry-run", "--yes"]),
    (["diagnose", "--examples"], ["gitwork diagnose"]),
    (["status", "--examples"], ["gitwork status"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    args, _ = item
    return "_".join(a for a in args if a != "--examples") or "root"


@pytest.mark.parametrize(
    ("args", "keywords"),
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "Examples for" in result.output
    for keyword in keywords:
        assert keyword in result.output


def test_examples_not_in_help_text(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["run", "--help"])
    assert "--examples" in result.output
    assert "gitwork run delete-branch" not in result.output
