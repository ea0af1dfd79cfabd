"""Tests for the root CLI group and global flags."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from gitwork import __version__
from gitwork.cli import cli


class TestRootGroup:
    def test_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("list", "show", "run", "diagnose", "status"):
            assert name in result.output

    def test_no_subcommand_prints_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--examples"])
        assert result.exit_code == 0
        assert "gitwork run save" in result.output

    def test_unknown_command(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["explode"])
        assert result.exit_code != 0


class TestGlobalFlags:
    def test_repo_flag(self, cli_runner: CliRunner, git_repo: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "-C", str(git_repo), "status"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data"]["branch"] == "main"

    def test_config_flag(self, cli_runner: CliRunner, git_repo: Path, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text('[git]\nremote = "upstream"\n')
        result = cli_runner.invoke(
            cli, ["--json", "-c", str(cfg), "-C", str(git_repo), "show", "publish"]
        )
        assert result.exit_code == 0, result.output
        steps = json.loads(result.stdout)["data"]["steps"]
        assert steps[0]["argv"] == ["git", "push", "-u", "upstream", "HEAD"]

    def test_invalid_toml_is_click_error(
        self, cli_runner: CliRunner, git_repo: Path
    ) -> None:
        (git_repo / "gitwork.toml").write_text("[git\n")
        result = cli_runner.invoke(cli, ["-C", str(git_repo), "list"])
        assert result.exit_code == 1
        assert "Invalid TOML" in result.stderr

    def test_missing_config_flag_file(
        self, cli_runner: CliRunner, git_repo: Path, tmp_path: Path
    ) -> None:
        missing = tmp_path / "nope.toml"
        result = cli_runner.invoke(cli, ["-c", str(missing), "-C", str(git_repo), "list"])
        assert result.exit_code == 1
        assert "Config file from --config not found" in result.stderr
        assert "Traceback" not in result.output

    def test_invalid_setting_is_click_error(
        self, cli_runner: CliRunner, git_repo: Path
    ) -> None:
        (git_repo / "gitwork.toml").write_text('[git]\ntimeout = "soon"\n')
        result = cli_runner.invoke(cli, ["-C", str(git_repo), "list"])
        assert result.exit_code == 1
        assert "Invalid settings in" in result.stderr
        assert "git.timeout" in result.stderr

    @pytest.mark.usefixtures("_in_repo")
    def test_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "run", "save", "nothing", "--dry-run"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "OK: run_workflow"

    @pytest.mark.usefixtures("_in_repo")
    def test_sync_with_local_plugin(self, cli_runner: CliRunner, git_repo: Path) -> None:
        plugin_dir = git_repo / ".gitwork" / "plugins"
        plugin_dir.mkdir(parents=True)
        (plugin_dir / "audit.py").write_text(
            "import pluggy\n"
            "hookimpl = pluggy.HookimplMarker('gitwork')\n"
            "class Audit:\n"
            "    @hookimpl\n"
            "    def post_workflow(self, workflow, ok, steps_run):\n"
            "        raise RuntimeError('audit offline')\n",
            encoding="utf-8",
        )
        result = cli_runner.invoke(cli, ["--sync", "run", "publish", "--dry-run"])
        assert result.exit_code == 0
        assert "WARNING: Plugin hook post_workflow failed: audit offline" in result.stderr

    @pytest.mark.usefixtures("_in_repo")
    def test_async_plugin_failure_reported_on_exit(
        self, cli_runner: CliRunner, git_repo: Path
    ) -> None:
        plugin_dir = git_repo / ".gitwork" / "plugins"
        plugin_dir.mkdir(parents=True)
        (plugin_dir / "audit.py").write_text(
            "import pluggy\n"
            "hookimpl = pluggy.HookimplMarker('gitwork')\n"
            "class Audit:\n"
            "    @hookimpl\n"
            "    def post_workflow(self, workflow, ok, steps_run):\n"
            "        raise RuntimeError('audit offline')\n",
            encoding="utf-8",
        )
        result = cli_runner.invoke(cli, ["run", "publish", "--dry-run"])
        assert result.exit_code == 0
        assert "audit offline" in result.stderr
