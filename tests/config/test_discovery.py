"""Tests for gitwork.toml lookup."""

from pathlib import Path

import pytest

from gitwork.config.discovery import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    ConfigNotFoundError,
    locate_config,
)


class TestWalkUp:
    def test_found_in_start_dir(self, tmp_path: Path) -> None:
        cfg = tmp_path / CONFIG_FILENAME
        cfg.write_text("")
        assert locate_config(tmp_path) == cfg.resolve()

    def test_found_in_parent(self, tmp_path: Path) -> None:
        cfg = tmp_path / CONFIG_FILENAME
        cfg.write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert locate_config(nested) == cfg.resolve()

    def test_not_found(self, tmp_path: Path) -> None:
        assert locate_config(tmp_path) is None

    def test_stops_at_repository_boundary(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)
        nested = repo / "src"
        nested.mkdir()
        assert locate_config(nested) is None

    def test_config_at_repository_root(self, tmp_path: Path) -> None:
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)
        cfg = repo / CONFIG_FILENAME
        cfg.write_text("")
        assert locate_config(repo) == cfg.resolve()

    def test_worktree_git_file_is_a_boundary(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        worktree = tmp_path / "wt"
        worktree.mkdir()
        (worktree / ".git").write_text("gitdir: /elsewhere\n")
        assert locate_config(worktree) is None

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        cfg = tmp_path / CONFIG_FILENAME
        cfg.write_text("")
        monkeypatch.chdir(tmp_path)
        assert locate_config() == cfg.resolve()


class TestNamedConfig:
    def test_env_var_wins_over_walk_up(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        other = tmp_path / "other.toml"
        other.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(other))
        assert locate_config(tmp_path) == other

    def test_explicit_wins_over_env_var(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        env_cfg = tmp_path / "env.toml"
        env_cfg.write_text("")
        flag_cfg = tmp_path / "flag.toml"
        flag_cfg.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_cfg))
        assert locate_config(tmp_path, explicit=str(flag_cfg)) == flag_cfg

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        with pytest.raises(ConfigNotFoundError) as exc_info:
            locate_config(tmp_path)
        assert exc_info.value.origin == CONFIG_ENV_VAR
        assert "nope.toml" in str(exc_info.value)

    def test_explicit_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError, match="--config"):
            locate_config(tmp_path, explicit=tmp_path / "missing.toml")
