"""Tests for DiagnoseService: text diagnosis and repository status."""

from __future__ import annotations

from pathlib import Path

import pluggy

from gitwork.config.settings import GitworkSettings
from gitwork.domain.diagnostics import DiagnosticRule
from gitwork.infrastructure.repository import RepoState
from gitwork.services.diagnose import DiagnoseService, diagnose_state
from gitwork.services.workspace import Workspace
from tests.conftest import commit_file, git

hookimpl = pluggy.HookimplMarker("gitwork")


def _codes(state: RepoState) -> list[str]:
    return [d.code for d in diagnose_state(state)]


class TestDiagnose:
    def test_recognized_text(self, workspace: Workspace) -> None:
        result = DiagnoseService(workspace).diagnose(
            "fatal: refusing to merge unrelated histories"
        )
        assert result.ok
        assert result.op == "diagnose"
        assert result.data["count"] == 1
        assert result.data["diagnoses"][0]["code"] == "unrelated_histories"

    def test_unrecognized_text_is_still_ok(self, workspace: Workspace) -> None:
        result = DiagnoseService(workspace).diagnose("Everything up-to-date")
        assert result.ok
        assert result.data == {"diagnoses": [], "count": 0}

    def test_plugin_rules_apply(self, git_repo: Path) -> None:
        class LfsRules:
            @hookimpl
            def register_diagnostic_rules(self) -> list[DiagnosticRule]:
                return [
                    DiagnosticRule(
                        code="lfs_missing",
                        pattern="git-lfs",
                        summary="Git LFS is not installed.",
                    )
                ]

        ws = Workspace(GitworkSettings.from_cli(repo_root=git_repo))
        ws.plugins.register_plugin(LfsRules())
        result = DiagnoseService(ws).diagnose("git-lfs: command not found")
        codes = [d["code"] for d in result.data["diagnoses"]]
        assert codes == ["command_not_found", "lfs_missing"]

    def test_plugin_rule_with_bad_regex_is_warning(self, git_repo: Path) -> None:
        class BrokenRules:
            @hookimpl
            def register_diagnostic_rules(self) -> list[DiagnosticRule]:
                return [DiagnosticRule(code="broken", pattern="([", summary="never built")]

        ws = Workspace(GitworkSettings.from_cli(repo_root=git_repo))
        ws.plugins.register_plugin(BrokenRules())
        result = DiagnoseService(ws).diagnose("fatal: refusing to merge unrelated histories")
        assert result.ok
        assert [d["code"] for d in result.data["diagnoses"]] == ["unrelated_histories"]
        [warning] = result.warnings
        assert warning.startswith("Plugin BrokenRules failed in register_diagnostic_rules")
        assert "invalid regular expression" in warning


class TestStatus:
    def test_not_a_repository(self, tmp_path: Path) -> None:
        ws = Workspace(GitworkSettings.from_cli(repo_root=tmp_path))
        result = DiagnoseService(ws).status()
        assert not result.ok
        assert result.error.code == "NOT_A_REPOSITORY"
        assert result.data["diagnoses"][0]["code"] == "not_a_repository"

    def test_clean_repo_without_upstream(self, workspace: Workspace) -> None:
        result = DiagnoseService(workspace).status()
        assert result.ok
        assert result.data["branch"] == "main"
        assert result.data["clean"] is True
        diagnoses = result.data["diagnoses"]
        assert [d["code"] for d in diagnoses] == ["no_upstream"]
        assert diagnoses[0]["severity"] == "info"

    def test_tracked_and_up_to_date(self, workspace: Workspace, remote_repo: Path) -> None:
        result = DiagnoseService(workspace).status()
        assert result.data["upstream"] == "origin/main"
        assert result.data["diagnoses"] == []

    def test_merge_conflict(self, workspace: Workspace, git_repo: Path) -> None:
        git(git_repo, "switch", "-q", "-c", "feature")
        commit_file(git_repo, "README.md", "feature\n", "feature change")
        git(git_repo, "switch", "-q", "main")
        commit_file(git_repo, "README.md", "main\n", "main change")
        workspace.executor().run(["git", "merge", "feature"])

        result = DiagnoseService(workspace).status()
        codes = [d["code"] for d in result.data["diagnoses"]]
        assert codes[0] == "merge_conflict"
        assert "operation_in_progress" not in codes
        assert result.data["diagnoses"][0]["excerpt"] == "README.md"


class TestDiagnoseState:
    def test_rebase_with_conflicts(self) -> None:
        state = RepoState(
            is_repo=True,
            detached=True,
            conflicted=["app.py"],
            in_progress=["rebase"],
        )
        assert _codes(state) == ["rebase_conflict", "rebase_in_progress"]

    def test_detached_head(self) -> None:
        state = RepoState(is_repo=True, detached=True, head="abc1234")
        [diag] = diagnose_state(state)
        assert diag.code == "detached_head"
        assert diag.excerpt == "abc1234"

    def test_cherry_pick_in_progress(self) -> None:
        state = RepoState(is_repo=True, branch="main", upstream="origin/main",
                          in_progress=["cherry-pick"])
        assert _codes(state) == ["operation_in_progress"]

    def test_merge_without_conflicts_still_in_progress(self) -> None:
        state = RepoState(is_repo=True, branch="main", upstream="origin/main",
                          in_progress=["merge"])
        assert _codes(state) == ["operation_in_progress"]

    def test_behind_upstream(self) -> None:
        state = RepoState(is_repo=True, branch="main", upstream="origin/main", behind=3)
        [diag] = diagnose_state(state)
        assert diag.code == "behind_upstream"
        assert diag.excerpt == "3 commit(s) behind"
        assert diag.severity == "info"

    def test_healthy(self) -> None:
        state = RepoState(is_repo=True, branch="main", upstream="origin/main", ahead=2)
        assert diagnose_state(state) == []
