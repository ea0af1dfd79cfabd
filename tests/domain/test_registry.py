"""Tests for WorkflowRegistry lookup and layering."""

from __future__ import annotations

import pytest

from gitwork.domain.registry import (
    DuplicateWorkflowError,
    UnknownWorkflowError,
    WorkflowRegistry,
)
from gitwork.domain.workflows import Step, Workflow


def _wf(name: str, **kw: object) -> Workflow:
    return Workflow(name=name, steps=[Step(argv=["git", "status"])], **kw)


class TestLookup:
    def test_with_builtins(self) -> None:
        reg = WorkflowRegistry.with_builtins()
        assert "save" in reg
        assert len(reg) == 16

    def test_get(self) -> None:
        reg = WorkflowRegistry([_wf("check")])
        assert reg.get("check").name == "check"

    def test_names_sorted(self) -> None:
        reg = WorkflowRegistry([_wf("zeta"), _wf("alpha")])
        assert reg.names() == ["alpha", "zeta"]
        assert [wf.name for wf in reg.all()] == ["alpha", "zeta"]
        assert [wf.name for wf in reg] == ["alpha", "zeta"]

    def test_unknown_name_suggests_close_matches(self) -> None:
        reg = WorkflowRegistry.with_builtins()
        with pytest.raises(UnknownWorkflowError) as exc_info:
            reg.get("sav")
        err = exc_info.value
        assert err.name == "sav"
        assert "save" in err.suggestions
        assert "did you mean" in str(err)

    def test_unknown_without_suggestions(self) -> None:
        reg = WorkflowRegistry([_wf("check")])
        with pytest.raises(UnknownWorkflowError) as exc_info:
            reg.get("zzzzzz")
        assert exc_info.value.suggestions == []
        assert str(exc_info.value) == "Unknown workflow 'zzzzzz'"

    def test_unknown_is_a_key_error(self) -> None:
        with pytest.raises(KeyError):
            WorkflowRegistry().get("nope")


class TestRegister:
    def test_duplicate_rejected(self) -> None:
        reg = WorkflowRegistry([_wf("check")])
        with pytest.raises(DuplicateWorkflowError, match="already registered"):
            reg.register(_wf("check"))

    def test_replace(self) -> None:
        reg = WorkflowRegistry([_wf("check")])
        reg.register(_wf("check", description="new"), replace=True)
        assert reg.get("check").description == "new"


class TestLoadConfig:
    def test_adds_config_workflow(self) -> None:
        reg = WorkflowRegistry.with_builtins()
        warnings = reg.load_config(
            {
                "wip": {
                    "description": "Quick work-in-progress commit",
                    "steps": [["git", "add", "-A"], ["git", "commit", "-m", "wip"]],
                }
            }
        )
        assert warnings == []
        wf = reg.get("wip")
        assert wf.source == "config"
        assert [s.argv for s in wf.steps] == [["git", "add", "-A"], ["git", "commit", "-m", "wip"]]

    def test_config_replaces_builtin(self) -> None:
        reg = WorkflowRegistry.with_builtins()
        reg.load_config({"publish": {"steps": [{"argv": ["git", "push"], "description": "push"}]}})
        wf = reg.get("publish")
        assert wf.source == "config"
        assert wf.steps[0].description == "push"

    def test_params_and_guards(self) -> None:
        reg = WorkflowRegistry()
        warnings = reg.load_config(
            {
                "hotfix": {
                    "params": [{"name": "version", "help": "Release"}],
                    "steps": [
                        {"argv": ["git", "switch", "-c", "hotfix/{version}", "{remote}/main"]},
                        {"argv": ["git", "fetch"], "allow_failure": True},
                    ],
                }
            }
        )
        assert warnings == []
        plan = reg.get("hotfix").plan({"version": "1.2"}, {"remote": "origin", "default_branch": "main"})
        assert plan[0].argv == ["git", "switch", "-c", "hotfix/1.2", "origin/main"]
        assert plan[1].allow_failure is True

    def test_invalid_entry_skipped_with_warning(self) -> None:
        reg = WorkflowRegistry.with_builtins()
        warnings = reg.load_config(
            {
                "broken": {"steps": [["git", "merge", "{target}"]]},
                "fine": {"steps": [["git", "status"]]},
            }
        )
        assert len(warnings) == 1
        assert "broken" in warnings[0]
        assert "broken" not in reg
        assert "fine" in reg

    def test_invalid_name_skipped(self) -> None:
        reg = WorkflowRegistry()
        warnings = reg.load_config({"Bad_Name": {"steps": [["git", "status"]]}})
        assert len(warnings) == 1
        assert len(reg) == 0

    def test_wrong_field_type_skipped(self) -> None:
        reg = WorkflowRegistry()
        warnings = reg.load_config({"odd": {"steps": "git status"}})
        assert "odd" in warnings[0]

    def test_non_table_entry_skipped(self) -> None:
        reg = WorkflowRegistry()
        warnings = reg.load_config({"wip": "oops", "ok": {"steps": [["git", "status"]]}})
        assert warnings == ["Skipping workflow 'wip' from config: expected a table, got str"]
        assert reg.names() == ["ok"]


class TestLoadPluginWorkflows:
    def test_registers_with_plugin_source(self) -> None:
        reg = WorkflowRegistry()
        warnings = reg.load_plugin_workflows("acme", [_wf("deploy")])
        assert warnings == []
        assert reg.get("deploy").source == "plugin:acme"

    def test_collision_skipped(self) -> None:
        reg = WorkflowRegistry.with_builtins()
        warnings = reg.load_plugin_workflows("acme", [_wf("save", description="hijack")])
        assert "collides" in warnings[0]
        assert reg.get("save").source == "builtin"

    def test_non_workflow_skipped(self) -> None:
        reg = WorkflowRegistry()
        warnings = reg.load_plugin_workflows("acme", [{"name": "deploy"}])
        assert "non-Workflow" in warnings[0]
        assert len(reg) == 0
