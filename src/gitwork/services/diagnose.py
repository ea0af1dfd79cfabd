"""DiagnoseService — explain git output and repository state."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitwork.domain.diagnostics import (
    REBASE_IN_PROGRESS,
    RULES_BY_CODE,
    Diagnosis,
    DiagnosticRule,
    detect,
)
from gitwork.infrastructure.repository import RepoInspector
from gitwork.services.base import BaseService
from gitwork.services.result import ServiceResult

if TYPE_CHECKING:
    from gitwork.infrastructure.repository import RepoState

BEHIND_UPSTREAM = DiagnosticRule(
    code="behind_upstream",
    summary="The remote branch has commits you do not have yet.",
    suggestions=["gitwork run sync", "git pull --rebase"],
    severity="info",
)

OPERATION_IN_PROGRESS = DiagnosticRule(
    code="operation_in_progress",
    summary="A git operation was interrupted and is waiting to be finished.",
    suggestions=[
        "git status  # shows how to continue or abort",
        "git merge --continue / --abort",
        "git cherry-pick --continue / --abort",
        "git revert --continue / --abort",
        "git bisect reset",
    ],
    severity="warning",
)


class DiagnoseService(BaseService):
    """Run the conflict detector over text or over live repository state."""

    def diagnose(self, text: str) -> ServiceResult:
        """Match *text* (usually pasted git output) against all rules."""
        found = detect(text, self._workspace.rules)
        return ServiceResult(
            ok=True,
            op="diagnose",
            data={
                "diagnoses": [d.model_dump() for d in found],
                "count": len(found),
            },
            warnings=self._workspace.take_warnings(),
        )

    def status(self) -> ServiceResult:
        """Inspect the repository and report anything that needs attention."""
        state = RepoInspector(self._workspace.executor()).inspect()
        warnings = self._workspace.take_warnings()
        if not state.is_repo:
            diagnosis = RULES_BY_CODE["not_a_repository"].diagnosis()
            return ServiceResult.failure(
                "status",
                "NOT_A_REPOSITORY",
                f"{self._workspace.root} is not inside a Git repository",
                detail={"path": str(self._workspace.root)},
                data={"diagnoses": [diagnosis.model_dump()]},
                warnings=warnings,
            )

        found = diagnose_state(state)
        return ServiceResult(
            ok=True,
            op="status",
            data={
                **state.to_dict(),
                "diagnoses": [d.model_dump() for d in found],
            },
            warnings=warnings,
        )


def diagnose_state(state: RepoState) -> list[Diagnosis]:
    """Translate a RepoState into diagnoses, most urgent first."""
    found: list[Diagnosis] = []
    rebasing = "rebase" in state.in_progress

    if state.conflicted:
        rule = RULES_BY_CODE["rebase_conflict" if rebasing else "merge_conflict"]
        found.append(rule.diagnosis(excerpt=", ".join(state.conflicted)))
    if rebasing:
        found.append(REBASE_IN_PROGRESS.diagnosis())
    elif state.detached:
        found.append(RULES_BY_CODE["detached_head"].diagnosis(excerpt=state.head or ""))
    others = [
        op
        for op in state.in_progress
        if op != "rebase" and not (op == "merge" and state.conflicted)
    ]
    if others:
        found.append(OPERATION_IN_PROGRESS.diagnosis(excerpt=", ".join(others)))
    if state.branch and state.upstream is None:
        found.append(
            RULES_BY_CODE["no_upstream"]
            .diagnosis(excerpt=state.branch)
            .model_copy(update={"severity": "info"})
        )
    if state.behind:
        found.append(BEHIND_UPSTREAM.diagnosis(excerpt=f"{state.behind} commit(s) behind"))
    return found
