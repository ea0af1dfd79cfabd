"""Conflict and error detection for git/gh output.

Each :class:`DiagnosticRule` pairs a regex over command output with a
short explanation and concrete next commands. :func:`detect` scans text
with a rule list and reports each matching rule once.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Severity = Literal["error", "warning", "info"]

_FLAGS = re.IGNORECASE | re.MULTILINE


class Diagnosis(BaseModel):
    """A recognized problem in command output or repository state."""

    model_config = {"frozen": True}

    code: str
    summary: str
    suggestions: list[str] = Field(default_factory=list)
    severity: Severity = "error"
    excerpt: str = ""


class DiagnosticRule(BaseModel):
    """A known failure signature and the advice that goes with it."""

    model_config = {"frozen": True}

    code: str
    pattern: str | None = None
    exclude: str | None = None
    summary: str
    suggestions: list[str] = Field(default_factory=list)
    severity: Severity = "error"

    @field_validator("pattern", "exclude")
    @classmethod
    def _check_regex(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value, _FLAGS)
            except re.error as exc:
                raise ValueError(f"invalid regular expression {value!r}: {exc}") from exc
        return value

    def match(self, text: str) -> Diagnosis | None:
        """Return a Diagnosis if the pattern occurs in *text* and *exclude* does not.

        Rules without a pattern describe repository state only and never match.
        """
        if self.pattern is None:
            return None
        m = re.search(self.pattern, text, _FLAGS)
        if m is None:
            return None
        if self.exclude is not None and re.search(self.exclude, text, _FLAGS):
            return None
        return self.diagnosis(excerpt=_line_at(text, m.start()))

    def diagnosis(self, *, excerpt: str = "") -> Diagnosis:
        """Build a Diagnosis for this rule without matching anything."""
        return Diagnosis(
            code=self.code,
            summary=self.summary,
            suggestions=list(self.suggestions),
            severity=self.severity,
            excerpt=excerpt,
        )


def _line_at(text: str, pos: int) -> str:
    start = text.rfind("\n", 0, pos) + 1
    end = text.find("\n", pos)
    return text[start : end if end != -1 else len(text)].strip()


DEFAULT_RULES: tuple[DiagnosticRule, ...] = (
    DiagnosticRule(
        code="merge_conflict",
        pattern=r"^CONFLICT \(|Automatic merge failed|you have unmerged paths|"
        r"Merging is not possible because you have unmerged files",
        exclude=r"could not apply [0-9a-f]+|rebase --continue",
        summary="The merge stopped on conflicting changes.",
        suggestions=[
            "git status  # list conflicted files",
            "edit the files, remove <<<<<<< ======= >>>>>>> markers",
            "git add <file> && git commit",
            "gitwork run abort-merge  # give up and restore the pre-merge state",
        ],
    ),
    DiagnosticRule(
        code="rebase_conflict",
        pattern=r"could not apply [0-9a-f]+|Resolve all conflicts manually|"
        r"git rebase --continue",
        summary="The rebase stopped on a commit that does not apply cleanly.",
        suggestions=[
            "git status  # list conflicted files",
            "fix the conflicts, then: git add <file> && git rebase --continue",
            "git rebase --skip  # drop the offending commit",
            "gitwork run abort-rebase  # return to the state before the rebase",
        ],
    ),
    DiagnosticRule(
        code="push_rejected",
        pattern=r"\[rejected\]|Updates were rejected|failed to push some refs|non-fast-forward",
        summary="The remote has commits your branch does not have.",
        suggestions=[
            "gitwork run sync  # fetch and rebase onto the remote branch",
            "git pull --rebase && git push",
            "git push --force-with-lease  # only if you rewrote history on purpose",
        ],
    ),
    DiagnosticRule(
        code="detached_head",
        pattern=r"detached HEAD|HEAD detached at|You are not currently on a branch",
        summary="HEAD points at a commit, not a branch. New commits can be lost.",
        suggestions=[
            "git switch -c <new-branch>  # keep work done here on a new branch",
            "git switch <branch>  # return to an existing branch",
        ],
        severity="warning",
    ),
    DiagnosticRule(
        code="not_a_repository",
        pattern=r"not a git repository",
        summary="This directory is not inside a Git repository.",
        suggestions=[
            "cd into your project, or pass --repo PATH",
            "gitwork run init-repo  # start a new repository here",
        ],
    ),
    DiagnosticRule(
        code="nothing_to_commit",
        pattern=r"nothing to commit|no changes added to commit|nothing added to commit",
        summary="There were no staged changes to commit.",
        suggestions=["git status  # check what changed", "git add <file>  # stage changes"],
        severity="info",
    ),
    DiagnosticRule(
        code="local_changes_overwritten",
        pattern=r"Your local changes to the following files would be overwritten|"
        r"untracked working tree files would be overwritten|"
        r"cannot (?:pull|rebase) with rebase: You have unstaged changes|"
        r"Please commit your changes or stash them",
        summary="Uncommitted changes block this operation.",
        suggestions=[
            "gitwork run save <message>  # commit them",
            "gitwork run stash  # shelve them, re-apply later with: gitwork run unstash",
        ],
    ),
    DiagnosticRule(
        code="no_upstream",
        pattern=r"has no upstream branch|no tracking information for the current branch|"
        r"There is no tracking information",
        summary="The current branch does not track a remote branch.",
        suggestions=[
            "gitwork run publish  # push and set upstream",
            "git branch --set-upstream-to=origin/<branch>",
        ],
    ),
    DiagnosticRule(
        code="authentication_failed",
        pattern=r"Authentication failed|Permission denied \(publickey\)|"
        r"could not read Username|terminal prompts disabled|403 Forbidden",
        summary="The remote rejected your credentials.",
        suggestions=[
            "ssh -T git@github.com  # check SSH key setup",
            "gh auth login  # or refresh a personal access token",
            "git remote -v  # confirm the remote URL",
        ],
    ),
    DiagnosticRule(
        code="unrelated_histories",
        pattern=r"refusing to merge unrelated histories",
        summary="The two branches share no common commit.",
        suggestions=["git pull --allow-unrelated-histories  # if joining them is intended"],
    ),
    DiagnosticRule(
        code="pathspec_no_match",
        pattern=r"pathspec '.*' did not match|invalid reference:|"
        r"fatal: invalid reference|unknown revision or path",
        summary="A file, branch or revision name was not found.",
        suggestions=[
            "git branch -a  # list branches, including remote ones",
            "git fetch --all  # the branch may only exist on the remote",
        ],
    ),
    DiagnosticRule(
        code="branch_exists",
        pattern=r"a branch named '.*' already exists|tag '.*' already exists",
        summary="The name is already taken.",
        suggestions=[
            "git switch <branch>  # use the existing branch",
            "pick a different name",
        ],
    ),
    DiagnosticRule(
        code="index_locked",
        pattern=r"index\.lock': File exists|Another git process seems to be running",
        summary="Another git process holds the index lock.",
        suggestions=[
            "wait for the other git process to finish",
            "rm .git/index.lock  # only if no git process is running",
        ],
    ),
    DiagnosticRule(
        code="gh_not_authenticated",
        pattern=r"gh auth login|not logged into any GitHub hosts|GH_TOKEN",
        summary="The GitHub CLI is not authenticated.",
        suggestions=["gh auth login", "gh auth status"],
    ),
    DiagnosticRule(
        code="command_not_found",
        pattern=r"command not found",
        summary="A required executable is not installed or not on PATH.",
        suggestions=[
            "install git (https://git-scm.com) or the GitHub CLI (https://cli.github.com)",
            "set [git].binary / [github].binary in gitwork.toml",
        ],
    ),
    DiagnosticRule(
        code="timed_out",
        pattern=r"timed out after",
        summary="The command did not finish in time.",
        suggestions=[
            "check network access to the remote",
            "raise [git].timeout in gitwork.toml",
        ],
    ),
)

RULES_BY_CODE: dict[str, DiagnosticRule] = {r.code: r for r in DEFAULT_RULES}

# Repository-state diagnosis with no output signature.
REBASE_IN_PROGRESS = DiagnosticRule(
    code="rebase_in_progress",
    summary="A rebase is in progress.",
    suggestions=[
        "git rebase --continue  # after resolving conflicts",
        "gitwork run abort-rebase",
    ],
    severity="warning",
)


def detect(text: str, rules: Iterable[DiagnosticRule] = DEFAULT_RULES) -> list[Diagnosis]:
    """Scan *text* and return one Diagnosis per matching rule code, in rule order."""
    if not text or not text.strip():
        return []
    found: list[Diagnosis] = []
    seen: set[str] = set()
    for rule in rules:
        if rule.code in seen:
            continue
        diagnosis = rule.match(text)
        if diagnosis is not None:
            found.append(diagnosis)
            seen.add(rule.code)
    return found
