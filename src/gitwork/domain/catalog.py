"""Built-in workflows.

Each entry is the scripted form of a cheat-sheet recipe: the handful of
git (and gh) commands people type for that task, in order.
"""

from __future__ import annotations

from gitwork.domain.workflows import Param, Step, Workflow

_BASE = Param(name="base", help="Branch to start from / merge into.", default="{default_branch}")


def _wf(
    name: str,
    description: str,
    params: list[Param],
    steps: list[Step],
    **kw: bool,
) -> Workflow:
    return Workflow(name=name, description=description, params=params, steps=steps, **kw)


BUILTIN_WORKFLOWS: tuple[Workflow, ...] = (
    _wf(
        "init-repo",
        "Create a repository here and record an initial commit.",
        [
            Param(name="branch", help="Initial branch name.", default="{default_branch}"),
            Param(name="message", help="Initial commit message.", default="Initial commit"),
        ],
        [
            Step(argv=["git", "init", "-b", "{branch}"], description="initialize repository"),
            Step(argv=["git", "add", "-A"], description="stage everything"),
            Step(argv=["git", "commit", "-m", "{message}"], description="initial commit"),
        ],
    ),
    _wf(
        "start-feature",
        "Create a feature branch from the up-to-date remote base branch.",
        [Param(name="branch", help="New branch name, e.g. feature/login-form."), _BASE],
        [
            Step(argv=["git", "fetch", "{remote}"], description="fetch remote"),
            Step(
                argv=["git", "switch", "--no-track", "-c", "{branch}", "{remote}/{base}"],
                description="create and switch to branch",
            ),
        ],
    ),
    _wf(
        "save",
        "Stage all changes and commit them.",
        [Param(name="message", help="Commit message.")],
        [
            Step(argv=["git", "add", "-A"], description="stage everything"),
            Step(argv=["git", "commit", "-m", "{message}"], description="commit"),
        ],
    ),
    _wf(
        "sync",
        "Rebase the current branch onto the latest remote base branch.",
        [_BASE],
        [
            Step(argv=["git", "fetch", "{remote}"], description="fetch remote"),
            Step(argv=["git", "rebase", "{remote}/{base}"], description="rebase onto base"),
        ],
    ),
    _wf(
        "publish",
        "Push the current branch and set its upstream.",
        [],
        [Step(argv=["git", "push", "-u", "{remote}", "HEAD"], description="push branch")],
    ),
    _wf(
        "open-pr",
        "Push the current branch and open a pull request with the GitHub CLI.",
        [
            _BASE,
            Param(name="title", help="PR title (defaults to commit info).", required=False),
            Param(name="body", help="PR body.", required=False),
        ],
        [
            Step(argv=["git", "push", "-u", "{remote}", "HEAD"], description="push branch"),
            Step(
                argv=["gh", "pr", "create", "--base", "{base}", "--fill"],
                description="open pull request from commit info",
                unless="title",
            ),
            Step(
                argv=[
                    "gh", "pr", "create", "--base", "{base}", "--title", "{title}", "--body={body}"
                ],
                description="open pull request",
                when="title",
            ),
        ],
    ),
    _wf(
        "finish-feature",
        "Merge a feature branch into the base branch and delete it.",
        [Param(name="branch", help="Feature branch to merge."), _BASE],
        [
            Step(argv=["git", "switch", "{base}"], description="switch to base"),
            Step(argv=["git", "pull", "--ff-only", "{remote}", "{base}"], description="update base"),
            Step(argv=["git", "merge", "--no-ff", "{branch}"], description="merge feature"),
            Step(argv=["git", "branch", "-d", "{branch}"], description="delete merged branch"),
        ],
    ),
    _wf(
        "amend",
        "Fold all current changes into the last commit.",
        [Param(name="message", help="Replacement commit message.", required=False)],
        [
            Step(argv=["git", "add", "-A"], description="stage everything"),
            Step(
                argv=["git", "commit", "--amend", "--no-edit"],
                description="amend keeping message",
                unless="message",
            ),
            Step(
                argv=["git", "commit", "--amend", "-m", "{message}"],
                description="amend with new message",
                when="message",
            ),
        ],
    ),
    _wf(
        "undo-commit",
        "Undo the last commit but keep its changes staged.",
        [],
        [Step(argv=["git", "reset", "--soft", "HEAD~1"], description="soft reset")],
    ),
    _wf(
        "discard-changes",
        "Throw away all uncommitted changes and untracked files.",
        [],
        [
            Step(argv=["git", "reset", "--hard", "HEAD"], description="reset tracked files"),
            Step(argv=["git", "clean", "-fd"], description="remove untracked files"),
        ],
        destructive=True,
    ),
    _wf(
        "stash",
        "Shelve uncommitted changes, including untracked files.",
        [Param(name="message", help="Stash description.", default="gitwork stash")],
        [Step(argv=["git", "stash", "push", "-u", "-m", "{message}"], description="stash changes")],
    ),
    _wf(
        "unstash",
        "Re-apply the most recent stash and drop it.",
        [],
        [Step(argv=["git", "stash", "pop"], description="pop stash")],
    ),
    _wf(
        "tag-release",
        "Create an annotated tag and push it.",
        [
            Param(name="tag", help="Tag name, e.g. v1.2.0."),
            Param(name="message", help="Tag message.", default="Release"),
        ],
        [
            Step(argv=["git", "tag", "-a", "{tag}", "-m", "{message}"], description="create tag"),
            Step(argv=["git", "push", "{remote}", "{tag}"], description="push tag"),
        ],
    ),
    _wf(
        "abort-merge",
        "Abandon an in-progress merge.",
        [],
        [Step(argv=["git", "merge", "--abort"], description="abort merge")],
    ),
    _wf(
        "abort-rebase",
        "Abandon an in-progress rebase.",
        [],
        [Step(argv=["git", "rebase", "--abort"], description="abort rebase")],
    ),
    _wf(
        "delete-branch",
        "Force-delete a branch locally and on the remote.",
        [Param(name="branch", help="Branch to delete.")],
        [
            Step(argv=["git", "branch", "-D", "{branch}"], description="delete local branch"),
            Step(
                argv=["git", "push", "{remote}", "--delete", "{branch}"],
                description="delete remote branch",
                allow_failure=True,
            ),
        ],
        destructive=True,
    ),
)
