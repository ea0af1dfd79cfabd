"""Read-only inspection of a working tree through the git CLI."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gitwork.infrastructure.executor import ShellExecutor

logger = logging.getLogger(__name__)

# Porcelain v1 XY pairs that mean "unmerged".
_UNMERGED = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})

# Marker file/dir inside $GIT_DIR → name of the interrupted operation.
_IN_PROGRESS_MARKERS: tuple[tuple[str, str], ...] = (
    ("MERGE_HEAD", "merge"),
    ("rebase-merge", "rebase"),
    ("rebase-apply", "rebase"),
    ("CHERRY_PICK_HEAD", "cherry-pick"),
    ("REVERT_HEAD", "revert"),
    ("BISECT_LOG", "bisect"),
)


@dataclass(frozen=True)
class RepoState:
    """Snapshot of branch, tracking, and working-tree status."""

    is_repo: bool
    root: str | None = None
    branch: str | None = None
    detached: bool = False
    head: str | None = None
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    staged: int = 0
    unstaged: int = 0
    untracked: int = 0
    conflicted: list[str] = field(default_factory=list)
    in_progress: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked or self.conflicted)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["clean"] = self.clean
        return data


class RepoInspector:
    """Collect a :class:`RepoState` with a handful of git queries."""

    def __init__(self, executor: ShellExecutor) -> None:
        self._executor = executor

    def inspect(self) -> RepoState:
        git = self._executor.capture
        if git("rev-parse", "--is-inside-work-tree") != "true":
            return RepoState(is_repo=False)

        root = git("rev-parse", "--show-toplevel")
        branch = git("symbolic-ref", "--quiet", "--short", "HEAD")
        head = git("rev-parse", "--short", "HEAD")
        upstream = git("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}")

        ahead = behind = 0
        if upstream:
            counts = git("rev-list", "--left-right", "--count", "@{u}...HEAD")
            if counts:
                behind, ahead = _parse_counts(counts)

        staged, unstaged, untracked, conflicted = _parse_porcelain(
            git("status", "--porcelain=v1") or ""
        )

        git_dir = git("rev-parse", "--absolute-git-dir")
        in_progress = _in_progress(Path(git_dir)) if git_dir else []

        return RepoState(
            is_repo=True,
            root=root,
            branch=branch or None,
            detached=not branch,
            head=head or None,
            upstream=upstream or None,
            ahead=ahead,
            behind=behind,
            staged=staged,
            unstaged=unstaged,
            untracked=untracked,
            conflicted=conflicted,
            in_progress=in_progress,
        )


def _parse_counts(raw: str) -> tuple[int, int]:
    """Parse ``rev-list --left-right --count`` output into (left, right)."""
    parts = raw.split()
    if len(parts) != 2:
        logger.debug("Unexpected rev-list count output: %r", raw)
        return 0, 0
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return 0, 0


def _parse_porcelain(raw: str) -> tuple[int, int, int, list[str]]:
    """Count staged/unstaged/untracked entries and list conflicted paths."""
    staged = unstaged = untracked = 0
    conflicted: list[str] = []
    for line in raw.splitlines():
        if len(line) < 4:
            continue
        xy, path = line[:2], line[3:]
        if xy == "??":
            untracked += 1
        elif xy in _UNMERGED:
            conflicted.append(path)
        else:
            if xy[0] not in " !":
                staged += 1
            if xy[1] not in " !":
                unstaged += 1
    return staged, unstaged, untracked, conflicted


def _in_progress(git_dir: Path) -> list[str]:
    found: list[str] = []
    for marker, name in _IN_PROGRESS_MARKERS:
        if (git_dir / marker).exists() and name not in found:
            found.append(name)
    return found
