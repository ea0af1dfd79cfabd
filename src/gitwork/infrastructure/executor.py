"""ShellExecutor — runs git/gh subprocesses and captures what happened.

A failing command is a normal outcome, not an exception: the caller gets
a :class:`CommandOutcome` with the exit code and both output streams.
Missing executables and timeouts are folded into outcomes too, using the
shell's conventional exit codes (127 and 124).
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124
EXIT_NOT_EXECUTABLE = 126


@dataclass(frozen=True)
class CommandOutcome:
    """Result of one external command."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0
    timed_out: bool = False
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr joined, for pattern matching."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ShellExecutor:
    """Run commands in a fixed working directory.

    Parameters:
        cwd: Directory every command runs in.
        timeout: Seconds before a command is killed.
        binaries: Logical name → executable, applied to ``argv[0]``
            (e.g. ``{"git": "/opt/git/bin/git"}``).
        dry_run: Record commands without running them.
        env: Extra environment variables layered over ``os.environ``.
    """

    cwd: Path
    timeout: float = 120.0
    binaries: Mapping[str, str] = field(default_factory=dict)
    dry_run: bool = False
    env: Mapping[str, str] | None = None

    def resolve(self, argv: Sequence[str]) -> list[str]:
        """Apply the binary mapping to ``argv[0]``."""
        if not argv:
            raise ValueError("Cannot run an empty command")
        head, *rest = argv
        return [self.binaries.get(head, head), *rest]

    def _environ(self) -> dict[str, str]:
        environ = dict(os.environ)
        # Never block on an interactive credential prompt.
        environ["GIT_TERMINAL_PROMPT"] = "0"
        environ.setdefault("GH_PROMPT_DISABLED", "1")
        if self.env:
            environ.update(self.env)
        return environ

    def run(self, argv: Sequence[str]) -> CommandOutcome:
        """Run *argv* and return its outcome. Never raises for command failure."""
        resolved = self.resolve(argv)
        if self.dry_run:
            logger.debug("dry-run: %s", resolved)
            return CommandOutcome(argv=resolved, returncode=0, skipped=True)

        start = time.perf_counter()
        try:
            proc = subprocess.run(
                resolved,
                cwd=self.cwd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout,
                env=self._environ(),
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError:
            if Path(self.cwd).is_dir():
                reason = f"{resolved[0]}: command not found"
            else:
                reason = f"{self.cwd}: no such directory"
            outcome = CommandOutcome(
                argv=resolved,
                returncode=EXIT_NOT_FOUND,
                stderr=reason,
                duration_ms=_elapsed_ms(start),
            )
        except OSError as exc:
            outcome = CommandOutcome(
                argv=resolved,
                returncode=EXIT_NOT_EXECUTABLE,
                stderr=f"{resolved[0]}: cannot execute: {exc}",
                duration_ms=_elapsed_ms(start),
            )
        except subprocess.TimeoutExpired as exc:
            outcome = CommandOutcome(
                argv=resolved,
                returncode=EXIT_TIMEOUT,
                stdout=_text(exc.stdout),
                stderr=_text(exc.stderr) + f"\n{resolved[0]}: timed out after {self.timeout:g}s",
                duration_ms=_elapsed_ms(start),
                timed_out=True,
            )
        else:
            outcome = CommandOutcome(
                argv=resolved,
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
                duration_ms=_elapsed_ms(start),
            )

        logger.debug(
            "ran %s -> %d in %.1fms",
            resolved,
            outcome.returncode,
            outcome.duration_ms,
        )
        return outcome

    def capture(self, *args: str) -> str | None:
        """Run ``git <args>`` as a query; return stdout, or None on failure.

        Query commands always run, even in dry-run mode, since they do
        not modify the repository.
        """
        executor = replace(self, dry_run=False) if self.dry_run else self
        outcome = executor.run(["git", *args])
        if not outcome.ok:
            return None
        return outcome.stdout.rstrip("\n")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
