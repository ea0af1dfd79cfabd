"""Rich Console factory and theme for gitwork output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes. Markup is off:
git output and commit messages are printed verbatim.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GW_THEME = Theme(
    {
        "gw.ok": "bold green",
        "gw.error": "bold red",
        "gw.warning": "bold yellow",
        "gw.info": "bold blue",
        "gw.op": "bold cyan",
        "gw.key": "dim",
        "gw.name": "bold blue",
        "gw.command": "bold",
        "gw.branch": "bold magenta",
        "gw.status.ok": "green",
        "gw.status.failed": "bold red",
        "gw.status.allowed_failure": "yellow",
        "gw.status.planned": "cyan",
        "gw.status.not_run": "dim",
    }
)

_SEVERITY_STYLES: dict[str, str] = {
    "error": "gw.error",
    "warning": "gw.warning",
    "info": "gw.info",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=GW_THEME,
        no_color=no_color,
        markup=False,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_severity(severity: str) -> str:
    """Return the Rich style name for a diagnosis severity."""
    return _SEVERITY_STYLES.get(severity, "")


def style_for_status(status: str) -> str:
    """Return the Rich style name for a workflow step status."""
    name = f"gw.status.{status}"
    return name if name in GW_THEME.styles else ""
