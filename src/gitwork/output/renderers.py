"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer. Failed
``run_workflow`` results keep their step log, so the error line is
followed by the same step table and diagnoses a successful run shows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gitwork.output.console import (
    create_console,
    get_output,
    style_for_severity,
    style_for_status,
)

if TYPE_CHECKING:
    from rich.console import Console

    from gitwork.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
        follow_up = _FAILURE_RENDERERS.get(result.op)
        if follow_up is not None:
            follow_up(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items") or result.data.get("diagnoses")
    if items and isinstance(items, list):
        return "\n".join(_extract_name(item) for item in items if _extract_name(item))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_name(item: Any) -> str:
    """Extract an identifier from a dict item (workflows, diagnoses)."""
    if isinstance(item, dict):
        for key in ("name", "code"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="gw.ok")
    op = Text(f"  {result.op}", style="gw.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="gw.key")
    if key in ("branch", "upstream"):
        v = Text(str(value), style="gw.branch")
    elif key in ("workflow", "name"):
        v = Text(str(value), style="gw.name")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _render_diagnoses(console: Console, diagnoses: list[dict[str, Any]]) -> None:
    """Print one panel per diagnosis with its suggested next steps."""
    for diag in diagnoses:
        severity = str(diag.get("severity", "error"))
        style = style_for_severity(severity)
        body = Text(str(diag.get("summary", "")))
        excerpt = diag.get("excerpt")
        if excerpt:
            body.append(f"\nseen: {excerpt}", style="dim")
        suggestions = diag.get("suggestions") or []
        if suggestions:
            body.append("\n\nnext steps:")
            for suggestion in suggestions:
                body.append(f"\n  • {suggestion}")
        console.print(
            Panel(
                body,
                title=Text(f"{severity}: {diag.get('code', '?')}"),
                title_align="left",
                border_style=style or "dim",
                expand=False,
            )
        )


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="gw.error")
    op = Text(f"  {result.op}", style="gw.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Workflow renderers ────────────────────────────────────────────────


def _render_workflow_list(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render list_workflows as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Workflow", style="gw.name", no_wrap=True)
    table.add_column("Params")
    table.add_column("Description")
    if verbose:
        table.add_column("Steps", justify="right")
        table.add_column("Source", style="dim")

    for item in items:
        params = [_param_label(p) for p in item.get("params", [])]
        name = Text(str(item.get("name", "")))
        if item.get("destructive"):
            name.append(" !", style="gw.error")
        row: list[Any] = [name, " ".join(params), str(item.get("description", ""))]
        if verbose:
            row.extend([str(item.get("steps", "")), str(item.get("source", ""))])
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} workflows")


def _param_label(param: dict[str, Any]) -> str:
    name = str(param.get("name", ""))
    if param.get("default") is not None or not param.get("required", True):
        return f"[{name}]"
    return f"<{name}>"


def _render_plan(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render show_workflow: header, resolved params, numbered commands."""
    d = result.data
    wf = d.get("workflow", {})
    _status_line(console, result)
    _field(console, "workflow", wf.get("name", "?"))
    if wf.get("description"):
        _field(console, "description", wf["description"])
    if wf.get("destructive"):
        console.print(Text("  destructive: requires confirmation", style="gw.warning"))
    for key, value in d.get("params", {}).items():
        _field(console, f"param {key}", value if value != "" else "(empty)")
    console.print()
    for step in d.get("steps", []):
        line = Text(f"  {step['index']}. ")
        line.append(str(step.get("command", "")), style="gw.command")
        if step.get("allow_failure"):
            line.append("  (may fail)", style="dim")
        console.print(line)
        if verbose and step.get("description"):
            console.print(Text(f"     {step['description']}", style="dim"))


def _step_table(steps: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", justify="right")
    table.add_column("Command", style="gw.command")
    table.add_column("Status")
    table.add_column("Exit", justify="right")
    if verbose:
        table.add_column("Time", justify="right", style="dim")

    for step in steps:
        status = str(step.get("status", ""))
        rc = step.get("returncode")
        row: list[Any] = [
            str(step.get("index", "")),
            str(step.get("command", "")),
            Text(status, style=style_for_status(status)),
            "" if rc is None else str(rc),
        ]
        if verbose:
            ms = step.get("duration_ms")
            row.append("" if ms is None else f"{ms:.0f}ms")
        table.add_row(*row)
    return table


def _render_step_output(console: Console, steps: list[dict[str, Any]], *, verbose: bool) -> None:
    """Print captured output of failed steps (and of every step when verbose)."""
    for step in steps:
        status = step.get("status")
        if status in ("planned", "not_run"):
            continue
        if not verbose and status == "ok":
            continue
        text = "\n".join(
            part.rstrip() for part in (step.get("stdout", ""), step.get("stderr", "")) if part
        )
        if not text:
            continue
        console.print(
            Panel(
                Text(text),
                title=Text(f"step {step.get('index')}: {step.get('command', '')}"),
                title_align="left",
                border_style=style_for_status(str(status)) or "dim",
                expand=False,
            )
        )


def _render_run(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a successful run_workflow (or dry run)."""
    _status_line(console, result)
    _field(console, "workflow", result.data.get("workflow", "?"))
    if result.data.get("dry_run"):
        console.print(Text("  dry run: nothing was executed", style="gw.warning"))
    _render_run_body(result, console, verbose=verbose)
    if verbose:
        _render_meta(console, result)


def _render_run_body(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    steps = result.data.get("steps", [])
    if not steps:
        return
    console.print()
    console.print(_step_table(steps, verbose=verbose))
    _render_step_output(console, steps, verbose=verbose)
    diagnoses = result.data.get("diagnoses", [])
    if diagnoses:
        console.print()
        _render_diagnoses(console, diagnoses)


# ── Diagnosis renderers ───────────────────────────────────────────────


def _render_diagnose(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    diagnoses = result.data.get("diagnoses", [])
    if not diagnoses:
        console.print("  No known problems recognized.")
        return
    _field(console, "count", len(diagnoses))
    console.print()
    _render_diagnoses(console, diagnoses)


def _render_status(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    if d.get("detached"):
        _field(console, "HEAD", f"detached at {d.get('head') or '?'}")
    else:
        _field(console, "branch", d.get("branch") or "?")
    if d.get("upstream"):
        _field(console, "upstream", d["upstream"])
        _field(console, "ahead/behind", f"{d.get('ahead', 0)}/{d.get('behind', 0)}")
    if d.get("clean"):
        _field(console, "working tree", "clean")
    else:
        changes = f"{d.get('staged', 0)} staged, {d.get('unstaged', 0)} unstaged"
        _field(console, "working tree", f"{changes}, {d.get('untracked', 0)} untracked")
    if d.get("conflicted"):
        _field(console, "conflicted", ", ".join(d["conflicted"]))
    if d.get("in_progress"):
        _field(console, "in progress", ", ".join(d["in_progress"]))
    if verbose:
        _field(console, "root", d.get("root", ""))
        _field(console, "head", d.get("head") or "(no commits)")
    diagnoses = d.get("diagnoses", [])
    if diagnoses:
        console.print()
        _render_diagnoses(console, diagnoses)


def _render_failure_diagnoses(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    diagnoses = result.data.get("diagnoses", [])
    if diagnoses:
        console.print()
        _render_diagnoses(console, diagnoses)


def _render_failed_params(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """After INVALID_PARAMS, list what the workflow accepts."""
    if result.error is None:
        return
    params = result.error.detail.get("params")
    if result.error.code == "INVALID_PARAMS" and params:
        console.print(Text("  parameters:", style="dim"))
        for p in params:
            default = p.get("default")
            suffix = f" (default: {default})" if default is not None else ""
            console.print(f"    {_param_label(p)}  {p.get('help', '')}{suffix}")
    suggestions = result.error.detail.get("suggestions")
    if result.error.code == "UNKNOWN_WORKFLOW" and suggestions:
        console.print(f"  did you mean: {', '.join(suggestions)}")


def _render_failed_run(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _render_failed_params(result, console, verbose=verbose)
    _render_run_body(result, console, verbose=verbose)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render any ServiceResult as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "list_workflows": _render_workflow_list,
    "show_workflow": _render_plan,
    "run_workflow": _render_run,
    "diagnose": _render_diagnose,
    "status": _render_status,
}

_FAILURE_RENDERERS: dict[str, Any] = {
    "show_workflow": _render_failed_params,
    "run_workflow": _render_failed_run,
    "status": _render_failure_diagnoses,
}
