"""WorkflowService — list, preview, and run registered workflows.

Steps run strictly in order through the workspace's ShellExecutor. The
first failing step (other than ``allow_failure`` steps) stops the run
unless ``keep_going`` is set; the remaining steps are reported as
``not_run``. Output of every failing step is passed through the
diagnostic rules so the caller gets next-step advice with the failure.
"""

from __future__ import annotations

import logging
from typing import Any

from gitwork.config.logging import bound_log_context
from gitwork.domain.diagnostics import Diagnosis, detect
from gitwork.domain.registry import UnknownWorkflowError
from gitwork.domain.workflows import PlannedStep, Workflow, WorkflowParamError
from gitwork.services.base import BaseService
from gitwork.services.result import ServiceResult

logger = logging.getLogger(__name__)


class WorkflowService(BaseService):
    """Operations on the workflow registry."""

    def list_workflows(self) -> ServiceResult:
        registry = self._workspace.registry
        items = [wf.summary() for wf in registry]
        return ServiceResult(
            ok=True,
            op="list_workflows",
            data={"items": items, "count": len(items)},
            warnings=self._workspace.take_warnings(),
        )

    def show(self, name: str, values: dict[str, Any]) -> ServiceResult:
        """Resolve *name* with *values* and return the plan without running it."""
        op = "show_workflow"
        resolved = self._resolve(op, name, values)
        if isinstance(resolved, ServiceResult):
            return resolved
        workflow, plan = resolved
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "workflow": workflow.summary(),
                "params": self._param_values(workflow, values),
                "steps": [_planned_dict(step) for step in plan],
            },
            warnings=self._workspace.take_warnings(),
        )

    def run(
        self,
        name: str,
        values: dict[str, Any],
        *,
        dry_run: bool = False,
        keep_going: bool = False,
        confirmed: bool = False,
    ) -> ServiceResult:
        """Execute a workflow step by step.

        Args:
            name: Registered workflow name.
            values: Parameter values supplied by the user.
            dry_run: Report the plan as ``planned`` steps without executing.
            keep_going: Continue after a failing step.
            confirmed: Required for destructive workflows (ignored in dry runs).
        """
        op = "run_workflow"
        resolved = self._resolve(op, name, values)
        if isinstance(resolved, ServiceResult):
            return resolved
        workflow, plan = resolved
        rules = self._workspace.rules
        warnings = self._workspace.take_warnings()

        if workflow.destructive and not confirmed and not dry_run:
            return ServiceResult.failure(
                op,
                "CONFIRMATION_REQUIRED",
                f"Workflow {workflow.name!r} is destructive; confirm to run it",
                detail={"workflow": workflow.name},
                data={"steps": [_planned_dict(step) for step in plan]},
                warnings=warnings,
            )

        executor = self._workspace.executor(dry_run=dry_run)
        steps: list[dict[str, Any]] = []
        diagnoses: list[Diagnosis] = []
        failed: dict[str, Any] | None = None
        steps_run = 0

        with bound_log_context(workflow=workflow.name, dry_run=dry_run):
            logger.debug("Running workflow with %d steps", len(plan))
            for planned in plan:
                if failed is not None and not keep_going:
                    steps.append({**_planned_dict(planned), "status": "not_run"})
                    continue

                outcome = executor.run(planned.argv)
                steps_run += 1
                if outcome.skipped:
                    status = "planned"
                elif outcome.ok:
                    status = "ok"
                elif planned.allow_failure:
                    status = "allowed_failure"
                    warnings.append(
                        f"Step {planned.index} failed (exit {outcome.returncode}) "
                        "but is allowed to fail"
                    )
                else:
                    status = "failed"

                step_data = {
                    **_planned_dict(planned),
                    **outcome.to_dict(),
                    "status": status,
                }
                if not outcome.ok:
                    found = _merge_diagnoses(diagnoses, detect(outcome.output, rules))
                    step_data["diagnoses"] = [d.code for d in found]
                steps.append(step_data)

                if status == "failed" and failed is None:
                    failed = step_data
                    logger.debug("Step %d failed with exit %d", planned.index, outcome.returncode)

                self._dispatch_event(
                    "post_step",
                    {
                        "workflow": workflow.name,
                        "index": planned.index,
                        "argv": list(outcome.argv),
                        "returncode": outcome.returncode,
                    },
                    warnings,
                )

        self._dispatch_event(
            "post_workflow",
            {"workflow": workflow.name, "ok": failed is None, "steps_run": steps_run},
            warnings,
        )

        data: dict[str, Any] = {
            "workflow": workflow.name,
            "dry_run": dry_run,
            "steps": steps,
            "diagnoses": [d.model_dump() for d in diagnoses],
            "failed_step": failed["index"] if failed else None,
        }
        if failed is None:
            return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
        return ServiceResult.failure(
            op,
            "STEP_FAILED",
            f"Step {failed['index']} failed (exit {failed['returncode']}): {failed['command']}",
            detail={"step": failed["index"], "returncode": failed["returncode"]},
            data=data,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve(
        self,
        op: str,
        name: str,
        values: dict[str, Any],
    ) -> tuple[Workflow, list[PlannedStep]] | ServiceResult:
        """Look up and plan a workflow, or return the failure result."""
        try:
            workflow = self._workspace.registry.get(name)
        except UnknownWorkflowError as exc:
            return ServiceResult.failure(
                op,
                "UNKNOWN_WORKFLOW",
                str(exc),
                detail={"name": name, "suggestions": exc.suggestions},
                warnings=self._workspace.take_warnings(),
            )
        try:
            plan = workflow.plan(values, self._workspace.settings.workflow_context)
        except WorkflowParamError as exc:
            return ServiceResult.failure(
                op,
                "INVALID_PARAMS",
                str(exc),
                detail={
                    "missing": exc.missing,
                    "unknown": exc.unknown,
                    "params": [p.model_dump() for p in workflow.params],
                },
                warnings=self._workspace.take_warnings(),
            )
        return workflow, plan

    def _param_values(self, workflow: Workflow, values: dict[str, Any]) -> dict[str, str]:
        resolved = workflow.resolve_params(values, self._workspace.settings.workflow_context)
        return {p.name: resolved[p.name] for p in workflow.params}


def _planned_dict(step: PlannedStep) -> dict[str, Any]:
    return {
        "index": step.index,
        "argv": list(step.argv),
        "command": step.command_line,
        "description": step.description,
        "allow_failure": step.allow_failure,
    }


def _merge_diagnoses(into: list[Diagnosis], found: list[Diagnosis]) -> list[Diagnosis]:
    """Append diagnoses whose code is not yet in *into*; return all of *found*."""
    known = {d.code for d in into}
    for diagnosis in found:
        if diagnosis.code not in known:
            into.append(diagnosis)
            known.add(diagnosis.code)
    return found
