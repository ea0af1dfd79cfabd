"""Tests for the format_result dispatcher and OutputSettings."""

import json

from gitwork.output.formatters import OutputSettings, format_result
from gitwork.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code="ERR", message=msg),
    )


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        result = _ok("list_workflows", count=3)
        output = format_result(result, settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "list_workflows"
        assert data["data"]["count"] == 3

    def test_json_mode_error(self) -> None:
        output = format_result(_err("run_workflow", "Bad"), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is False
        assert data["error"]["message"] == "Bad"

    def test_json_output_kwarg(self) -> None:
        data = json.loads(format_result(_ok("test", key="val"), json_output=True))
        assert data["ok"] is True

    def test_settings_overrides_kwarg(self) -> None:
        output = format_result(_ok("test", key="val"), settings=OutputSettings(), json_output=True)
        assert output.startswith("{") is False


class TestFormatResultQuiet:
    def test_quiet_success(self) -> None:
        output = format_result(_ok("run_workflow"), settings=OutputSettings(quiet=True))
        assert output == "OK: run_workflow"

    def test_quiet_lists_names(self) -> None:
        result = _ok("list_workflows", items=[{"name": "save"}, {"name": "sync"}], count=2)
        output = format_result(result, settings=OutputSettings(quiet=True))
        assert output == "save\nsync"

    def test_quiet_error(self) -> None:
        output = format_result(_err("run_workflow", "Bad input"), settings=OutputSettings(quiet=True))
        assert "ERROR" in output
        assert "Bad input" in output


class TestFormatResultDefault:
    def test_default_success_contains_ok(self) -> None:
        output = format_result(_ok("custom_op", key="val"))
        assert "OK" in output
        assert "custom_op" in output
        assert "val" in output

    def test_default_error_contains_error(self) -> None:
        output = format_result(_err("run_workflow", "Bad"))
        assert "ERROR" in output
        assert "Bad" in output
