"""Tests for output mode selection."""

import json

from mdctl.output.formatters import OutputSettings, format_result
from mdctl.services.result import ServiceError, ServiceResult


class TestFormatResult:
    def test_json_mode(self) -> None:
        result = ServiceResult(ok=True, op="create", data={"path": "blog/a.md"})
        output = format_result(result, settings=OutputSettings(json_output=True))
        parsed = json.loads(output)
        assert parsed["op"] == "create"
        assert parsed["data"]["path"] == "blog/a.md"
        assert "error" not in parsed
        assert "meta" not in parsed

    def test_json_wins_over_quiet(self) -> None:
        result = ServiceResult(ok=True, op="exists", data={"exists": True})
        output = format_result(result, settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(output)["data"]["exists"] is True

    def test_quiet_mode(self) -> None:
        result = ServiceResult(ok=True, op="exists", data={"exists": False})
        assert format_result(result, settings=OutputSettings(quiet=True)) == "false"

    def test_default_mode_is_rich(self) -> None:
        result = ServiceResult(ok=True, op="delete", data={"path": "blog/a.md"})
        output = format_result(result)
        assert output.startswith("OK")
        assert "blog/a.md" in output

    def test_error_json(self) -> None:
        result = ServiceResult(
            ok=False,
            op="read",
            error=ServiceError(code="MARKDOWN_FILE_NOT_FOUND", message="gone"),
        )
        parsed = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert parsed["ok"] is False
        assert parsed["error"]["code"] == "MARKDOWN_FILE_NOT_FOUND"
