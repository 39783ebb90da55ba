"""Tests for output format selection."""

import json

from graphwriter.output.formatters import OutputSettings, format_result
from graphwriter.services.result import ServiceResult


class TestFormatResult:
    def test_default_is_rich(self) -> None:
        result = ServiceResult(ok=True, op="reset", data={"dropped": True})
        output = format_result(result)
        assert output.startswith("OK")

    def test_json_output(self) -> None:
        result = ServiceResult(ok=True, op="count_relation", data={"count": 3})
        parsed = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert parsed["ok"] is True
        assert parsed["op"] == "count_relation"
        assert parsed["data"] == {"count": 3}

    def test_json_failure_omits_cause(self) -> None:
        result = ServiceResult.failure(
            "store_triples", "STORE_ERROR", "boom", cause=RuntimeError("boom")
        )
        parsed = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert parsed["error"]["code"] == "STORE_ERROR"
        assert "cause" not in parsed
