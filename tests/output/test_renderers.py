"""Tests for operation-specific Rich renderers."""

from graphwriter.output.renderers import render_result
from graphwriter.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("store_triples", "STORE_ERROR", "connection refused"))
        assert output.startswith("ERROR")
        assert "store_triples [STORE_ERROR]: connection refused" in output

    def test_verbose_shows_detail(self) -> None:
        result = _err("reset", "SCHEMA_INSTALL_FAILED", "schema rejected", dropped=True)
        output = render_result(result, verbose=True)
        assert "detail" in output
        assert "dropped: True" in output

    def test_detail_hidden_by_default(self) -> None:
        result = _err("reset", "DROP_FAILED", "nope", dropped=False)
        assert "detail" not in render_result(result)

    def test_no_error_object(self) -> None:
        output = render_result(ServiceResult(ok=False, op="count_relation"))
        assert "Unknown error" in output


# ── Operation renderers ──────────────────────────────────────────────


class TestUpsertRenderer:
    def test_shows_variables_and_text(self) -> None:
        result = _ok(
            "render_upsert",
            condition='{ a as var(func: eq(id, "id1")) }',
            statements='uid(a) <name> "Kiara" .',
            varnames={"id1": "a"},
        )
        output = render_result(result)
        assert output.splitlines()[0].startswith("OK")
        assert "a = id1" in output
        assert 'a as var(func: eq(id, "id1"))' in output
        assert 'uid(a) <name> "Kiara" .' in output


class TestCommitRenderer:
    def test_shows_counts_and_created(self) -> None:
        result = _ok(
            "store_triples",
            nodes=2,
            statements=3,
            latency_ms=1.5,
            commit_ts=7,
            uids={"a": "0x1"},
        )
        output = render_result(result)
        assert "nodes: 2" in output
        assert "statements: 3" in output
        assert "a -> 0x1" in output

    def test_no_created_section_on_replay(self) -> None:
        output = render_result(_ok("store_triples", nodes=1, statements=1, uids={}))
        assert "created" not in output


class TestCountRenderer:
    def test_count(self) -> None:
        result = _ok("count_relation", id="id1", relation="follows", count=2)
        output = render_result(result)
        assert "relation: follows" in output
        assert "count: 2" in output

    def test_missing_node(self) -> None:
        result = _ok("count_relation", id="ghost", relation="follows", count=None)
        assert "no such node" in render_result(result)


class TestGenericRenderer:
    def test_unknown_op_lists_fields(self) -> None:
        output = render_result(_ok("reset", dropped=True))
        assert "OK" in output
        assert "dropped: True" in output

    def test_warnings_printed(self) -> None:
        result = ServiceResult(ok=True, op="reset", warnings=["slow store"])
        assert "warning: slow store" in render_result(result)


class TestVerboseMeta:
    def test_span_tree(self) -> None:
        result = ServiceResult(
            ok=True,
            op="reset",
            meta={
                "telemetry": {
                    "name": "reset",
                    "duration_ms": 12.5,
                    "children": [{"name": "wait", "duration_ms": 10.0}],
                }
            },
        )
        output = render_result(result, verbose=True)
        assert "12.50ms  reset" in output
        assert "10.00ms  wait" in output

    def test_meta_hidden_without_verbose(self) -> None:
        result = ServiceResult(ok=True, op="reset", meta={"telemetry": {"name": "reset"}})
        assert "meta" not in render_result(result)
