"""Tests for offline upsert rendering."""

from graphwriter.domain.refs import Ref
from graphwriter.services.render import render_upsert


class TestRenderUpsert:
    def test_success(self) -> None:
        result = render_upsert([(Ref("id1"), "follows", Ref("id2")), (Ref("id1"), "age", 3)])
        assert result.ok
        assert result.op == "render_upsert"
        assert result.data["varnames"] == {"id1": "a", "id2": "b"}
        assert result.data["statements"] == 'uid(a) <follows> uid(b) .\nuid(a) <age> "3"^^<xs:int> .'

    def test_invalid_triples(self) -> None:
        result = render_upsert([(Ref("id1"), "bad predicate", 1)])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_TRIPLES"
