"""Shared pytest fixtures and test helpers for graphwriter tests."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Generator, Mapping
from typing import Any

import pytest
from click.testing import CliRunner

from graphwriter.infrastructure.store import CommitInfo
from graphwriter.services.serializer import MutationSerializer

_CONDITION_FRAGMENT = re.compile(r'(\w+) as var\(func: eq\(id, "([^"]*)"\)\)')
_STATEMENT = re.compile(r"^uid\((\w+)\) <([^>]+)> (.+) \.$")
_COUNT_QUERY = re.compile(
    r'^\{ countRelation\(func: eq\(id, "([^"]*)"\)\) \{ c : count\(([^)]+)\) \} \}$'
)


class StoreDown(Exception):
    """Transport failure raised by :class:`FakeStore`."""


class FakeStore:
    """In-memory stand-in for the graph store.

    Understands exactly the text the serializer renders: condition blocks,
    ``uid(x) <pred> ... .`` statements, and the count query. Nodes are
    keyed by identity, so replaying an upsert does not duplicate them.

    Knobs:
        fail_mutate / fail_query / fail_drop / fail_schema: raise StoreDown.
        gate: if set, every call blocks until the event is set.
        delay: seconds each call sleeps (to widen race windows).
    """

    def __init__(self) -> None:
        self.nodes: dict[str, dict[str, Any]] = {}
        self.schema: str | None = None
        self.calls: list[str] = []
        self.mutations: list[tuple[str, str, float]] = []
        self.fail_mutate = False
        self.fail_query = False
        self.fail_drop = False
        self.fail_schema = False
        self.gate: threading.Event | None = None
        self.delay = 0.0
        self.closed = False
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    # -- Store protocol ------------------------------------------------

    def mutate(self, condition: str, statements: str, *, timeout: float) -> CommitInfo:
        with self._call("mutate"):
            if self.fail_mutate:
                msg = "connection refused"
                raise StoreDown(msg)
            self.mutations.append((condition, statements, timeout))
            bound = dict(_CONDITION_FRAGMENT.findall(condition))
            created: dict[str, str] = {}
            for name, node_id in bound.items():
                if node_id not in self.nodes:
                    self.nodes[node_id] = {}
                    created[name] = f"0x{len(self.nodes):x}"
            for line in statements.splitlines():
                self._apply(line, bound)
            return CommitInfo(uids=created, latency_ms=0.1, start_ts=1, commit_ts=2)

    def query(
        self,
        query: str,
        params: Mapping[str, str] | None = None,
        *,
        timeout: float,
    ) -> dict[str, Any]:
        with self._call("query"):
            if self.fail_query:
                msg = "deadline exceeded"
                raise StoreDown(msg)
            match = _COUNT_QUERY.match(query)
            assert match, f"unexpected query text: {query!r}"
            node_id, relation = match.groups()
            node = self.nodes.get(node_id)
            if node is None:
                return {"countRelation": []}
            edges = node.get(relation)
            return {"countRelation": [{"c": len(edges) if isinstance(edges, set) else 0}]}

    def alter(self, *, drop_all: bool = False, schema: str | None = None) -> None:
        with self._call("alter"):
            if drop_all:
                if self.fail_drop:
                    msg = "drop refused"
                    raise StoreDown(msg)
                self.nodes.clear()
                self.schema = None
            if schema is not None:
                if self.fail_schema:
                    msg = "schema rejected"
                    raise StoreDown(msg)
                self.schema = schema

    def close(self) -> None:
        self.closed = True

    # -- Internal ------------------------------------------------------

    def _apply(self, line: str, bound: dict[str, str]) -> None:
        match = _STATEMENT.match(line)
        assert match, f"unexpected statement: {line!r}"
        subject, predicate, obj = match.groups()
        node = self.nodes[bound[subject]]
        edge = re.fullmatch(r"uid\((\w+)\)", obj)
        if edge:
            node.setdefault(predicate, set()).add(bound[edge.group(1)])
        else:
            node[predicate] = obj

    def _call(self, name: str) -> _InFlight:
        return _InFlight(self, name)


class _InFlight:
    """Track concurrent calls into a FakeStore."""

    def __init__(self, store: FakeStore, name: str) -> None:
        self._store = store
        self._name = name

    def __enter__(self) -> None:
        store = self._store
        with store._lock:
            store.calls.append(self._name)
            store.in_flight += 1
            store.max_in_flight = max(store.max_in_flight, store.in_flight)
        if store.gate is not None:
            store.gate.wait(timeout=5)
        if store.delay:
            threading.Event().wait(store.delay)

    def __exit__(self, *exc_info: object) -> None:
        with self._store._lock:
            self._store.in_flight -= 1


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def serializer(fake_store: FakeStore) -> Generator[MutationSerializer]:
    """Serializer over a FakeStore with short timeouts."""
    s = MutationSerializer(fake_store, apply_timeout=1.0, call_timeout=2.0)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Generator[None]:
    """CLI invocations reconfigure logging onto CliRunner's streams; undo that."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
