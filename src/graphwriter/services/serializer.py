"""MutationSerializer: one-at-a-time access to the graph store.

Two callers upserting the same identity at once could both miss the
lookup and both create a node. The serializer rules that out by running
every store operation on a single worker thread
(``ThreadPoolExecutor(max_workers=1)``): requests queue up in FIFO order
and each one finishes before the next starts.

Callers block on a per-request future for at most ``call_timeout``
seconds, which is strictly longer than the store-side ``apply_timeout``.
A ``CALL_TIMEOUT`` therefore means the worker is backed up, not that the
store stalled.

LIMITATION: A caller timeout does not cancel the request. The store call
still runs when the worker reaches it, and a mutation may apply after the
caller has already seen a failure.

LIMITATION: ``reset`` drops all data before reinstalling the schema. If the
schema step fails the store is left empty and unindexed; nothing is rolled
back.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any

from graphwriter.domain.refs import QueryBuildError, UnboundRefError, predicate_name
from graphwriter.domain.upsert import SCHEMA, UpsertQuery, build, count_query_for
from graphwriter.infrastructure.store import CommitInfo, Store
from graphwriter.services.result import ServiceResult
from graphwriter.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

DEFAULT_APPLY_TIMEOUT = 60.0
DEFAULT_CALL_TIMEOUT = 75.0


class MutationSerializer:
    """Single-worker front for a :class:`Store`.

    Construct once and share the instance; the store handle must not be
    used by anything else while the serializer owns it.

    Parameters:
        store: The store collaborator. Closed by :meth:`close` if it has a
            ``close`` method.
        apply_timeout: Seconds the store may spend applying one operation.
        call_timeout: Seconds a caller waits for a reply. Must exceed
            *apply_timeout*.
    """

    def __init__(
        self,
        store: Store,
        *,
        apply_timeout: float = DEFAULT_APPLY_TIMEOUT,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
    ) -> None:
        if apply_timeout <= 0:
            msg = f"apply_timeout must be positive, got {apply_timeout}"
            raise ValueError(msg)
        if call_timeout <= apply_timeout:
            msg = (
                f"call_timeout ({call_timeout}s) must be greater than "
                f"apply_timeout ({apply_timeout}s)"
            )
            raise ValueError(msg)
        self._store = store
        self._apply_timeout = apply_timeout
        self._call_timeout = call_timeout
        self._executor: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="graphwriter-serializer"
        )
        self._close_lock = threading.Lock()

    def __enter__(self) -> MutationSerializer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def apply_timeout(self) -> float:
        return self._apply_timeout

    @property
    def call_timeout(self) -> float:
        return self._call_timeout

    # ------------------------------------------------------------------
    # Reported operations
    # ------------------------------------------------------------------

    @traced
    def store(self, triples: Iterable[Any]) -> ServiceResult:
        """Upsert a batch of triples.

        Rendering happens on the calling thread, so malformed input fails
        without reaching the worker or the store. An empty batch succeeds
        without a store call.
        """
        op = "store_triples"
        with trace_span("render") as span:
            try:
                query = build(triples)
            except UnboundRefError as exc:
                return ServiceResult.failure(op, "UNBOUND_REF", str(exc), ref=exc.ref.id)
            except QueryBuildError as exc:
                return ServiceResult.failure(op, "INVALID_TRIPLES", str(exc))
            if span:
                span.annotate("nodes", len(query.varnames))

        if not query.statements:
            empty = {**CommitInfo().model_dump(), "nodes": 0, "statements": 0}
            return ServiceResult(
                ok=True, op=op, data=empty, warnings=["Empty batch; nothing sent to the store"]
            )

        logger.debug("Upsert query: %s", query.condition)
        logger.debug("Upsert statements: %s", query.statements)
        return self._call(op, self._apply_upsert, query)

    @traced
    def count(self, id: str, relation: str | Enum) -> ServiceResult:  # noqa: A002
        """Count *relation* edges out of the node with identity *id*.

        ``data["count"]`` is None when no node has that identity.
        """
        op = "count_relation"
        try:
            query = count_query_for(id, relation)
        except QueryBuildError as exc:
            return ServiceResult.failure(op, "INVALID_QUERY", str(exc))
        return self._call(op, self._run_count, query, id, predicate_name(relation))

    @traced
    def reset(self) -> ServiceResult:
        """Drop all data, then reinstall the identity index."""
        return self._call("reset", self._apply_reset)

    # ------------------------------------------------------------------
    # Strict operations
    # ------------------------------------------------------------------

    def store_strict(self, triples: Iterable[Any]) -> CommitInfo:
        """Like :meth:`store`, but raise on failure and return the commit."""
        data = self.store(triples).unwrap()
        return CommitInfo.model_validate(data)

    def count_strict(self, id: str, relation: str | Enum) -> int | None:  # noqa: A002
        """Like :meth:`count`, but raise on failure and return the count."""
        count: int | None = self.count(id, relation).unwrap()["count"]
        return count

    def reset_strict(self) -> None:
        """Like :meth:`reset`, but raise on failure."""
        self.reset().unwrap()

    def close(self) -> None:
        """Stop accepting work, wait for queued requests, close the store."""
        with self._close_lock:
            executor, self._executor = self._executor, None
        if executor is None:
            return
        executor.shutdown(wait=True)
        close = getattr(self._store, "close", None)
        if callable(close):
            close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _call(self, op: str, fn: Callable[..., ServiceResult], *args: Any) -> ServiceResult:
        """Queue *fn* on the worker and wait for its result."""
        executor = self._executor
        if executor is None:
            return ServiceResult.failure(op, "WORKER_CLOSED", "Serializer is closed")
        try:
            future = executor.submit(fn, *args)
        except RuntimeError as exc:
            return ServiceResult.failure(op, "WORKER_CLOSED", str(exc))

        with trace_span("wait"):
            try:
                return future.result(timeout=self._call_timeout)
            except TimeoutError:
                logger.warning(
                    "%s: no reply within %.1fs; request left running", op, self._call_timeout
                )
                return ServiceResult.failure(
                    op,
                    "CALL_TIMEOUT",
                    f"No reply within {self._call_timeout}s; the operation may still apply",
                    call_timeout=self._call_timeout,
                )

    def _apply_upsert(self, query: UpsertQuery) -> ServiceResult:
        op = "store_triples"
        try:
            commit = self._store.mutate(
                query.condition, query.statements, timeout=self._apply_timeout
            )
        except Exception as exc:
            logger.warning("Upsert failed: %s", exc)
            return _store_error(op, exc)
        data = commit.model_dump()
        data["nodes"] = len(query.varnames)
        data["statements"] = len(query.statements.splitlines())
        return ServiceResult(ok=True, op=op, data=data)

    def _run_count(self, query: str, id: str, relation: str) -> ServiceResult:  # noqa: A002
        op = "count_relation"
        try:
            response = self._store.query(query, {}, timeout=self._apply_timeout)
        except Exception as exc:
            logger.warning("Count query failed: %s", exc)
            return _store_error(op, exc)

        rows = response.get("countRelation") if isinstance(response, dict) else None
        data: dict[str, Any] = {"id": id, "relation": relation}
        if rows == []:
            return ServiceResult(ok=True, op=op, data={**data, "count": None})
        if isinstance(rows, list) and len(rows) == 1 and isinstance(rows[0], dict):
            count = rows[0].get("c")
            if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
                return ServiceResult(ok=True, op=op, data={**data, "count": count})
        return ServiceResult.failure(
            op,
            "UNEXPECTED_RESPONSE",
            "Count response is not a list of zero or one {c: int}",
            response=response,
        )

    def _apply_reset(self) -> ServiceResult:
        op = "reset"
        try:
            self._store.alter(drop_all=True)
        except Exception as exc:
            logger.warning("Drop-all failed: %s", exc)
            return ServiceResult.failure(
                op, "DROP_FAILED", str(exc), cause=exc, type=type(exc).__name__, dropped=False
            )
        try:
            self._store.alter(schema=SCHEMA)
        except Exception as exc:
            logger.error("Schema install failed after drop-all; store is empty and unindexed")
            return ServiceResult.failure(
                op,
                "SCHEMA_INSTALL_FAILED",
                str(exc),
                cause=exc,
                type=type(exc).__name__,
                dropped=True,
            )
        return ServiceResult(ok=True, op=op, data={"dropped": True, "schema": SCHEMA})


def _store_error(op: str, exc: Exception) -> ServiceResult:
    return ServiceResult.failure(op, "STORE_ERROR", str(exc), cause=exc, type=type(exc).__name__)
