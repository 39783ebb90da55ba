"""Store: the graph database collaborator behind the serializer.

The :class:`Store` protocol is the whole surface the service layer uses:
``mutate`` for upserts, ``query`` for reads, and ``alter`` for schema and
drop-all operations. Implementations raise on failure; they never retry.

:class:`DgraphStore` is the production implementation over ``pydgraph``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import pydgraph
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class CommitInfo(BaseModel):
    """What the store reports back after applying an upsert."""

    model_config = {"frozen": True}

    uids: dict[str, str] = Field(default_factory=dict)
    latency_ms: float | None = None
    start_ts: int | None = None
    commit_ts: int | None = None


@runtime_checkable
class Store(Protocol):
    """Mutate/query/alter transport to the graph database."""

    def mutate(self, condition: str, statements: str, *, timeout: float) -> CommitInfo: ...

    def query(
        self,
        query: str,
        params: Mapping[str, str] | None = None,
        *,
        timeout: float,
    ) -> dict[str, Any]: ...

    def alter(self, *, drop_all: bool = False, schema: str | None = None) -> None: ...


class DgraphStore:
    """Store backed by a single Dgraph gRPC client stub.

    Parameters:
        address: ``host:port`` of a Dgraph alpha gRPC endpoint.
    """

    def __init__(self, address: str) -> None:
        self._address = address
        self._stub = pydgraph.DgraphClientStub(address)
        self._client = pydgraph.DgraphClient(self._stub)
        logger.debug("Dgraph client initialized: %s", address)

    def mutate(self, condition: str, statements: str, *, timeout: float) -> CommitInfo:
        txn = self._client.txn()
        try:
            mutation = txn.create_mutation(set_nquads=statements)
            request = txn.create_request(query=condition, mutations=[mutation], commit_now=True)
            response = txn.do_request(request, timeout=timeout)
        finally:
            txn.discard()
        return CommitInfo(
            uids=dict(response.uids),
            latency_ms=response.latency.total_ns / 1_000_000,
            start_ts=response.txn.start_ts,
            commit_ts=response.txn.commit_ts,
        )

    def query(
        self,
        query: str,
        params: Mapping[str, str] | None = None,
        *,
        timeout: float,
    ) -> dict[str, Any]:
        txn = self._client.txn(read_only=True)
        try:
            response = txn.query(query, variables=dict(params) if params else None, timeout=timeout)
        finally:
            txn.discard()
        data: dict[str, Any] = json.loads(response.json)
        return data

    def alter(self, *, drop_all: bool = False, schema: str | None = None) -> None:
        if drop_all:
            self._client.alter(pydgraph.Operation(drop_all=True))
        if schema is not None:
            self._client.alter(pydgraph.Operation(schema=schema))

    def close(self) -> None:
        """Close the underlying gRPC channel."""
        self._stub.close()
