"""Offline rendering: show the upsert a batch would send, without a store."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from graphwriter.domain.refs import QueryBuildError, UnboundRefError
from graphwriter.domain.upsert import build
from graphwriter.services.result import ServiceResult
from graphwriter.services.telemetry import traced


@traced
def render_upsert(triples: Iterable[Any]) -> ServiceResult:
    """Render *triples* into condition block and statements."""
    op = "render_upsert"
    try:
        query = build(triples)
    except UnboundRefError as exc:
        return ServiceResult.failure(op, "UNBOUND_REF", str(exc), ref=exc.ref.id)
    except QueryBuildError as exc:
        return ServiceResult.failure(op, "INVALID_TRIPLES", str(exc))
    return ServiceResult(
        ok=True,
        op=op,
        data={
            "condition": query.condition,
            "statements": query.statements,
            "varnames": {ref.id: name for ref, name in query.varnames.items()},
        },
    )
