"""Upsert query synthesis: pure text rendering for the graph store.

An upsert has two halves:

- a *condition block* that binds one short variable per referenced node
  by looking it up on the ``id`` index, and
- N-Quad *statements* that refer to those variables via ``uid(<var>)``.

Because every node is addressed through its identity lookup, resending the
same text reuses existing nodes instead of creating duplicates.

INVARIANT: Equal input (same triples, same order) renders byte-identical text.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from enum import Enum
from typing import Any, NamedTuple

from graphwriter.domain.refs import (
    Ref,
    Triple,
    UnboundRefError,
    check_id,
    coerce_triples,
    predicate_name,
)
from graphwriter.domain.varnames import varname

INDEXES: tuple[str, ...] = ("id: string @index(hash,trigram) @upsert .",)
SCHEMA = "\n".join(INDEXES)


class UpsertQuery(NamedTuple):
    """Rendered upsert: condition block, statements, and the bindings used."""

    condition: str
    statements: str
    varnames: dict[Ref, str]


def varnames_for(triples: Iterable[Triple]) -> dict[Ref, str]:
    """Assign a variable name to every Ref in *triples*, in first-seen order.

    Subjects and Ref-valued objects are both registered; a Ref seen again
    keeps the name it was first given.

    Examples:
        >>> names = varnames_for([
        ...     (Ref("id1"), "follows", Ref("id2")),
        ...     (Ref("id1"), "name", "Kiara"),
        ...     (Ref("id3"), "name", "Sia"),
        ... ])
        >>> [(ref.id, name) for ref, name in names.items()]
        [('id1', 'a'), ('id2', 'b'), ('id3', 'c')]
    """
    names: dict[Ref, str] = {}
    for subject, _predicate, obj in triples:
        refs = (subject, obj) if isinstance(obj, Ref) else (subject,)
        for ref in refs:
            if isinstance(ref, Ref) and ref not in names:
                names[ref] = varname(len(names))
    return names


def upsert_query_for(varnames: dict[Ref, str]) -> str:
    """Render the condition block binding each variable to its node.

    Examples:
        >>> print(upsert_query_for({Ref("id1"): "a", Ref("id2"): "b"}))
        { a as var(func: eq(id, "id1"))
        b as var(func: eq(id, "id2")) }
    """
    body = "\n".join(
        f'{name} as var(func: eq(id, "{check_id(ref.id)}"))' for ref, name in varnames.items()
    )
    return f"{{ {body} }}"


def render_value(value: Any, varnames: dict[Ref, str]) -> str:
    """Render one triple term as N-Quad text.

    Raises:
        UnboundRefError: If *value* is a Ref with no bound variable.
    """
    if isinstance(value, Ref):
        name = varnames.get(value)
        if name is None:
            raise UnboundRefError(value)
        return f"uid({name})"
    # bool is an int subclass but is not an xs:int.
    if isinstance(value, int) and not isinstance(value, bool):
        return f'"{value}"^^<xs:int>'
    return _quoted_literal(value)


def _quoted_literal(value: Any) -> str:
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, Enum):
        text = str(value.value)
    else:
        text = str(value)
    return json.dumps(text, ensure_ascii=False)


def statement_for(triple: Triple, varnames: dict[Ref, str]) -> str:
    """Render ``<subject> <predicate> <object> .`` for a single triple."""
    subject, predicate, obj = triple
    sub = render_value(subject, varnames)
    rendered = render_value(obj, varnames)
    return f"{sub} <{predicate_name(predicate)}> {rendered} ."


def build(triples: Iterable[Any]) -> UpsertQuery:
    """Render an upsert for a batch of triples.

    Raises:
        QueryBuildError: If any triple is malformed or would render text
            the store cannot parse.
    """
    batch = coerce_triples(triples)
    names = varnames_for(batch)
    condition = upsert_query_for(names)
    statements = "\n".join(statement_for(triple, names) for triple in batch)
    return UpsertQuery(condition, statements, names)


def count_query_for(id: str, relation: str | Enum) -> str:  # noqa: A002
    """Render a query counting *relation* edges out of the node named *id*.

    The response carries ``countRelation`` as a list with zero elements
    (no such node) or one element holding the count under ``c``.
    """
    return (
        f'{{ countRelation(func: eq(id, "{check_id(id)}")) '
        f"{{ c : count({predicate_name(relation)}) }} }}"
    )
