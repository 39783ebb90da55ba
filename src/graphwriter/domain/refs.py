"""Node references and triples: the input vocabulary of an upsert batch.

A :class:`Ref` names a node by its external identity. A :class:`Triple`
states one fact about a subject node: either an edge to another node
(object is a Ref) or a property value (object is a scalar).

INVARIANT: Refs compare and hash by ``id`` only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple

# Characters that would break out of a quoted literal in query text.
_UNSAFE_ID = re.compile(r'["\\\r\n]')

# IRI-ish predicate names: no whitespace, no angle brackets or quoting chars.
_PREDICATE_PATTERN = re.compile(r'^[^\s<>"{}|^`\\()]+$')


class QueryBuildError(ValueError):
    """Input that would produce malformed query text."""


class UnboundRefError(QueryBuildError):
    """A Ref was rendered without a variable bound to it."""

    def __init__(self, ref: Ref) -> None:
        super().__init__(f"No variable bound for {ref!r}")
        self.ref = ref


@dataclass(frozen=True)
class Ref:
    """Opaque reference to a node by its external identity."""

    id: str

    @classmethod
    def new(cls, id: str) -> Ref:  # noqa: A002
        return cls(id)


class Triple(NamedTuple):
    """``(subject, predicate, object)``: one edge or property of a node."""

    subject: Ref
    predicate: str
    object: Any


def check_id(value: str) -> str:
    """Return *value* if it can be embedded in a quoted identity literal.

    Raises:
        QueryBuildError: If *value* is empty or contains quotes,
            backslashes, or line breaks.
    """
    if not isinstance(value, str) or not value:
        msg = f"Identity must be a non-empty string, got {value!r}"
        raise QueryBuildError(msg)
    if _UNSAFE_ID.search(value):
        msg = f"Identity {value!r} contains characters not allowed in query text"
        raise QueryBuildError(msg)
    return value


def predicate_name(predicate: str | Enum) -> str:
    """Return the wire name of *predicate*, validating it.

    Enum members render as their value, so ``StrEnum`` predicates work the
    same as plain strings.
    """
    name = predicate.value if isinstance(predicate, Enum) else predicate
    if not isinstance(name, str) or not _PREDICATE_PATTERN.match(name):
        msg = f"Invalid predicate name: {predicate!r}"
        raise QueryBuildError(msg)
    return name


def coerce_triples(items: Any) -> list[Triple]:
    """Normalize an iterable of 3-tuples into :class:`Triple` values.

    Subjects must be Refs; ids and predicates must be safe to render.
    """
    triples: list[Triple] = []
    for position, item in enumerate(items):
        try:
            subject, predicate, obj = item
        except (TypeError, ValueError) as exc:
            msg = f"Triple #{position} is not a (subject, predicate, object) tuple: {item!r}"
            raise QueryBuildError(msg) from exc
        if not isinstance(subject, Ref):
            msg = f"Triple #{position} subject must be a Ref, got {subject!r}"
            raise QueryBuildError(msg)
        check_id(subject.id)
        predicate_name(predicate)
        if isinstance(obj, Ref):
            check_id(obj.id)
        triples.append(Triple(subject, predicate, obj))
    return triples


def _json_ref(value: Any, position: int) -> Ref:
    if isinstance(value, str):
        return Ref(value)
    if isinstance(value, dict) and set(value) == {"ref"}:
        return Ref(value["ref"])
    msg = f"Triple #{position} subject must be an id string or {{\"ref\": id}}, got {value!r}"
    raise QueryBuildError(msg)


def triples_from_json(data: Any) -> list[Triple]:
    """Convert decoded JSON into triples.

    Accepted shape: a list of ``[subject, predicate, object]`` where the
    subject is an id string or ``{"ref": id}``, and the object is
    ``{"ref": id}`` for an edge or a JSON scalar for a property.

    Examples:
        >>> triples_from_json([["id1", "follows", {"ref": "id2"}]])
        [Triple(subject=Ref(id='id1'), predicate='follows', object=Ref(id='id2'))]
    """
    if not isinstance(data, list):
        msg = f"Expected a JSON list of triples, got {type(data).__name__}"
        raise QueryBuildError(msg)
    converted: list[tuple[Ref, Any, Any]] = []
    for position, item in enumerate(data):
        if not isinstance(item, list) or len(item) != 3:
            msg = f"Triple #{position} must be a 3-element list, got {item!r}"
            raise QueryBuildError(msg)
        subject, predicate, obj = item
        if (isinstance(obj, dict) and set(obj) != {"ref"}) or isinstance(obj, list) or obj is None:
            msg = f"Triple #{position} object must be {{\"ref\": id}} or a scalar, got {obj!r}"
            raise QueryBuildError(msg)
        if isinstance(obj, dict):
            obj = Ref(obj["ref"])
        converted.append((_json_ref(subject, position), predicate, obj))
    return coerce_triples(converted)
