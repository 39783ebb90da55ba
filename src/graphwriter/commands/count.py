"""``graphwriter count``: count a node's outgoing edges."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from graphwriter.commands._base import GwCommand

if TYPE_CHECKING:
    from graphwriter.commands._context import AppContext


@click.command(
    cls=GwCommand,
    examples="""\
  graphwriter count user:42 follows
  graphwriter --json count user:42 follows""",
)
@click.argument("node_id")
@click.argument("relation")
@click.pass_obj
def count(app: AppContext, node_id: str, relation: str) -> None:
    """Count RELATION edges from the node whose id is NODE_ID."""
    app.emit(app.serializer.count(node_id, relation))
