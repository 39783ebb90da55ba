"""``graphwriter store``: upsert a triples file into the graph store."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from graphwriter.commands._base import GwCommand

if TYPE_CHECKING:
    from graphwriter.commands._context import AppContext


@click.command(
    cls=GwCommand,
    examples="""\
  graphwriter store triples.json
  graphwriter -v store triples.json
  GRAPHWRITER_STORE__ADDRESS=dgraph:9080 graphwriter store triples.json""",
)
@click.argument("triples_file", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def store(app: AppContext, triples_file: IO[str]) -> None:
    """Upsert the triples in TRIPLES_FILE.

    Nodes are matched on their id, so storing the same file twice does
    not create duplicates.
    """
    triples = app.read_triples("store_triples", triples_file)
    app.emit(app.serializer.store(triples))
