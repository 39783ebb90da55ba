"""``graphwriter render``: print the upsert for a triples file, offline."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from graphwriter.commands._base import GwCommand
from graphwriter.services.render import render_upsert

if TYPE_CHECKING:
    from graphwriter.commands._context import AppContext


@click.command(
    cls=GwCommand,
    examples="""\
  graphwriter render triples.json
  cat triples.json | graphwriter render -
  graphwriter --json render triples.json""",
)
@click.argument("triples_file", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def render(app: AppContext, triples_file: IO[str]) -> None:
    """Show the condition block and statements for TRIPLES_FILE.

    TRIPLES_FILE is a JSON list of [subject, predicate, object]; use
    {"ref": "<id>"} for node objects. No store connection is made.
    """
    triples = app.read_triples("render_upsert", triples_file)
    app.emit(render_upsert(triples))
