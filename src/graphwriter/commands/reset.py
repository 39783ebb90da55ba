"""``graphwriter reset``: wipe the store and reinstall the schema."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from graphwriter.commands._base import GwCommand

if TYPE_CHECKING:
    from graphwriter.commands._context import AppContext


@click.command(
    cls=GwCommand,
    examples="""\
  graphwriter reset
  graphwriter reset --yes""",
)
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def reset(app: AppContext, yes: bool) -> None:
    """Drop ALL data, then reinstall the id index.

    If the schema step fails the store is left empty and unindexed;
    run reset again once the store is healthy.
    """
    if not yes:
        click.confirm("This deletes every node and edge in the store. Continue?", abort=True)
    app.emit(app.serializer.reset())
