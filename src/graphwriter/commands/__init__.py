"""Subcommand modules for graphwriter.

Provides register_commands() which uses deferred imports so
``graphwriter --help`` never imports the store client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from graphwriter.commands.count import count
    from graphwriter.commands.render import render
    from graphwriter.commands.reset import reset
    from graphwriter.commands.store import store

    cli.add_command(render)
    cli.add_command(store)
    cli.add_command(count)
    cli.add_command(reset)
