"""Rich Console factory and theme for graphwriter output.

Consoles render to a StringIO buffer so formatters can keep returning
plain strings. In non-TTY environments (tests, pipes) Rich disables color.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GW_THEME = Theme(
    {
        "gw.ok": "bold green",
        "gw.error": "bold red",
        "gw.warning": "bold yellow",
        "gw.op": "bold cyan",
        "gw.key": "dim",
        "gw.var": "bold blue",
        "gw.query": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=GW_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
