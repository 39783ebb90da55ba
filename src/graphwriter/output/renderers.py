"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.text import Text

from graphwriter.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from graphwriter.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
        for warning in result.warnings:
            console.print(Text("  warning: ", style="gw.warning"), Text(warning))
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="gw.ok"), Text(f"  {result.op}", style="gw.op"))


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text(f"  {key}: ", style="gw.key"), Text(str(value)), sep="")


def _block(console: Console, title: str, body: str) -> None:
    console.print(Text(f"  {title}:", style="gw.key"))
    for line in body.splitlines():
        console.print(Text(f"    {line}", style="gw.query"))


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _render_span(console, value, indent=4)
        else:
            console.print(Text(f"    {key}: {value}"))


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    duration = span.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    console.print(
        Text(" " * indent),
        Text(f"{duration:>8.2f}ms", style=style),
        Text(f"  {span.get('name', '?')}"),
        sep="",
    )
    for child in span.get("children", []):
        _render_span(console, child, indent + 2)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="gw.error"),
        Text(f"  {result.op}{code}", style="gw.op"),
        Text(f": {msg}"),
        sep="",
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(Text(f"    {key}: {value}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_upsert(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    variables = result.data.get("varnames", {})
    if variables:
        console.print(Text("  variables:", style="gw.key"))
        for node_id, name in variables.items():
            console.print(Text(f"    {name}", style="gw.var"), Text(f" = {node_id}"), sep="")
    _block(console, "condition", result.data.get("condition", ""))
    _block(console, "statements", result.data.get("statements", ""))


def _render_commit(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key in ("nodes", "statements", "latency_ms", "commit_ts"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    uids = result.data.get("uids") or {}
    if uids:
        console.print(Text("  created:", style="gw.key"))
        for name, uid in uids.items():
            console.print(Text(f"    {name}", style="gw.var"), Text(f" -> {uid}"), sep="")


def _render_count(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    _field(console, "id", result.data.get("id"))
    _field(console, "relation", result.data.get("relation"))
    count = result.data.get("count")
    _field(console, "count", "no such node" if count is None else count)


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Callable[[ServiceResult, Console], None]] = {
    "render_upsert": _render_upsert,
    "store_triples": _render_commit,
    "count_relation": _render_count,
}
