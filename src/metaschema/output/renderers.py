"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from metaschema.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from metaschema.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text.assemble(("OK", "ms.ok"), (f"  {result.op}", "ms.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ms.key")
    if key in ("category", "action", "name"):
        v = Text(str(value), style="ms.name")
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":"), default=str))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _error_table(errors: list[dict[str, Any]]) -> Table:
    """Build a Rich Table for a list of validation/registration errors."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Kind", no_wrap=True)
    table.add_column("Path", style="ms.path")
    table.add_column("Detail")

    for err in errors:
        path = str(err.get("path", ""))
        if err.get("property"):
            path = f"{path}.{err['property']}"
        detail = err.get("detail")
        kind = str(err.get("kind", ""))
        table.add_row(
            Text(kind, style=style_for_kind(kind)),
            path,
            "" if detail in (None, {}) else _json.dumps(detail, default=str),
        )
    return table


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(f"  [ms.warning]warning[/ms.warning]: {warning}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "ms.error"), (f"  {result.op}", "ms.op"), f" — {msg}"))

    if err is None:
        return
    errors = err.detail.get("errors")
    if errors:
        console.print(_error_table(errors))
    if verbose:
        rest = {k: v for k, v in err.detail.items() if k != "errors"}
        if rest:
            console.print(Text("  detail:", style="dim"))
            for k, v in rest.items():
                console.print(f"    {k}: {v}")


# ── Schema renderers ─────────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render registry counts after a clean check."""
    _status_line(console, result)
    for key in ("domains", "categories", "actions", "views", "forms", "display_modes"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _field(console, "sources", result.data.get("sources", 0))
        _field(console, "resolved", result.data.get("resolved", False))


def _render_describe(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render domains and categories as two tables."""
    _status_line(console, result)
    domains = result.data.get("domains", [])
    categories = result.data.get("categories", [])

    if domains:
        table = Table(title="Domains", show_header=True, pad_edge=False, expand=False)
        table.add_column("Name", style="ms.name", no_wrap=True)
        table.add_column("Type")
        table.add_column("Decorator")
        for domain in domains:
            table.add_row(
                str(domain.get("name", "")),
                str(domain.get("type") or ""),
                str(domain.get("decorator") or ""),
            )
        console.print(table)

    if categories:
        table = Table(title="Categories", show_header=True, pad_edge=False, expand=False)
        table.add_column("Name", style="ms.name", no_wrap=True)
        table.add_column("Fields")
        table.add_column("Actions")
        table.add_column("Views", justify="right")
        table.add_column("Forms", justify="right")
        table.add_column("Display", justify="right")
        if verbose:
            table.add_column("Relations", style="dim")
        for category in categories:
            row = [
                str(category.get("name", "")),
                ", ".join(category.get("fields", [])),
                ", ".join(category.get("actions", [])),
                str(len(category.get("views", []))),
                str(len(category.get("forms", []))),
                str(len(category.get("display_modes", []))),
            ]
            if verbose:
                relations = category.get("relations", {})
                row.append(", ".join(f"{k}={v}" for k, v in relations.items()))
            table.add_row(*row)
        console.print(table)

    _render_warnings(console, result)


def _render_validate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a passed validation."""
    _status_line(console, result)
    for key in ("category", "action"):
        if key in result.data:
            _field(console, key, result.data[key])
    if result.data.get("patch"):
        _field(console, "mode", "patch")
    _render_warnings(console, result)


def _render_build(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a constructed instance as indented fields."""
    _status_line(console, result)
    _field(console, "category", result.data.get("category", ""))
    instance = result.data.get("instance") or {}
    for key, value in instance.items():
        _field(console, f"  {key}", value)
    _render_warnings(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    _render_warnings(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "check": _render_check,
    "describe": _render_describe,
    "validate": _render_validate,
    "validate_action": _render_validate,
    "build": _render_build,
}
