"""Rich Console factory and theme for metaschema output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

MS_THEME = Theme(
    {
        "ms.ok": "bold green",
        "ms.error": "bold red",
        "ms.warning": "bold yellow",
        "ms.op": "bold cyan",
        "ms.key": "dim",
        "ms.name": "bold blue",
        "ms.path": "bold",
        "ms.kind": "magenta",
        "ms.kind.schema": "yellow",
        "ms.kind.build": "red",
    }
)

# Registration and resolution kinds; anything else is a data defect.
_SCHEMA_KINDS = frozenset(
    {
        "duplicate",
        "unlinked",
        "unresolvedCategory",
        "unresolvedDomain",
        "unresolvedForm",
        "unresolvedAction",
        "invalidDefinition",
    }
)
_BUILD_KINDS = frozenset({"arity", "construction"})


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=MS_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Return the Rich style for an error kind, grouped by the phase that reports it."""
    if kind in _SCHEMA_KINDS:
        return "ms.kind.schema"
    if kind in _BUILD_KINDS:
        return "ms.kind.build"
    return "ms.kind"
