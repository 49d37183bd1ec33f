"""Command: list registered domains and categories."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from metaschema.commands._base import MsCommand

if TYPE_CHECKING:
    from metaschema.commands._context import AppContext


@click.command(
    cls=MsCommand,
    examples="""\
  metaschema describe
  metaschema -v describe
  metaschema --json describe""",
)
@click.pass_obj
def describe(app: AppContext) -> None:
    """Show domains, categories and their behaviors."""
    from metaschema.services.schema import SchemaService

    app.emit(SchemaService(app.workspace).describe())
