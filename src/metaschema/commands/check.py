"""Command: schema registration and cross-reference check."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from metaschema.commands._base import MsCommand

if TYPE_CHECKING:
    from metaschema.commands._context import AppContext


@click.command(
    cls=MsCommand,
    examples="""\
  metaschema check
  metaschema -s schemas/shop.py:FRAGMENTS check
  metaschema --json check""",
)
@click.pass_obj
def check(app: AppContext) -> None:
    """Register the schema fragments and resolve cross-references."""
    from metaschema.services.schema import SchemaService

    app.emit(SchemaService(app.workspace).check())
