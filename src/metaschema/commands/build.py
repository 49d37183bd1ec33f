"""Command: construct a typed category instance from JSON input."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from metaschema.commands._base import MsCommand, payload_argument, read_payload

if TYPE_CHECKING:
    from metaschema.commands._context import AppContext


@click.command(
    cls=MsCommand,
    examples="""\
  metaschema build Person person.json
  echo '["Ann", 30]' | metaschema build Person
  metaschema --json build Person person.json""",
)
@click.argument("category")
@payload_argument
@click.pass_obj
def build(app: AppContext, category: str, payload: IO[str]) -> None:
    """Build a CATEGORY instance from a JSON object (keyed) or array (positional)."""
    from metaschema.services.schema import SchemaService

    data = read_payload(payload)
    app.emit(SchemaService(app.workspace).build(category, data))
