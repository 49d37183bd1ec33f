"""Command: validate a JSON instance against a category."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from metaschema.commands._base import MsCommand, payload_argument, read_payload

if TYPE_CHECKING:
    from metaschema.commands._context import AppContext


@click.command(
    cls=MsCommand,
    examples="""\
  metaschema validate Person person.json
  echo '{"Age": 30}' | metaschema validate Person --patch
  metaschema --json validate Person person.json""",
)
@click.argument("category")
@payload_argument
@click.option("--patch", is_flag=True, help="Validate as a partial update.")
@click.pass_obj
def validate(app: AppContext, category: str, payload: IO[str], patch: bool) -> None:
    """Validate the JSON object in FILE (or stdin) as a CATEGORY value."""
    from metaschema.services.schema import SchemaService

    instance = read_payload(payload)
    app.emit(SchemaService(app.workspace).validate(category, instance, patch=patch))
