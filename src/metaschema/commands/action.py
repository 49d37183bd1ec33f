"""Command: validate JSON arguments of a category action."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from metaschema.commands._base import MsCommand, payload_argument, read_payload

if TYPE_CHECKING:
    from metaschema.commands._context import AppContext


@click.command(
    "action",
    cls=MsCommand,
    examples="""\
  metaschema action Person Greet args.json
  echo '{"Greeting": "hi"}' | metaschema action Person Greet""",
)
@click.argument("category")
@click.argument("name")
@payload_argument
@click.pass_obj
def action(app: AppContext, category: str, name: str, payload: IO[str]) -> None:
    """Validate the JSON object in FILE (or stdin) as arguments of CATEGORY.NAME."""
    from metaschema.services.schema import SchemaService

    args = read_payload(payload)
    app.emit(SchemaService(app.workspace).validate_action(category, name, args))
