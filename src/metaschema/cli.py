"""Root CLI group for metaschema with global flags and command registration."""

from __future__ import annotations

import click

from metaschema import __version__
from metaschema.commands import register_commands
from metaschema.commands._base import MsGroup
from metaschema.commands._context import AppContext
from metaschema.config.settings import MetaschemaSettings


@click.group(
    cls=MsGroup,
    invoke_without_command=True,
    examples="""\
  metaschema -s schemas/shop.py:FRAGMENTS check
  metaschema describe
  metaschema validate Person person.json
  metaschema build Person person.json""",
)
@click.version_option(version=__version__, prog_name="metaschema")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-s",
    "--schemas",
    default=None,
    help="Fragment list to load, as module:ATTR or path/to/file.py:ATTR.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    schemas: str | None,
) -> None:
    """metaschema — metadata schema engine CLI."""
    ctx.ensure_object(dict)
    settings = MetaschemaSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        schemas=schemas,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
