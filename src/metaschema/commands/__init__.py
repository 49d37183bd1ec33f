"""Subcommand modules for metaschema.

Provides register_commands() which uses deferred imports to keep
``metaschema --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from metaschema.commands.action import action
    from metaschema.commands.build import build
    from metaschema.commands.check import check
    from metaschema.commands.describe import describe
    from metaschema.commands.validate import validate

    cli.add_command(check)
    cli.add_command(describe)
    cli.add_command(validate)
    cli.add_command(action)
    cli.add_command(build)
