"""Custom Click base classes with --examples support, and payload input.

Provides MsCommand and MsGroup that accept an ``examples`` parameter.
When ``--examples`` is passed, the command prints usage examples and exits.
This keeps ``--help`` concise while making examples available on demand.
"""

from __future__ import annotations

import json
from typing import IO, Any

import click


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class _ExamplesMixin:
    """Accept an ``examples`` keyword and expose it as ``--examples``."""

    examples: str | None

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)  # type: ignore[arg-type]


class MsCommand(_ExamplesMixin, click.Command):
    """Click Command with an ``--examples`` flag."""


class MsGroup(_ExamplesMixin, click.Group):
    """Click Group with an ``--examples`` flag.

    Subcommands default to :class:`MsCommand`, so ``@group.command``
    accepts ``examples=`` without ``cls=``.
    """

    command_class = MsCommand


def payload_argument(func: Any) -> Any:
    """``[FILE]`` argument holding a JSON payload; ``-`` or omitted reads stdin."""
    return click.argument("payload", type=click.File("r", encoding="utf-8"), default="-")(func)


def read_payload(stream: IO[str]) -> Any:
    """Parse the JSON payload from *stream*.

    Raises:
        click.BadParameter: If the payload is not valid JSON.
    """
    try:
        return json.load(stream)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"invalid JSON: {exc}", param_hint="FILE") from exc
