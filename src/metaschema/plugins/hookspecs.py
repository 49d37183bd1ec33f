"""Pluggy hook specifications for the six cross-reference resolution steps.

Every hook takes the partially resolved registry and returns ``None`` on
success or a :class:`MetaschemaError`. Hooks are ``firstresult``: the
first implementation that reports an error ends the step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from metaschema.core.errors import MetaschemaError
    from metaschema.core.registry import Metaschema

hookspec = pluggy.HookspecMarker("metaschema")


class MetaschemaHookSpec:
    """Hook specifications for the metaschema resolver plugins."""

    @hookspec(firstresult=True)
    def resolve_domains(self, registry: Metaschema) -> MetaschemaError | None:
        """Materialize domain value classes."""

    @hookspec(firstresult=True)
    def resolve_categories(self, registry: Metaschema) -> MetaschemaError | None:
        """Bind field domains and link targets; index back-references."""

    @hookspec(firstresult=True)
    def resolve_actions(self, registry: Metaschema) -> MetaschemaError | None:
        """Bind action argument shapes and forms."""

    @hookspec(firstresult=True)
    def resolve_views(self, registry: Metaschema) -> MetaschemaError | None:
        """Bind view field lists."""

    @hookspec(firstresult=True)
    def resolve_forms(self, registry: Metaschema) -> MetaschemaError | None:
        """Bind form field lists and actions."""

    @hookspec(firstresult=True)
    def resolve_display_modes(self, registry: Metaschema) -> MetaschemaError | None:
        """Bind display mode field lists."""
