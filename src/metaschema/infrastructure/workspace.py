"""Workspace — the assembled schema registry behind every service.

The Workspace loads the configured fragments, registers them and runs
cross-reference resolution, once, on first access. Services receive a
Workspace at construction time and never assemble schemas themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from metaschema.config.logging import log_context
from metaschema.core.assembly import create, resolve_references
from metaschema.infrastructure.loader import FragmentLoadError, load_fragments
from metaschema.plugins.manager import PluginManager, default_manager

if TYPE_CHECKING:
    from metaschema.config.settings import MetaschemaSettings
    from metaschema.core.errors import MetaschemaError
    from metaschema.core.registry import Metaschema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assembly:
    """Outcome of registering and resolving the workspace fragments."""

    registry: Metaschema
    registration_error: MetaschemaError | None = None
    resolution_error: MetaschemaError | None = None
    resolved: bool = False

    @property
    def error(self) -> MetaschemaError | None:
        return self.registration_error or self.resolution_error

    @property
    def phase(self) -> str | None:
        """Phase that produced :attr:`error`, if any."""
        if self.registration_error is not None:
            return "registration"
        if self.resolution_error is not None:
            return "resolution"
        return None


class Workspace:
    """Lazily assembled schema registry for one project directory.

    Args:
        settings: Resolved settings; ``settings.fragments`` names the
            fragment list to load.
        fragments: Explicit ``(kind, fragment)`` pairs, bypassing the
            configured reference (used by embedding code and tests).
    """

    def __init__(
        self,
        settings: MetaschemaSettings,
        fragments: list[tuple[str, Mapping[str, Any]]] | None = None,
    ) -> None:
        self.settings = settings
        self._fragments = fragments
        self._plugins: PluginManager | None = None
        self._assembly: Assembly | None = None

    @property
    def root(self) -> Path:
        return self.settings.workspace_root

    @property
    def plugins(self) -> PluginManager:
        """Resolver plugin manager (created lazily on first access)."""
        if self._plugins is None:
            self._plugins = default_manager(entry_points=self.settings.plugins.entry_points)
        return self._plugins

    def fragments(self) -> list[tuple[str, Mapping[str, Any]]]:
        """The ``(kind, fragment)`` pairs to register.

        Raises:
            FragmentLoadError: If no reference is configured or loading fails.
        """
        if self._fragments is None:
            reference = self.settings.fragments
            if not reference:
                raise FragmentLoadError(
                    "No schema fragments configured (use --schemas or [registry] fragments)"
                )
            self._fragments = load_fragments(reference, self.root)
        return self._fragments

    def assemble(self) -> Assembly:
        """Register the fragments and, if enabled, resolve references.

        Resolution runs only after a clean registration. The result is
        cached for the lifetime of the workspace.

        Raises:
            FragmentLoadError: If the fragments cannot be loaded.
        """
        if self._assembly is not None:
            return self._assembly

        fragments = self.fragments()
        with log_context(fragments=self.settings.fragments or "<inline>"):
            registration_error, registry = create(fragments)
            resolution_error = None
            resolved = False
            if registration_error is None and self.settings.registry.process:
                resolution_error = resolve_references(registry, self.plugins)
                resolved = resolution_error is None
            if registration_error is not None or resolution_error is not None:
                logger.debug(
                    "Schema assembly reported %d error(s)",
                    len(registration_error or resolution_error or ()),
                )

        self._assembly = Assembly(registry, registration_error, resolution_error, resolved)
        return self._assembly

    @property
    def registry(self) -> Metaschema:
        return self.assemble().registry
