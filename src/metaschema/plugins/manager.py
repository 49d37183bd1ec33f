"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints
in the ``metaschema.resolvers`` group. The built-in resolvers are
registered on construction.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

import pluggy

from metaschema.plugins.builtins.resolvers import ReferenceResolverPlugin
from metaschema.plugins.hookspecs import MetaschemaHookSpec

if TYPE_CHECKING:
    from metaschema.core.errors import MetaschemaError
    from metaschema.core.registry import Metaschema

PROJECT_NAME = "metaschema"
ENTRY_POINT_GROUP = "metaschema.resolvers"
BUILTIN_PLUGIN_NAME = "metaschema-builtin-resolvers"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages resolver plugin discovery, loading, and hook dispatch."""

    def __init__(self, *, builtins: bool = True) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(MetaschemaHookSpec)
        self._loaded: bool = False
        if builtins:
            self.register_plugin(ReferenceResolverPlugin(), name=BUILTIN_PLUGIN_NAME)

    def discover_and_load(self) -> list[str]:
        """Load third-party resolvers from the ``metaschema.resolvers`` group.

        Returns a list of registered plugin names.
        """
        count = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        logger.debug("Loaded %d entry-point resolver plugin(s)", count)
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay for dispatching resolution steps."""
        return self._pm.hook

    def run_step(self, step: str, registry: Metaschema) -> MetaschemaError | None:
        """Dispatch one resolution step; the first non-None plugin answer wins.

        Raises:
            ValueError: If *step* is not a declared resolution hook.
        """
        hook_fn = getattr(self._pm.hook, step, None)
        if hook_fn is None:
            raise ValueError(f"Unknown resolution step: {step}")
        return hook_fn(registry=registry)

    def get_plugins(self) -> list[object]:
        """Return all registered plugins."""
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("metaschema")`` sets a ``metaschema_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "metaschema_impl", None):
                return True
        return False


def default_manager(*, entry_points: bool = False) -> PluginManager:
    """Manager with the built-in resolvers, optionally plus entry-point plugins."""
    manager = PluginManager()
    if entry_points:
        manager.discover_and_load()
    return manager
