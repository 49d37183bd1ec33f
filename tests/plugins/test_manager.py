"""Tests for PluginManager — registration, discovery, and hook relay."""

from __future__ import annotations

import pluggy
import pytest

from metaschema import create, create_and_process
from metaschema.core.errors import MetaschemaError
from metaschema.core.registry import Metaschema
from metaschema.core.types import ErrorKind
from metaschema.plugins.builtins.resolvers import ReferenceResolverPlugin
from metaschema.plugins.manager import BUILTIN_PLUGIN_NAME, PluginManager, default_manager
from tests.conftest import people_fragments

hookimpl = pluggy.HookimplMarker("metaschema")


class _DummyPlugin:
    """Minimal plugin for registration tests."""

    @hookimpl
    def resolve_views(self, registry: Metaschema) -> MetaschemaError | None:
        return None


class _NoReservedNames:
    """Rejects categories whose name starts with an underscore."""

    @hookimpl
    def resolve_categories(self, registry: Metaschema) -> MetaschemaError | None:
        bad = [name for name in registry.categories if name.startswith("_")]
        if not bad:
            return None
        return MetaschemaError.single(ErrorKind.INVALID_DEFINITION, bad[0], {"reason": "reserved name"})


class _CountingPlugin:
    def __init__(self) -> None:
        self.calls: list[str] = []

    @hookimpl
    def resolve_domains(self, registry: Metaschema) -> MetaschemaError | None:
        self.calls.append("domains")
        return None


class TestPluginManager:
    def test_builtins_registered_by_default(self) -> None:
        pm = PluginManager()
        assert pm.list_plugin_names() == [BUILTIN_PLUGIN_NAME]
        assert isinstance(pm.get_plugins()[0], ReferenceResolverPlugin)

    def test_without_builtins(self) -> None:
        assert PluginManager(builtins=False).get_plugins() == []

    def test_hook_relay_accessible(self) -> None:
        pm = PluginManager()
        assert hasattr(pm.hook, "resolve_domains")
        assert hasattr(pm.hook, "resolve_display_modes")

    def test_run_step_dispatches_to_plugins(self) -> None:
        pm = PluginManager(builtins=False)
        counting = _CountingPlugin()
        pm.register_plugin(counting)
        _, ms = create(people_fragments())
        assert pm.run_step("resolve_domains", ms) is None
        assert pm.run_step("resolve_views", ms) is None
        assert counting.calls == ["domains"]

    def test_run_step_rejects_unknown_step(self) -> None:
        _, ms = create(people_fragments())
        with pytest.raises(ValueError, match="resolve_widgets"):
            PluginManager().run_step("resolve_widgets", ms)

    def test_register_plugin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin(), name="dummy")
        assert "dummy" in pm.list_plugin_names()

    def test_register_plugin_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin())
        assert "_DummyPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self) -> None:
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin, name="dummy")
        pm.unregister(plugin)
        assert "dummy" not in pm.list_plugin_names()

    def test_is_loaded_false_before_discover(self) -> None:
        assert PluginManager().is_loaded is False

    def test_discover_and_load(self) -> None:
        pm = PluginManager()
        names = pm.discover_and_load()
        assert pm.is_loaded is True
        assert BUILTIN_PLUGIN_NAME in names

    def test_default_manager(self) -> None:
        assert default_manager().is_loaded is False
        assert default_manager(entry_points=True).is_loaded is True


class TestNormalizePluginInstances:
    def test_class_registered_plugin_is_instantiated(self) -> None:
        pm = PluginManager(builtins=False)
        pm._pm.register(_CountingPlugin, name="counting")
        pm._normalize_plugin_instances()
        plugins = pm.get_plugins()
        assert len(plugins) == 1
        assert isinstance(plugins[0], _CountingPlugin)
        assert pm.list_plugin_names() == ["counting"]

    def test_has_hook_impls(self) -> None:
        assert PluginManager._has_hook_impls(_CountingPlugin) is True
        assert PluginManager._has_hook_impls(object) is False


class TestCustomResolvers:
    def test_custom_error_ends_the_step(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NoReservedNames())
        fragments = people_fragments() + [("category", {"name": "_Secret", "definition": {}})]
        error, ms = create_and_process(fragments, pm)
        assert error is not None
        assert error.kinds == ["invalidDefinition"]
        # The built-in categories resolver never ran.
        assert ms.get_category("Person").definition["Name"].definition is None

    def test_custom_success_falls_through_to_builtin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NoReservedNames())
        error, ms = create_and_process(people_fragments(), pm)
        assert error is None
        assert ms.get_category("Person").definition["Name"].definition is ms.domains["Nomen"]

    def test_process_accepts_a_manager(self) -> None:
        pm = PluginManager()
        counting = _CountingPlugin()
        pm.register_plugin(counting)
        _, ms = create(people_fragments())
        assert ms.process(pm) is None
        assert counting.calls == ["domains"]
