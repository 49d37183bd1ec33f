"""Extension layer — cross-reference resolvers via pluggy.

Discovery: entry_points (pip-installed) in the ``metaschema.resolvers``
group. The built-in resolvers are always registered.
INVARIANT: Plugin loading failures are warnings, never errors.
"""

from metaschema.plugins.manager import PluginManager

__all__ = ["PluginManager"]
