"""metaschema — metadata schema engine.

Registers domains, categories and category-scoped behaviors, then
validates runtime values against them and constructs typed instances.
"""

from metaschema.core.assembly import create, create_and_process
from metaschema.core.registry import Metaschema

__version__ = "1.4.0"

__all__ = ["Metaschema", "__version__", "create", "create_and_process"]
