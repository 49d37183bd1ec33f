"""Fragment loading from ``module:attribute`` references.

The only loader shipped: it imports a Python module (by dotted name or
``.py`` file path) and reads a list of ``(kind, fragment)`` pairs from
one of its attributes. The attribute may also be a zero-argument
callable returning that list.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
from collections.abc import Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

from metaschema.core.types import SchemaKind

logger = logging.getLogger(__name__)

_KINDS = frozenset(kind.value for kind in SchemaKind)


class FragmentLoadError(Exception):
    """A fragment reference that cannot be imported or has the wrong shape."""


def _split_reference(reference: str) -> tuple[str, str]:
    module, sep, attr = reference.rpartition(":")
    if not sep or not module or not attr:
        raise FragmentLoadError(f"Expected 'module:attribute', got {reference!r}")
    return module, attr


def _import_file(path: Path) -> ModuleType:
    if not path.is_file():
        raise FragmentLoadError(f"Schema module not found: {path}")
    spec = importlib.util.spec_from_file_location(f"_metaschema_fragments_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise FragmentLoadError(f"Cannot import schema module: {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise FragmentLoadError(f"Error importing {path}: {exc}") from exc
    return module


def _import_module(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except Exception as exc:
        raise FragmentLoadError(f"Error importing {name}: {exc}") from exc


def _check_pairs(reference: str, value: Any) -> list[tuple[str, Mapping[str, Any]]]:
    if not isinstance(value, (list, tuple)):
        raise FragmentLoadError(f"{reference} must be a list of (kind, fragment) pairs")
    pairs: list[tuple[str, Mapping[str, Any]]] = []
    for index, item in enumerate(value):
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise FragmentLoadError(f"{reference}[{index}] is not a (kind, fragment) pair")
        kind, fragment = item
        if kind not in _KINDS:
            raise FragmentLoadError(f"{reference}[{index}] has unknown kind {kind!r}")
        pairs.append((kind, fragment))
    return pairs


def load_fragments(reference: str, root: Path | None = None) -> list[tuple[str, Mapping[str, Any]]]:
    """Import the fragment list named by *reference*.

    ``schemas/shop.py:FRAGMENTS`` loads a file (relative paths resolve
    against *root*); ``shop.schema:FRAGMENTS`` imports a module.

    Raises:
        FragmentLoadError: If the module or attribute cannot be loaded,
            or the value is not a list of ``(kind, fragment)`` pairs.
    """
    module_ref, attr = _split_reference(reference)
    if module_ref.endswith(".py"):
        path = Path(module_ref)
        if not path.is_absolute():
            path = (root or Path.cwd()) / path
        module = _import_file(path)
    else:
        module = _import_module(module_ref)

    try:
        value = getattr(module, attr)
    except AttributeError as exc:
        raise FragmentLoadError(f"{module_ref} has no attribute {attr!r}") from exc
    if callable(value):
        try:
            value = value()
        except Exception as exc:
            raise FragmentLoadError(f"Error calling {reference}: {exc}") from exc

    pairs = _check_pairs(reference, value)
    logger.debug("Loaded %d fragment(s) from %s", len(pairs), reference)
    return pairs
