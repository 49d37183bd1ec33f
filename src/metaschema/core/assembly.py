"""Assembly pipeline — registration phases and cross-reference resolution.

``create`` registers an unordered batch of ``(kind, fragment)`` pairs in
phase order and collects every registration error. ``resolve_references``
then runs the six resolver hooks in order and stops at the first error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from metaschema.core.errors import MetaschemaError, SchemaValidationError
from metaschema.core.registry import Metaschema
from metaschema.core.types import PHASE_ORDER

if TYPE_CHECKING:
    from metaschema.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

# Hook names, in the order the resolution steps run.
RESOLUTION_STEPS: tuple[str, ...] = (
    "resolve_domains",
    "resolve_categories",
    "resolve_actions",
    "resolve_views",
    "resolve_forms",
    "resolve_display_modes",
)

Fragment = tuple[str, Mapping[str, Any]]


def _phase(pair: Fragment) -> int:
    # Unknown kinds sort last and are reported by Metaschema.add_schema.
    return PHASE_ORDER.get(pair[0], len(PHASE_ORDER))


def create(schemas: Iterable[Fragment]) -> tuple[MetaschemaError | None, Metaschema]:
    """Register *schemas* into a new registry.

    The sort is stable, so fragments of the same kind keep their
    submission order. Returns the aggregate registration error (or None)
    together with the registry, which holds every fragment that
    registered cleanly.
    """
    registry = Metaschema()
    errors: list[SchemaValidationError] = []
    ordered = sorted(schemas, key=_phase)
    for kind, fragment in ordered:
        errors.extend(registry.add_schema(kind, fragment))

    logger.debug(
        "Registered %d fragment(s): %d domain(s), %d category(ies), %d error(s)",
        len(ordered),
        len(registry.domains),
        len(registry.categories),
        len(errors),
    )
    return (MetaschemaError.of(errors) if errors else None), registry


def resolve_references(
    registry: Metaschema,
    plugins: PluginManager | None = None,
) -> MetaschemaError | None:
    """Run the resolution steps in order; return the first error found.

    Each built-in resolver applies its bindings only when its whole kind
    resolved, so after a failure every earlier kind is bound and the
    failing kind and all later kinds are left untouched.
    """
    if plugins is None:
        from metaschema.plugins.manager import default_manager

        plugins = default_manager()

    for step in RESOLUTION_STEPS:
        error = plugins.run_step(step, registry)
        if error is not None:
            logger.debug("Resolution stopped at %s: %d error(s)", step, len(error))
            return error
        logger.debug("Resolution step %s done", step)
    return None


def create_and_process(
    schemas: Iterable[Fragment],
    plugins: PluginManager | None = None,
) -> tuple[MetaschemaError | None, Metaschema]:
    """Register *schemas* and, when registration was clean, resolve references."""
    error, registry = create(schemas)
    if error is not None:
        return error, registry
    return resolve_references(registry, plugins), registry
