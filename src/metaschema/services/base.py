"""BaseService — abstract foundation for metaschema services.

Every service receives a :class:`Workspace` at construction time. The
Workspace owns fragment loading and registry assembly; services only
query the assembled registry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from metaschema.infrastructure.loader import FragmentLoadError
from metaschema.services.result import LOAD_FAILED, ServiceResult

if TYPE_CHECKING:
    from metaschema.infrastructure.workspace import Assembly, Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class SchemaService(BaseService):
            def describe(self) -> ServiceResult:
                assembly, failure = self._assemble("describe")
                if failure is not None:
                    return failure
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def _assemble(self, op: str) -> tuple[Assembly | None, ServiceResult | None]:
        """Assembled workspace, or a ``LOAD_FAILED`` result for *op*."""
        try:
            return self._workspace.assemble(), None
        except FragmentLoadError as exc:
            logger.debug("Fragment loading failed", exc_info=True)
            return None, ServiceResult.failure(op, LOAD_FAILED, str(exc))

    @staticmethod
    def _assembly_warnings(assembly: Assembly) -> list[str]:
        """Warnings for queries run against a registry that did not assemble cleanly."""
        if assembly.error is None:
            return []
        return [f"Schema {assembly.phase} reported {len(assembly.error)} error(s); results may be partial"]
