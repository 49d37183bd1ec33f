"""SchemaService — registry report, validation and instance construction.

Wraps the registry query surface in :class:`ServiceResult` so the CLI
(or any other interface) never handles raw error aggregates. Failures
are ``ok=False`` results carrying one of the codes defined in
:mod:`metaschema.services.result`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic_core import to_jsonable_python

from metaschema.core.errors import MetaschemaError
from metaschema.services.base import BaseService
from metaschema.services.result import (
    BUILD_FAILED,
    NOT_FOUND,
    SCHEMA_INVALID,
    VALIDATION_FAILED,
    ServiceResult,
)

if TYPE_CHECKING:
    from metaschema.core.definitions import Category
    from metaschema.core.registry import Metaschema


def _jsonable(value: Any) -> Any:
    return to_jsonable_python(value, fallback=repr)


def _describe_category(category: Category) -> dict[str, Any]:
    relations = {
        role: prop
        for role in ("catalog", "subdivision", "hierarchy", "master")
        if (prop := getattr(category, role)) is not None
    }
    return {
        "name": category.name,
        "fields": list(category.definition),
        "actions": sorted(category.actions),
        "views": sorted(category.views),
        "forms": sorted(category.forms),
        "display_modes": sorted(category.display_modes),
        "relations": relations,
    }


def _counts(registry: Metaschema) -> dict[str, int]:
    categories = registry.categories.values()
    return {
        "domains": len(registry.domains),
        "categories": len(registry.categories),
        "actions": sum(len(c.actions) for c in categories),
        "views": sum(len(c.views) for c in categories),
        "forms": sum(len(c.forms) for c in categories),
        "display_modes": sum(len(c.display_modes) for c in categories),
        "sources": len(registry.sources),
    }


class SchemaService(BaseService):
    """Schema operations over the workspace registry."""

    def check(self) -> ServiceResult:
        """Report registration and resolution of the workspace fragments."""
        assembly, failure = self._assemble("check")
        if failure is not None:
            return failure

        counts = _counts(assembly.registry)
        if assembly.error is not None:
            return ServiceResult.failure(
                "check",
                SCHEMA_INVALID,
                f"Schema {assembly.phase} failed with {len(assembly.error)} error(s)",
                assembly.error,
                phase=assembly.phase,
                **counts,
            )
        return ServiceResult(
            ok=True,
            op="check",
            data={**counts, "resolved": assembly.resolved},
        )

    def describe(self) -> ServiceResult:
        """List domains and categories with their behavior names."""
        assembly, failure = self._assemble("describe")
        if failure is not None:
            return failure

        registry = assembly.registry
        domains = [
            {
                "name": domain.name,
                "type": domain.type.value if domain.type is not None else None,
                "decorator": domain.decorator.value if domain.decorator is not None else None,
            }
            for domain in registry.domains.values()
        ]
        return ServiceResult(
            ok=True,
            op="describe",
            data={
                "domains": domains,
                "categories": [_describe_category(c) for c in registry.categories.values()],
            },
            warnings=self._assembly_warnings(assembly),
        )

    def validate(self, category: str, instance: Any, *, patch: bool = False) -> ServiceResult:
        """Validate *instance* (or a patch of it) against *category*."""
        op = "validate"
        assembly, failure = self._assemble(op)
        if failure is not None:
            return failure

        registry = assembly.registry
        if registry.get_category(category) is None:
            return ServiceResult.failure(op, NOT_FOUND, f"No such category: {category}", category=category)

        error = registry.validate_category(category, instance, patch)
        if error is not None:
            return ServiceResult.failure(
                op,
                VALIDATION_FAILED,
                f"{len(error)} validation error(s) in {category}",
                error,
                category=category,
                patch=patch,
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"category": category, "patch": patch, "valid": True},
            warnings=self._assembly_warnings(assembly),
        )

    def validate_action(self, category: str, action: str, args: Any) -> ServiceResult:
        """Validate *args* against the ``Args`` shape of a category action."""
        op = "validate_action"
        assembly, failure = self._assemble(op)
        if failure is not None:
            return failure

        registry = assembly.registry
        if registry.get_category(category) is None:
            return ServiceResult.failure(op, NOT_FOUND, f"No such category: {category}", category=category)
        if action not in registry.actions(category):
            return ServiceResult.failure(
                op, NOT_FOUND, f"No such action: {category}.{action}", category=category, action=action
            )

        error = registry.validate_action(category, action, args)
        if error is not None:
            return ServiceResult.failure(
                op,
                VALIDATION_FAILED,
                f"{len(error)} validation error(s) in {category}.{action}",
                error,
                category=category,
                action=action,
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"category": category, "action": action, "valid": True},
            warnings=self._assembly_warnings(assembly),
        )

    def build(self, category: str, data: Any) -> ServiceResult:
        """Construct a *category* instance from keyed (dict) or positional (list) input."""
        op = "build"
        assembly, failure = self._assemble(op)
        if failure is not None:
            return failure

        registry = assembly.registry
        if registry.get_category(category) is None:
            return ServiceResult.failure(op, NOT_FOUND, f"No such category: {category}", category=category)

        result = registry.build_instance(category, data)
        if result.error is not None:
            return ServiceResult.failure(
                op,
                BUILD_FAILED,
                f"Cannot build {category}: {result.error}",
                MetaschemaError.of([result.error]),
                category=category,
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"category": category, "instance": _jsonable(result.value)},
            warnings=self._assembly_warnings(assembly),
        )
