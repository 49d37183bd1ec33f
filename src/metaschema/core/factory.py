"""Category instance factory.

One :class:`InstanceFactory` is bound to each registered category. It
builds a plain ``dict`` instance from positional or keyed raw input and
is all-or-nothing: the first failed coercion aborts the whole build.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from metaschema.core.definitions import (
    Category,
    DomainField,
    FieldDescriptor,
    LinkField,
    TransformField,
    value_properties,
)
from metaschema.core.domains import coerce_domain
from metaschema.core.result import Coercion
from metaschema.core.types import Decorator, ErrorKind
from metaschema.core.values import Int64, kind_of

if TYPE_CHECKING:
    from metaschema.core.registry import Metaschema


def _raw_pairs(properties: list[str], args: tuple[Any, ...]) -> list[tuple[str, Any]] | int:
    """Match raw input to declared properties.

    Returns the ``(property, value)`` pairs to consume, or the number of
    positional values when there are more than declared properties.
    """
    if len(args) == 1 and isinstance(args[0], Mapping):
        keyed = args[0]
        return [(prop, keyed[prop]) for prop in properties if prop in keyed]
    if len(args) == 1 and isinstance(args[0], (list, tuple)):
        positional: Sequence[Any] = args[0]
    else:
        positional = args
    if len(positional) > len(properties):
        return len(positional)
    return list(zip(properties, positional, strict=False))


class InstanceFactory:
    """Builds instances of one category.

    Calling the factory returns the instance or ``None``;
    :meth:`build` returns the :class:`Coercion` with the failure detail.
    """

    def __init__(self, registry: Metaschema, category: Category) -> None:
        self._registry = registry
        self._category = category

    @property
    def properties(self) -> list[str]:
        return value_properties(self._category.definition)

    def __call__(self, *args: Any) -> Any:
        return self.build(*args).value_or_none()

    def build(self, *args: Any, path: str | None = None) -> Coercion:
        prefix = f"{self._category.name}." if path is None else path
        properties = self.properties
        pairs = _raw_pairs(properties, args)
        if isinstance(pairs, int):
            return Coercion.failure(
                ErrorKind.ARITY,
                prefix.rstrip("."),
                {"expected": len(properties), "actual": pairs},
            )

        shape = self._category.definition
        instance: dict[str, Any] = {}
        for prop, raw in pairs:
            result = self._coerce(shape[prop], raw, f"{prefix}{prop}")
            if not result.ok:
                return result
            instance[prop] = result.value

        for prop in properties:
            if prop in instance:
                continue
            desc = shape[prop]
            if isinstance(desc, DomainField) and desc.has_default:
                result = self._coerce_domain(desc, desc.default, f"{prefix}{prop}")
                if not result.ok:
                    return result
                instance[prop] = result.value
            elif desc.required:
                return Coercion.failure(ErrorKind.MISSING_PROPERTY, f"{prefix}{prop}")

        return Coercion.success(instance)

    # -- per-property coercion ---------------------------------------------

    def _coerce(self, desc: FieldDescriptor, raw: Any, path: str) -> Coercion:
        if isinstance(desc, TransformField):
            return Coercion.success(desc.function(raw))
        if isinstance(desc, LinkField):
            if desc.decorator is Decorator.MANY and isinstance(raw, (list, tuple)):
                return self._coerce_many(desc, raw, path)
            return self._coerce_link(desc, raw, path)
        if isinstance(desc, DomainField):
            return self._coerce_domain(desc, raw, path)
        return Coercion.failure(ErrorKind.CONSTRUCTION, path, {"descriptor": desc.kind})

    def _coerce_domain(self, desc: DomainField, raw: Any, path: str) -> Coercion:
        domain = desc.definition or self._registry.domains.get(desc.domain)
        if domain is None:
            return Coercion.failure(ErrorKind.UNDEFINED_ENTITY, path, "domain")
        return coerce_domain(domain, raw, path)

    def _coerce_link(self, desc: LinkField, raw: Any, path: str) -> Coercion:
        if isinstance(raw, (Mapping, list, tuple)):
            target = desc.target
            if target is None and desc.category is not None:
                target = self._registry.categories.get(desc.category)
            if target is None or target.factory is None:
                return Coercion.failure(ErrorKind.UNDEFINED_ENTITY, path, "category")
            return target.factory.build(raw, path=f"{path}.")
        try:
            return Coercion.success(Int64(raw))
        except (TypeError, ValueError):
            return Coercion.failure(ErrorKind.INVALID_TYPE, path, {"expected": "bigint", "actual": kind_of(raw)})

    def _coerce_many(self, desc: LinkField, raw: Sequence[Any], path: str) -> Coercion:
        items: list[Any] = []
        for index, item in enumerate(raw):
            result = self._coerce_link(desc, item, f"{path}[{index}]")
            if not result.ok:
                return result
            items.append(result.value)
        return Coercion.success(items)
