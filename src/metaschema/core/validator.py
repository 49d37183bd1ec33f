"""Structural and reference validation of objects against shapes.

Internal to the registry: callers go through
:meth:`Metaschema.validate_category`, ``validate_action`` and
``validate_fields``. Every function returns a list of errors and never
raises for bad data.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from metaschema.core.definitions import (
    Category,
    Domain,
    DomainField,
    FieldDescriptor,
    LinkField,
    ValidateRule,
)
from metaschema.core.domains import validate_domain
from metaschema.core.errors import ValidationError
from metaschema.core.types import Decorator, ErrorKind
from metaschema.core.values import Uint64, class_name, kind_of

if TYPE_CHECKING:
    from metaschema.core.registry import Metaschema

LINK_CLASSES = ("Uint64", "str")


def _error(kind: ErrorKind, path: str, detail: Any = None) -> ValidationError:
    return ValidationError(kind=kind, path=path, detail=detail)


def _field_domain(registry: Metaschema, desc: DomainField) -> Domain | None:
    if desc.definition is not None:
        return desc.definition
    return registry.domains.get(desc.domain)


def _link_target(registry: Metaschema, desc: LinkField) -> Category | None:
    if desc.target is not None:
        return desc.target
    if desc.category is None:
        return None
    return registry.categories.get(desc.category)


def _check_link(value: Any, path: str) -> list[ValidationError]:
    if isinstance(value, (Uint64, str)):
        return []
    return [_error(ErrorKind.INVALID_CLASS, path, {"expected": list(LINK_CLASSES), "actual": class_name(value)})]


def validate_link(
    registry: Metaschema,
    value: Any,
    path: str,
    desc: LinkField,
    patch: bool = False,
) -> list[ValidationError]:
    """Validate a link-backed value by shape only; existence is not checked."""
    if desc.decorator is Decorator.INCLUDE:
        target = _link_target(registry, desc)
        if target is None:
            return [_error(ErrorKind.UNDEFINED_ENTITY, path, "category")]
        return validate_shape(registry, target.definition, value, patch, f"{path}.")

    if desc.decorator is Decorator.MANY:
        if not isinstance(value, (list, tuple)):
            return [_error(ErrorKind.INVALID_TYPE, path, {"expected": "list", "actual": kind_of(value)})]
        errors: list[ValidationError] = []
        for index, item in enumerate(value):
            errors.extend(_check_link(item, f"{path}[{index}]"))
        return errors

    return _check_link(value, path)


def _validate_value(
    registry: Metaschema,
    desc: FieldDescriptor,
    value: Any,
    path: str,
    patch: bool,
) -> list[ValidationError]:
    if isinstance(desc, DomainField):
        domain = _field_domain(registry, desc)
        if domain is None:
            return [_error(ErrorKind.UNDEFINED_ENTITY, path, "domain")]
        return validate_domain(value, path, domain)
    if isinstance(desc, LinkField):
        return validate_link(registry, value, path, desc, patch)
    return []


def validate_shape(
    registry: Metaschema,
    shape: Mapping[str, FieldDescriptor],
    obj: Any,
    patch: bool = False,
    path: str = "",
) -> list[ValidationError]:
    """Validate *obj* against *shape* in full or patch mode.

    Properties are visited in shape order, then any extra object keys.
    Per property the first matching rule ends processing: unknown
    property, whole-object predicate (full mode only), read-only in
    patch, absent, empty. Surviving values get domain or link checks
    followed by the property's own ``validate`` predicate.
    """
    if not isinstance(obj, Mapping):
        return [_error(ErrorKind.INVALID_TYPE, path.rstrip("."), {"expected": "object", "actual": kind_of(obj)})]

    errors: list[ValidationError] = []
    props = list(shape)
    props.extend(key for key in obj if key not in shape)

    for prop in props:
        prop_path = f"{path}{prop}"
        desc = shape.get(prop)
        present = prop in obj

        if desc is None:
            errors.append(_error(ErrorKind.UNRESOLVED_PROPERTY, prop_path))
            continue

        if isinstance(desc, ValidateRule):
            if not patch and not desc.predicate(obj):
                errors.append(_error(ErrorKind.VALIDATION, prop_path))
            continue

        if desc.read_only and patch:
            errors.append(_error(ErrorKind.IMMUTABLE, prop_path))
            continue

        if not present:
            if desc.required and not patch:
                errors.append(_error(ErrorKind.MISSING_PROPERTY, prop_path))
            continue

        value = obj[prop]
        if value is None:
            if desc.required:
                errors.append(_error(ErrorKind.EMPTY_VALUE, prop_path))
            continue

        errors.extend(_validate_value(registry, desc, value, prop_path, patch))

        if desc.predicate is not None and not desc.predicate(value):
            errors.append(_error(ErrorKind.PROP_VALIDATION, prop_path))

    return errors
