"""Domain validation and coercion — pure functions over one domain and one value.

``validate_domain`` reports every defect it can find (never raises).
``coerce_domain`` is the construction path used by category factories:
it normalizes, parses or wraps a raw value and fails closed.
"""

from __future__ import annotations

import enum
import functools
import operator
from collections.abc import Callable
from typing import Any

from metaschema.core.definitions import Domain
from metaschema.core.errors import ValidationError
from metaschema.core.result import Coercion
from metaschema.core.types import DomainType, ErrorKind
from metaschema.core.values import CLASS_WRAPPERS, MAX_FLAGS, Int64, Uint64, class_name, kind_of

INTEGER_SUBTYPES = frozenset({"int", "integer"})

_Checker = Callable[[Domain, str, Any], list[ValidationError]]


def _domain_error(path: str, reason: str) -> ValidationError:
    return ValidationError(kind=ErrorKind.DOMAIN_VALIDATION, path=path, detail=reason)


def _flags_class(domain: Domain) -> Any:
    # Value class of a Flags domain, or None when it has too many values to build one.
    if len(domain.values) > MAX_FLAGS:
        return None
    return domain.get_value_class()


def _too_wide(domain: Domain, path: str) -> ValidationError:
    return ValidationError(
        kind=ErrorKind.INVALID_DEFINITION,
        path=path,
        detail={"domain": domain.name, "values": len(domain.values), "limit": MAX_FLAGS},
    )


def _is_integer(value: Any) -> bool:
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _check_string(domain: Domain, path: str, value: str) -> list[ValidationError]:
    errors: list[ValidationError] = []
    if domain.min is not None and len(value) < domain.min:
        errors.append(_domain_error(path, "min"))
    if domain.length is not None and len(value) > domain.length:
        errors.append(_domain_error(path, "length"))
    return errors


def _check_number(domain: Domain, path: str, value: Any) -> list[ValidationError]:
    errors: list[ValidationError] = []
    # Inverted comparisons: NaN satisfies neither bound.
    if domain.min is not None and not value >= domain.min:
        errors.append(_domain_error(path, "min"))
    if domain.max is not None and not value <= domain.max:
        errors.append(_domain_error(path, "max"))
    if domain.subtype in INTEGER_SUBTYPES and not _is_integer(value):
        errors.append(_domain_error(path, "subtype"))
    return errors


def _check_object(domain: Domain, path: str, value: Any) -> list[ValidationError]:
    actual = class_name(value)
    if domain.class_name != actual:
        return [
            ValidationError(
                kind=ErrorKind.INVALID_CLASS,
                path=path,
                detail={"expected": domain.class_name, "actual": actual},
            )
        ]
    if domain.length is not None:
        try:
            size = len(value)
        except TypeError:
            return [_domain_error(path, "length")]
        if size > domain.length:
            return [_domain_error(path, "length")]
    return []


def _no_checks(domain: Domain, path: str, value: Any) -> list[ValidationError]:
    return []


_KIND_CHECKERS: dict[str, _Checker] = {
    DomainType.STRING: _check_string,
    DomainType.NUMBER: _check_number,
    DomainType.OBJECT: _check_object,
    DomainType.BIGINT: _no_checks,
    DomainType.BOOLEAN: _no_checks,
    DomainType.FUNCTION: _no_checks,
    DomainType.SYMBOL: _no_checks,
}


def validate_domain(value: Any, path: str, domain: Domain) -> list[ValidationError]:
    """Validate *value* against *domain*.

    Order: type -> kind-specific -> enum/flags -> check. A type mismatch
    stops all further checks; a class mismatch stops the remaining
    object checks only.
    """
    errors: list[ValidationError] = []
    if domain.is_enum and isinstance(value, enum.Enum):
        # Members built by the factory are checked as their literal.
        value = value.value

    if domain.type is not None:
        actual = kind_of(value)
        if actual != domain.type:
            errors.append(
                ValidationError(
                    kind=ErrorKind.INVALID_TYPE,
                    path=path,
                    detail={"expected": domain.type.value, "actual": actual},
                )
            )
            return errors
        errors.extend(_KIND_CHECKERS[domain.type](domain, path, value))

    if domain.is_enum and value not in domain.values:
        errors.append(
            ValidationError(
                kind=ErrorKind.ENUM,
                path=path,
                detail={"expected": list(domain.values), "actual": value},
            )
        )

    if domain.is_flags:
        flags_cls = _flags_class(domain)
        if flags_cls is None:
            errors.append(_too_wide(domain, path))
        elif not isinstance(value, (flags_cls, Uint64)):
            errors.append(
                ValidationError(
                    kind=ErrorKind.INVALID_CLASS,
                    path=path,
                    detail={"expected": ["Uint64", flags_cls.__name__], "actual": class_name(value)},
                )
            )

    if domain.check is not None and not domain.check(value):
        errors.append(_domain_error(path, "check"))

    return errors


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def _coerce_enum(domain: Domain, value: Any, path: str) -> Coercion:
    if isinstance(value, enum.Enum):
        value = value.value
    if value not in domain.values:
        return Coercion.failure(ErrorKind.ENUM, path, {"expected": list(domain.values), "actual": value})
    try:
        return Coercion.success(domain.get_value_class()(value))
    except ValueError:
        return Coercion.failure(ErrorKind.ENUM, path, {"expected": list(domain.values), "actual": value})


def _coerce_flags(domain: Domain, value: Any, path: str) -> Coercion:
    flags_cls = _flags_class(domain)
    if flags_cls is None:
        return Coercion(error=_too_wide(domain, path))
    if isinstance(value, flags_cls):
        return Coercion.success(value)
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        try:
            pattern = Uint64(value)
        except (TypeError, ValueError):
            return Coercion.failure(ErrorKind.INVALID_TYPE, path, {"expected": "Uint64", "actual": value})
        return Coercion.success(flags_cls(int(pattern)))
    if isinstance(value, (list, tuple)) and all(item in domain.values for item in value):
        bits = (flags_cls(1 << domain.values.index(item)) for item in value)
        return Coercion.success(functools.reduce(operator.or_, bits, flags_cls(0)))
    return Coercion.failure(ErrorKind.ENUM, path, {"expected": list(domain.values), "actual": value})


def coerce_domain(domain: Domain, value: Any, path: str = "") -> Coercion:
    """Construct a domain instance from a raw value.

    ``normalize`` runs first; a ``parse`` callable then owns the result
    outright (``None`` counts as failure). Otherwise Enum, Flags,
    exact-integer and structured-object domains wrap the value, and the
    remaining kinds accept it only when its kind tag matches exactly.
    """
    if domain.normalize is not None:
        value = domain.normalize(value)
    if domain.parse is not None:
        parsed = domain.parse(value)
        if parsed is None:
            return Coercion.failure(ErrorKind.CONSTRUCTION, path, {"domain": domain.name})
        return Coercion.success(parsed)
    if domain.is_enum:
        return _coerce_enum(domain, value, path)
    if domain.is_flags:
        return _coerce_flags(domain, value, path)

    if domain.type is DomainType.BIGINT:
        try:
            return Coercion.success(Int64(value))
        except (TypeError, ValueError):
            return Coercion.failure(ErrorKind.INVALID_TYPE, path, {"expected": "bigint", "actual": kind_of(value)})

    if domain.type is DomainType.OBJECT:
        wrapper = CLASS_WRAPPERS.get(domain.class_name or "")
        wrapped = wrapper(value) if wrapper is not None else None
        if wrapped is None:
            return Coercion.failure(
                ErrorKind.INVALID_CLASS, path, {"expected": domain.class_name, "actual": class_name(value)}
            )
        return Coercion.success(wrapped)

    actual = kind_of(value)
    if domain.type is None or actual != domain.type:
        expected = domain.type.value if domain.type is not None else None
        return Coercion.failure(ErrorKind.INVALID_TYPE, path, {"expected": expected, "actual": actual})
    return Coercion.success(value)
