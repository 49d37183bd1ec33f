"""Runtime value model — kind tags, integer wrappers, structured wrappers.

``kind_of`` maps a Python value onto the closed set of primitive kind
tags that domains declare. The wrapper classes give exact-integer,
link-identifier and monetary values a distinct runtime class so that
validation can tell them apart from plain numbers.
"""

from __future__ import annotations

import enum
import functools
import types
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any

# Flags value classes carry one bit per value in a 64-bit pattern.
MAX_FLAGS = 64

_CENTS = Decimal("0.01")

_FUNCTION_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    functools.partial,
    type,
)


def _to_int(value: Any) -> int:
    """Convert *value* to an exact int, rejecting lossy input."""
    if isinstance(value, bool):
        raise TypeError("boolean is not an integer value")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value!r} is not an integral number")
        return int(value)
    if isinstance(value, str):
        return int(value.strip(), 10)
    raise TypeError(f"cannot convert {type(value).__name__} to an integer")


class Int64(int):
    """Signed 64-bit integer (exact-integer domains, link references)."""

    MIN = -(2**63)
    MAX = 2**63 - 1

    def __new__(cls, value: Any = 0) -> Int64:
        number = _to_int(value)
        if not cls.MIN <= number <= cls.MAX:
            raise ValueError(f"{number} is out of range for {cls.__name__}")
        return super().__new__(cls, number)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class Uint64(int):
    """Unsigned 64-bit integer (raw bit patterns and link identifiers)."""

    MIN = 0
    MAX = 2**64 - 1

    def __new__(cls, value: Any = 0) -> Uint64:
        number = _to_int(value)
        if not cls.MIN <= number <= cls.MAX:
            raise ValueError(f"{number} is out of range for {cls.__name__}")
        return super().__new__(cls, number)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class Money(Decimal):
    """Monetary amount, quantized to cents with banker's rounding."""

    def __new__(cls, value: Any = "0", context: Any = None) -> Money:
        if isinstance(value, bool):
            raise TypeError("boolean is not a monetary amount")
        if isinstance(value, float):
            value = repr(value)
        amount = Decimal(value)
        if not amount.is_finite():
            raise ValueError(f"{value!r} is not a finite amount")
        return super().__new__(cls, amount.quantize(_CENTS, rounding=ROUND_HALF_EVEN))

    def __repr__(self) -> str:
        return f"Money('{self}')"


class Symbol:
    """Opaque unique token; equal only to itself."""

    __slots__ = ("description",)

    def __init__(self, description: str | None = None) -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"Symbol({self.description!r})"


def kind_of(value: Any) -> str:
    """Return the primitive kind tag of *value*.

    Examples:
        >>> kind_of("x"), kind_of(1.5), kind_of(Int64(3)), kind_of(None)
        ('string', 'number', 'bigint', 'undefined')
    """
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (Int64, Uint64)):
        return "bigint"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Symbol):
        return "symbol"
    if isinstance(value, _FUNCTION_TYPES):
        return "function"
    return "object"


def class_name(value: Any) -> str:
    """Runtime class name of *value*, as compared against ``domain.class``."""
    return type(value).__name__


# ---------------------------------------------------------------------------
# Structured-object wrappers; each returns None instead of raising
# ---------------------------------------------------------------------------


def _wrap_money(value: Any) -> Money | None:
    try:
        return Money(value)
    except (ArithmeticError, TypeError, ValueError):
        return None


def _wrap_bytes(value: Any) -> bytes | None:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, int):
        return None
    try:
        return bytes(value)
    except (TypeError, ValueError):
        return None


def _wrap_dict(value: Any) -> dict[Any, Any] | None:
    try:
        return dict(value)
    except (TypeError, ValueError):
        return None


def _wrap_set(value: Any) -> set[Any] | None:
    try:
        return set(value)
    except TypeError:
        return None


def _wrap_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    try:
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None
    return None


CLASS_WRAPPERS: dict[str, Callable[[Any], Any]] = {
    "Money": _wrap_money,
    "bytes": _wrap_bytes,
    "dict": _wrap_dict,
    "set": _wrap_set,
    "datetime": _wrap_datetime,
}


# ---------------------------------------------------------------------------
# Enum / Flags value classes
# ---------------------------------------------------------------------------


def _member_names(values: Sequence[Any]) -> list[str]:
    """Unique enum member names; non-identifier values get positional names."""
    names: list[str] = []
    seen: set[str] = set()
    for index, value in enumerate(values):
        if isinstance(value, str) and value.isidentifier() and not value.startswith("_"):
            name = value
        else:
            name = f"V{index}"
        while name in seen:
            name = f"{name}_"
        seen.add(name)
        names.append(name)
    return names


def enum_class(name: str, values: Sequence[Any]) -> type[enum.Enum]:
    """Build the value class of an ``Enum`` domain.

    String-only value sets produce a ``StrEnum`` and int-only sets an
    ``IntEnum``, so members compare equal to the raw literals.
    """
    members = list(zip(_member_names(values), values, strict=True))
    base: type[enum.Enum]
    if values and all(isinstance(v, str) for v in values):
        base = enum.StrEnum
    elif values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        base = enum.IntEnum
    else:
        base = enum.Enum
    return base(name, members, module=__name__)


def flags_class(name: str, values: Sequence[Any]) -> type[enum.Flag]:
    """Build the bit-set value class of a ``Flags`` domain (one bit per value)."""
    if len(values) > MAX_FLAGS:
        raise ValueError(f"Flags domain {name!r} has {len(values)} values, limit is {MAX_FLAGS}")
    members = [(member, 1 << index) for index, member in enumerate(_member_names(values))]
    return enum.Flag(name, members, module=__name__, boundary=enum.FlagBoundary.KEEP)
