"""Schema authoring decorators.

Fragments are plain mappings; a decorator tags a definition by adding a
``decorator`` key (``Enum``, ``Many``, ``Action``, ...) or, for
whole-object predicates, by wrapping the callable in :class:`Validator`.
The tag is read back once, at registration, by :func:`extract_decorator`.

Usage::

    domains = {
        "Color": Enum("Red", "Green"),
        "Palette": Flags(enum="Color"),
    }
    person = {
        "Name": {"domain": "Nomen", "required": True},
        "Company": Catalog("Company"),
        "Parent": Hierarchy(),
        "Friends": Many("Person"),
        "Adult": Validate(lambda obj: obj.get("Age", 0) >= 18),
        "Greet": Action(Args={"Greeting": {"domain": "Nomen"}}),
    }
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from metaschema.core.types import Decorator

DECORATOR_KEY = "decorator"


class Validator:
    """Whole-object predicate marked with the ``Validate`` decorator."""

    __slots__ = ("predicate",)

    decorator = Decorator.VALIDATE

    def __init__(self, predicate: Callable[[Mapping[str, Any]], bool]) -> None:
        self.predicate = predicate

    def __call__(self, obj: Mapping[str, Any]) -> bool:
        return bool(self.predicate(obj))

    def __repr__(self) -> str:
        return f"Validate({self.predicate!r})"


def extract_decorator(value: Any) -> str:
    """Return the decorator tag carried by a definition, or ``""``."""
    if isinstance(value, Validator):
        return Decorator.VALIDATE.value
    if isinstance(value, Mapping):
        tag = value.get(DECORATOR_KEY)
        return str(tag) if tag else ""
    return ""


def strip_decorator(value: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of a tagged mapping without its ``decorator`` key."""
    return {k: v for k, v in value.items() if k != DECORATOR_KEY}


def _tagged(tag: Decorator, body: Mapping[str, Any]) -> dict[str, Any]:
    return {**body, DECORATOR_KEY: tag.value}


# --- Domain decorators -------------------------------------------------


def Enum(*values: Any, **domain: Any) -> dict[str, Any]:  # noqa: N802
    """Enumeration domain over an ordered set of literal values."""
    return _tagged(Decorator.ENUM, {**domain, "values": list(values)})


def Flags(*values: Any, enum: str | None = None, **domain: Any) -> dict[str, Any]:  # noqa: N802
    """Bit-set domain, either over its own values or an ``Enum`` domain's."""
    body: dict[str, Any] = {**domain, "values": list(values)}
    if enum is not None:
        body["enum"] = enum
    return _tagged(Decorator.FLAGS, body)


# --- Link decorators ---------------------------------------------------


def Include(category: str, **options: Any) -> dict[str, Any]:  # noqa: N802
    """Embedded category, validated inline under the owning object."""
    return _tagged(Decorator.INCLUDE, {**options, "category": category})


def Many(category: str, **options: Any) -> dict[str, Any]:  # noqa: N802
    """Ordered sequence of links to *category*."""
    return _tagged(Decorator.MANY, {**options, "category": category})


def Catalog(category: str, **options: Any) -> dict[str, Any]:  # noqa: N802
    return _tagged(Decorator.CATALOG, {**options, "category": category})


def Subdivision(category: str, **options: Any) -> dict[str, Any]:  # noqa: N802
    return _tagged(Decorator.SUBDIVISION, {**options, "category": category})


def Master(category: str, **options: Any) -> dict[str, Any]:  # noqa: N802
    return _tagged(Decorator.MASTER, {**options, "category": category})


def Hierarchy(category: str | None = None, **options: Any) -> dict[str, Any]:  # noqa: N802
    """Parent link; defaults to the owning category when *category* is omitted."""
    body = dict(options)
    if category is not None:
        body["category"] = category
    return _tagged(Decorator.HIERARCHY, body)


# --- Category-level decorators -----------------------------------------


def Validate(predicate: Callable[[Mapping[str, Any]], bool]) -> Validator:  # noqa: N802
    """Whole-object predicate, checked only in full (non-patch) validation."""
    return Validator(predicate)


def Action(definition: Mapping[str, Any] | None = None, **body: Any) -> dict[str, Any]:  # noqa: N802
    """Action embedded in a category; promoted to a standalone action."""
    return _tagged(Decorator.ACTION, {**(definition or {}), **body})
