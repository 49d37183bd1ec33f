"""Definition models — domains, field descriptors, categories, behaviors.

Author-supplied mappings are parsed once, at registration, into the
models below. The field descriptor is an explicit tagged union:

- :class:`DomainField`    — scalar/structured value backed by a domain
- :class:`LinkField`      — link to another category (plain, Include,
  Many, or a hierarchical relation role)
- :class:`TransformField` — callable applied during construction only
- :class:`ValidateRule`   — whole-object predicate (full validation only)

String references (``domain`` / ``category`` names) stay as written and
are bound to live objects by the cross-reference resolvers.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from metaschema.core.decorators import Validator, extract_decorator, strip_decorator
from metaschema.core.types import (
    HIERARCHICAL_RELATIONS,
    REFERENCE_TYPES,
    Decorator,
    DomainType,
)
from metaschema.core.values import enum_class, flags_class

_MODEL_CONFIG = ConfigDict(
    arbitrary_types_allowed=True,
    populate_by_name=True,
    extra="ignore",
)

LINK_DECORATORS = frozenset(
    {
        Decorator.INCLUDE,
        Decorator.MANY,
        Decorator.CATALOG,
        Decorator.SUBDIVISION,
        Decorator.HIERARCHY,
        Decorator.MASTER,
    }
)


class DefinitionError(ValueError):
    """A definition whose shape matches none of the known kinds."""


# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------


class Domain(BaseModel):
    """Named value-type descriptor with coercion and validation rules."""

    model_config = _MODEL_CONFIG

    name: str
    type: DomainType | None = None
    min: float | None = None
    max: float | None = None
    length: int | None = None
    subtype: str | None = None
    class_name: str | None = Field(default=None, alias="class")
    decorator: Decorator | None = None
    values: list[Any] = Field(default_factory=list)
    enum: str | None = None
    normalize: Callable[[Any], Any] | None = None
    parse: Callable[[Any], Any] | None = None
    check: Callable[[Any], Any] | None = None
    # Bound by the domains resolver, or built on first use.
    value_class: Any = Field(default=None, exclude=True)

    @field_validator("decorator")
    @classmethod
    def _domain_decorator(cls, value: Decorator | None) -> Decorator | None:
        if value not in (None, Decorator.ENUM, Decorator.FLAGS):
            raise ValueError(f"decorator {value} does not apply to domains")
        return value

    @property
    def is_enum(self) -> bool:
        return self.decorator is Decorator.ENUM

    @property
    def is_flags(self) -> bool:
        return self.decorator is Decorator.FLAGS

    def build_value_class(self) -> Any:
        """Construct the Enum/Flags value class without binding it."""
        if self.is_enum:
            return enum_class(self.name, self.values)
        if self.is_flags:
            return flags_class(self.name, self.values)
        return None

    def get_value_class(self) -> Any:
        """Bound value class, built and cached on first use."""
        if self.value_class is None:
            self.value_class = self.build_value_class()
        return self.value_class


def parse_domain(name: str, raw: Any) -> Domain:
    """Parse an author-supplied domain mapping.

    Raises:
        DefinitionError: If *raw* is not a mapping.
        pydantic.ValidationError: If attributes have the wrong shape.
    """
    if not isinstance(raw, Mapping):
        raise DefinitionError(f"domain {name!r} must be a mapping")
    return Domain.model_validate({**raw, "name": name})


# ---------------------------------------------------------------------------
# Field descriptors
# ---------------------------------------------------------------------------


class FieldBase(BaseModel):
    """Flags shared by every property descriptor."""

    model_config = _MODEL_CONFIG

    name: str
    required: bool = False
    read_only: bool = Field(default=False, alias="readOnly")
    predicate: Callable[[Any], Any] | None = Field(default=None, alias="validate")


class DomainField(FieldBase):
    """Property backed by a named domain."""

    kind: Literal["domain"] = "domain"
    domain: str
    default: Any = None
    definition: Domain | None = Field(default=None, exclude=True)

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set


class LinkField(FieldBase):
    """Property linking to another category."""

    kind: Literal["link"] = "link"
    category: str | None = None
    decorator: Decorator | None = None
    # Bound Category, set by the categories resolver.
    target: Any = Field(default=None, exclude=True)

    @field_validator("decorator")
    @classmethod
    def _link_decorator(cls, value: Decorator | None) -> Decorator | None:
        if value is not None and value not in LINK_DECORATORS:
            raise ValueError(f"decorator {value} does not apply to links")
        return value

    @property
    def reference_type(self) -> str:
        return self.decorator.value if self.decorator is not None else "Link"

    @property
    def relation(self) -> Decorator | None:
        if self.decorator in HIERARCHICAL_RELATIONS:
            return self.decorator
        return None


class TransformField(FieldBase):
    """Property whose constructed value is ``function(raw)``."""

    kind: Literal["transform"] = "transform"
    function: Callable[[Any], Any]


class ValidateRule(BaseModel):
    """Whole-object predicate; not a value-bearing property."""

    model_config = _MODEL_CONFIG

    kind: Literal["validate"] = "validate"
    name: str
    predicate: Callable[[Mapping[str, Any]], Any]


FieldDescriptor = DomainField | LinkField | TransformField | ValidateRule
Shape = dict[str, FieldDescriptor]


def parse_field(name: str, raw: Any) -> FieldDescriptor:
    """Resolve one property definition into its descriptor variant.

    Raises:
        DefinitionError: If *raw* matches no descriptor kind.
        pydantic.ValidationError: If attributes have the wrong shape.
    """
    if isinstance(raw, Validator):
        return ValidateRule(name=name, predicate=raw)
    if callable(raw):
        return TransformField(name=name, function=raw)
    if not isinstance(raw, Mapping):
        raise DefinitionError(f"property {name!r} has unsupported definition {raw!r}")

    decorator = extract_decorator(raw)
    body = {**strip_decorator(raw), "name": name}
    if "category" in raw or decorator in LINK_DECORATORS:
        return LinkField.model_validate({**body, "decorator": decorator or None})
    if "domain" in raw:
        return DomainField.model_validate(body)
    raise DefinitionError(f"property {name!r} names neither a domain nor a category")


def value_properties(shape: Mapping[str, FieldDescriptor]) -> list[str]:
    """Property names that carry values (every kind but ``ValidateRule``)."""
    return [name for name, desc in shape.items() if not isinstance(desc, ValidateRule)]


# ---------------------------------------------------------------------------
# Category-scoped behaviors
# ---------------------------------------------------------------------------


class CategoryData(BaseModel):
    """View, form or display mode owned by a category."""

    model_config = _MODEL_CONFIG

    name: str
    category: str
    definition: dict[str, Any] = Field(default_factory=dict)
    source: Any = None
    # Bound by the resolvers: listed property descriptors, form action.
    fields: dict[str, Any] | None = Field(default=None, exclude=True)
    action: Any = Field(default=None, exclude=True)


class Action(CategoryData):
    """Category-scoped operation with an ``Args`` shape."""

    args: dict[str, Any] = Field(default_factory=dict, exclude=True)
    # Bound by the actions resolver.
    form: Any = Field(default=None, exclude=True)

    @property
    def execute(self) -> Callable[..., Any] | None:
        return self.definition.get("Execute")


@dataclass(frozen=True)
class Reference:
    """Back-reference: *category*.*property* links to the indexed category.

    For action arguments *category* is ``Category.Action``, so an argument
    is never mistaken for a property of the owning category.
    """

    category: str
    property: str


@dataclass
class Category:
    """Named entity shape plus its behavior maps and relation roles."""

    name: str
    definition: Shape = field(default_factory=dict)
    actions: dict[str, Action] = field(default_factory=dict)
    views: dict[str, CategoryData] = field(default_factory=dict)
    forms: dict[str, CategoryData] = field(default_factory=dict)
    display_modes: dict[str, CategoryData] = field(default_factory=dict)
    references: dict[str, list[Reference]] = field(
        default_factory=lambda: {kind: [] for kind in REFERENCE_TYPES}
    )
    catalog: str | None = None
    subdivision: str | None = None
    hierarchy: str | None = None
    master: str | None = None
    source: Any = None
    factory: Any = None

    def relation(self, role: Decorator) -> str | None:
        """Property occupying a hierarchical relation role, if any."""
        return getattr(self, role.value.lower())

    def claim_relation(self, role: Decorator, prop: str) -> bool:
        """Claim *role* for *prop*; False if another property holds it."""
        attr = role.value.lower()
        if getattr(self, attr) is not None:
            return False
        setattr(self, attr, prop)
        return True
