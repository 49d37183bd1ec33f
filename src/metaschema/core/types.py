"""Closed tag sets used across the engine.

Primitive kind tags, decorator tags, hierarchical relation roles,
fragment kinds and the error taxonomy.
"""

from __future__ import annotations

from enum import StrEnum


class DomainType(StrEnum):
    """Primitive kind tags a domain may declare as its ``type``."""

    STRING = "string"
    NUMBER = "number"
    BIGINT = "bigint"
    BOOLEAN = "boolean"
    OBJECT = "object"
    FUNCTION = "function"
    SYMBOL = "symbol"


class Decorator(StrEnum):
    """Decorator tags recognised on domains, fields and categories."""

    ENUM = "Enum"
    FLAGS = "Flags"
    INCLUDE = "Include"
    MANY = "Many"
    CATALOG = "Catalog"
    SUBDIVISION = "Subdivision"
    HIERARCHY = "Hierarchy"
    MASTER = "Master"
    VALIDATE = "Validate"
    ACTION = "Action"


# Each role may be claimed by at most one property per category.
HIERARCHICAL_RELATIONS: tuple[Decorator, ...] = (
    Decorator.CATALOG,
    Decorator.SUBDIVISION,
    Decorator.HIERARCHY,
    Decorator.MASTER,
)

# Keys of Category.references; "Link" covers undecorated single links.
REFERENCE_TYPES: tuple[str, ...] = (
    "Include",
    "Many",
    "Catalog",
    "Subdivision",
    "Hierarchy",
    "Master",
    "Link",
)


class SchemaKind(StrEnum):
    """Fragment kinds accepted by the assembly pipeline."""

    DOMAINS = "domains"
    CATEGORY = "category"
    ACTION = "action"
    VIEW = "view"
    FORM = "form"
    DISPLAY = "display"


# Registration phase order: owners are always registered before dependents.
PHASE_ORDER: dict[str, int] = {
    SchemaKind.DOMAINS: 0,
    SchemaKind.CATEGORY: 1,
    SchemaKind.ACTION: 2,
    SchemaKind.VIEW: 3,
    SchemaKind.FORM: 4,
    SchemaKind.DISPLAY: 5,
}

# Category attribute holding the behavior map for each dependent kind.
CATEGORY_DATA_PROPS: dict[str, str] = {
    SchemaKind.ACTION: "actions",
    SchemaKind.VIEW: "views",
    SchemaKind.FORM: "forms",
    SchemaKind.DISPLAY: "display_modes",
}


class ErrorKind(StrEnum):
    """Error taxonomy for validation, registration and resolution."""

    # validation-time
    INVALID_TYPE = "invalidType"
    DOMAIN_VALIDATION = "domainValidation"
    INVALID_CLASS = "invalidClass"
    ENUM = "enum"
    UNRESOLVED_PROPERTY = "unresolvedProperty"
    IMMUTABLE = "immutable"
    MISSING_PROPERTY = "missingProperty"
    EMPTY_VALUE = "emptyValue"
    VALIDATION = "validation"
    PROP_VALIDATION = "propValidation"
    UNDEFINED_ENTITY = "undefinedEntity"
    # registration-time
    DUPLICATE = "duplicate"
    UNLINKED = "unlinked"
    UNRESOLVED_CATEGORY = "unresolvedCategory"
    UNRESOLVED_DOMAIN = "unresolvedDomain"
    UNRESOLVED_FORM = "unresolvedForm"
    UNRESOLVED_ACTION = "unresolvedAction"
    INVALID_DEFINITION = "invalidDefinition"
    # construction-time
    ARITY = "arity"
    CONSTRUCTION = "construction"
