"""Metaschema — the schema registry.

Owns domains, categories and their behavior maps. Registration methods
return lists of :class:`SchemaValidationError` and keep going after a
bad fragment; query methods return a :class:`MetaschemaError` or
``None``. Nothing here raises for schema or data problems.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from metaschema.core.decorators import extract_decorator, strip_decorator
from metaschema.core.definitions import (
    Action,
    Category,
    CategoryData,
    DefinitionError,
    Domain,
    FieldDescriptor,
    LinkField,
    parse_domain,
    parse_field,
)
from metaschema.core.domains import coerce_domain
from metaschema.core.errors import MetaschemaError, SchemaValidationError
from metaschema.core.factory import InstanceFactory
from metaschema.core.result import Coercion
from metaschema.core.types import (
    CATEGORY_DATA_PROPS,
    Decorator,
    ErrorKind,
    SchemaKind,
)
from metaschema.core.validator import validate_shape

if TYPE_CHECKING:
    import pluggy

logger = logging.getLogger(__name__)


def _definition_error(path: str, exc: Exception, prop: str | None = None, **detail: Any) -> SchemaValidationError:
    if isinstance(exc, PydanticValidationError):
        reason = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}" for err in exc.errors()
        )
    else:
        reason = str(exc)
    return SchemaValidationError(
        kind=ErrorKind.INVALID_DEFINITION,
        path=path,
        property=prop,
        detail={**detail, "reason": reason},
    )


def _parse_shape(
    shape: Mapping[str, Any], path: str
) -> tuple[dict[str, FieldDescriptor], list[SchemaValidationError]]:
    fields: dict[str, FieldDescriptor] = {}
    errors: list[SchemaValidationError] = []
    for key, raw in shape.items():
        try:
            fields[key] = parse_field(key, raw)
        except (DefinitionError, PydanticValidationError) as exc:
            errors.append(_definition_error(path, exc, key))
    return fields, errors


class Metaschema:
    """In-memory registry of domains, categories and category behaviors."""

    def __init__(self) -> None:
        self.domains: dict[str, Domain] = {}
        self.categories: dict[str, Category] = {}
        self.sources: list[Any] = []

    def __repr__(self) -> str:
        return f"Metaschema(domains={len(self.domains)}, categories={len(self.categories)})"

    # -- registration ------------------------------------------------------

    def add_schema(self, kind: str, schema: Mapping[str, Any]) -> list[SchemaValidationError]:
        """Register one ``(kind, fragment)`` pair."""
        if not isinstance(schema, Mapping):
            return [
                SchemaValidationError(
                    kind=ErrorKind.INVALID_DEFINITION,
                    path=str(kind),
                    detail={"kind": kind, "reason": "fragment must be a mapping"},
                )
            ]
        if schema.get("source") is not None:
            self.sources.append(schema["source"])
        if kind == SchemaKind.DOMAINS:
            return self.add_domains(schema)
        if kind == SchemaKind.CATEGORY:
            return self.add_category(schema)
        if kind in CATEGORY_DATA_PROPS:
            return self.add_category_data(kind, schema)
        return [
            SchemaValidationError(
                kind=ErrorKind.INVALID_DEFINITION,
                path=str(schema.get("name", kind)),
                detail={"kind": kind},
            )
        ]

    def add_domains(self, schema: Mapping[str, Any]) -> list[SchemaValidationError]:
        """Register every domain of a ``{"definition": {name: domain}}`` fragment.

        A ``Flags`` domain naming an ``enum`` inherits that domain's values,
        which must already be registered.
        """
        errors: list[SchemaValidationError] = []
        for name, raw in (schema.get("definition") or {}).items():
            if name in self.domains:
                errors.append(
                    SchemaValidationError(kind=ErrorKind.DUPLICATE, path=name, detail={"entity": "domain"})
                )
                continue
            try:
                domain = parse_domain(name, raw)
            except (DefinitionError, PydanticValidationError) as exc:
                errors.append(_definition_error(name, exc, entity="domain"))
                continue

            if domain.is_flags and domain.enum:
                source = self.domains.get(domain.enum)
                if source is None:
                    errors.append(
                        SchemaValidationError(
                            kind=ErrorKind.UNRESOLVED_DOMAIN,
                            path=name,
                            detail={"domain": domain.enum},
                        )
                    )
                else:
                    domain.values = list(source.values)
            self.domains[name] = domain

        logger.debug("Registered domains: %d total", len(self.domains))
        return errors

    def add_category(self, schema: Mapping[str, Any]) -> list[SchemaValidationError]:
        """Register a ``{"name", "definition"}`` category fragment.

        ``Action``-decorated properties are split off into actions that are
        registered right after the category itself.
        """
        name = schema.get("name")
        if not name:
            return [
                SchemaValidationError(
                    kind=ErrorKind.INVALID_DEFINITION,
                    path=str(SchemaKind.CATEGORY),
                    detail={"entity": "category", "reason": "missing name"},
                )
            ]
        if name in self.categories:
            return [SchemaValidationError(kind=ErrorKind.DUPLICATE, path=name, detail={"entity": "category"})]

        raw_shape: Mapping[str, Any] = schema.get("definition") or {}
        extracted: list[dict[str, Any]] = []
        shape: dict[str, Any] = {}
        for key, raw in raw_shape.items():
            if extract_decorator(raw) == Decorator.ACTION:
                extracted.append({"name": key, "category": name, "definition": strip_decorator(raw)})
            else:
                shape[key] = raw

        fields, errors = _parse_shape(shape, name)
        category = Category(name=name, definition=fields, source=schema.get("source"))

        for key, desc in fields.items():
            if not isinstance(desc, LinkField):
                continue
            if desc.decorator is Decorator.HIERARCHY and desc.category is None:
                desc.category = name
            role = desc.relation
            if role is not None and not category.claim_relation(role, key):
                errors.append(
                    SchemaValidationError(kind=ErrorKind.DUPLICATE, path=name, detail={"entity": role.value})
                )

        category.factory = InstanceFactory(self, category)
        self.categories[name] = category
        logger.debug("Registered category %s (%d fields)", name, len(fields))

        for action in extracted:
            errors.extend(self.add_category_data(SchemaKind.ACTION, action))
        return errors

    def add_category_data(self, kind: str, schema: Mapping[str, Any]) -> list[SchemaValidationError]:
        """Register an action, view, form or display mode under its category."""
        name = schema.get("name")
        owner = schema.get("category")
        if not owner:
            return [SchemaValidationError(kind=ErrorKind.UNLINKED, path=str(name), detail={"entity": kind})]
        category = self.categories.get(owner)
        if category is None:
            return [
                SchemaValidationError(
                    kind=ErrorKind.UNRESOLVED_CATEGORY,
                    path=owner,
                    property=name,
                    detail={"category": owner},
                )
            ]
        behaviors: dict[str, Any] = getattr(category, CATEGORY_DATA_PROPS[kind])
        if name in behaviors:
            return [
                SchemaValidationError(
                    kind=ErrorKind.DUPLICATE,
                    path=f"{owner}.{name}",
                    detail={"entity": kind},
                )
            ]

        definition = dict(schema.get("definition") or {})
        fields = {"name": name, "category": owner, "definition": definition, "source": schema.get("source")}
        try:
            if kind == SchemaKind.ACTION:
                args, errors = _parse_shape(definition.get("Args") or {}, f"{owner}.{name}")
                entity: CategoryData = Action.model_validate({**fields, "args": args})
            else:
                errors = []
                entity = CategoryData.model_validate(fields)
        except PydanticValidationError as exc:
            return [_definition_error(f"{owner}.{name}", exc, entity=kind)]

        behaviors[name] = entity
        return errors

    # -- cross-reference resolution ---------------------------------------

    def process(self, plugins: pluggy.PluginManager | None = None) -> MetaschemaError | None:
        """Run the six resolution steps; stop at the first failing one."""
        from metaschema.core.assembly import resolve_references

        return resolve_references(self, plugins)

    # -- queries -----------------------------------------------------------

    def get_category(self, name: str) -> Category | None:
        return self.categories.get(name)

    def actions(self, category: str) -> dict[str, Action]:
        found = self.categories.get(category)
        return dict(found.actions) if found is not None else {}

    def validate_category(
        self,
        name: str,
        instance: Any,
        patch: bool = False,
        path: str = "",
    ) -> MetaschemaError | None:
        """Validate *instance* as a *name* category value (or patch)."""
        category = self.categories.get(name)
        if category is None:
            return MetaschemaError.single(ErrorKind.UNDEFINED_ENTITY, name, "category")
        errors = validate_shape(self, category.definition, instance, patch, f"{path}{name}.")
        return MetaschemaError.of(errors) if errors else None

    def validate_action(self, category: str, action: str, args: Any) -> MetaschemaError | None:
        """Validate *args* against the ``Args`` shape of an action."""
        owner = self.categories.get(category)
        if owner is None:
            return MetaschemaError.single(ErrorKind.UNDEFINED_ENTITY, category, "category")
        found = owner.actions.get(action)
        if found is None:
            return MetaschemaError.single(ErrorKind.UNDEFINED_ENTITY, action, "action")
        errors = validate_shape(self, found.args, args, False, f"{category}.{action}.")
        return MetaschemaError.of(errors) if errors else None

    def validate_fields(self, category: str, instance: Mapping[str, Any]) -> MetaschemaError | None:
        """Validate each value of *instance* as a *category* value under its key."""
        errors = []
        for key, value in instance.items():
            error = self.validate_category(category, value, False, f"{key}.")
            if error is not None:
                errors.extend(error.errors)
        return MetaschemaError.of(errors) if errors else None

    # -- construction ------------------------------------------------------

    def coerce_domain(self, name: str, value: Any) -> Coercion:
        domain = self.domains.get(name)
        if domain is None:
            return Coercion.failure(ErrorKind.UNDEFINED_ENTITY, name, "domain")
        return coerce_domain(domain, value, name)

    def create_domain_instance(self, name: str, value: Any) -> Any:
        """Domain instance built from *value*, or None."""
        return self.coerce_domain(name, value).value_or_none()

    def build_instance(self, name: str, *args: Any) -> Coercion:
        category = self.categories.get(name)
        if category is None or category.factory is None:
            return Coercion.failure(ErrorKind.UNDEFINED_ENTITY, name, "category")
        return category.factory.build(*args)

    def create_instance(self, name: str, *args: Any) -> Any:
        """Category instance built from positional or keyed input, or None."""
        return self.build_instance(name, *args).value_or_none()
