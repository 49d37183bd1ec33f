"""Built-in cross-reference resolvers.

Implements the six resolution hooks. Every hook first collects the
bindings and errors for its whole kind, and writes the bindings into
the registry only when no error was found. A failed step therefore
leaves its kind exactly as registration produced it, with string
references still unbound; validation and construction keep working by
looking those names up in the registry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pluggy

from metaschema.core.definitions import (
    Category,
    CategoryData,
    DomainField,
    FieldDescriptor,
    LinkField,
    Reference,
)
from metaschema.core.errors import MetaschemaError, SchemaValidationError
from metaschema.core.types import REFERENCE_TYPES, ErrorKind, SchemaKind
from metaschema.core.values import MAX_FLAGS

if TYPE_CHECKING:
    from metaschema.core.registry import Metaschema

hookimpl = pluggy.HookimplMarker("metaschema")

logger = logging.getLogger(__name__)


@dataclass
class _Pending:
    """Bindings and errors collected for one resolution step."""

    bindings: list[tuple[Any, str, Any]] = field(default_factory=list)
    references: list[tuple[Category, str, Reference]] = field(default_factory=list)
    errors: list[SchemaValidationError] = field(default_factory=list)

    def bind(self, target: Any, attr: str, value: Any) -> None:
        self.bindings.append((target, attr, value))

    def error(self, kind: ErrorKind, path: str, prop: str | None = None, **detail: Any) -> None:
        self.errors.append(SchemaValidationError(kind=kind, path=path, property=prop, detail=detail))

    def commit(self) -> MetaschemaError | None:
        if self.errors:
            return MetaschemaError.of(self.errors)
        for target, attr, value in self.bindings:
            setattr(target, attr, value)
        for category, kind, reference in self.references:
            category.references[kind].append(reference)
        logger.debug("Applied %d binding(s), %d back-reference(s)", len(self.bindings), len(self.references))
        return None


def _bind_shape(
    registry: Metaschema,
    shape: Mapping[str, FieldDescriptor],
    owner: str,
    path: str,
    pending: _Pending,
) -> None:
    for prop, desc in shape.items():
        if isinstance(desc, DomainField):
            domain = registry.domains.get(desc.domain)
            if domain is None:
                pending.error(ErrorKind.UNRESOLVED_DOMAIN, path, prop, domain=desc.domain)
            else:
                pending.bind(desc, "definition", domain)
        elif isinstance(desc, LinkField):
            target = registry.categories.get(desc.category or "")
            if target is None:
                pending.error(ErrorKind.UNRESOLVED_CATEGORY, path, prop, category=desc.category)
            else:
                pending.bind(desc, "target", target)
                pending.references.append((target, desc.reference_type, Reference(owner, prop)))


def _bind_fields(
    category: Category,
    entities: Iterable[CategoryData],
    kind: str,
    pending: _Pending,
) -> None:
    for entity in entities:
        listed = entity.definition.get("Fields")
        if listed is None:
            continue
        path = f"{category.name}.{entity.name}"
        bound: dict[str, Any] = {}
        for prop in listed:
            desc = category.definition.get(prop)
            if desc is None:
                pending.error(ErrorKind.UNRESOLVED_PROPERTY, path, prop, entity=kind)
            else:
                bound[prop] = desc
        pending.bind(entity, "fields", bound)


def _resolve_category_data(
    registry: Metaschema,
    kind: str,
    attr: str,
    extra: Callable[[Category, CategoryData, _Pending], None] | None = None,
) -> MetaschemaError | None:
    pending = _Pending()
    for category in registry.categories.values():
        entities: dict[str, CategoryData] = getattr(category, attr)
        _bind_fields(category, entities.values(), kind, pending)
        if extra is not None:
            for entity in entities.values():
                extra(category, entity, pending)
    return pending.commit()


def _bind_form_action(category: Category, form: CategoryData, pending: _Pending) -> None:
    name = form.definition.get("Action")
    if name is None:
        return
    action = category.actions.get(name)
    if action is None:
        pending.error(ErrorKind.UNRESOLVED_ACTION, f"{category.name}.{form.name}", action=name)
    else:
        pending.bind(form, "action", action)


class ReferenceResolverPlugin:
    """Resolves string references into live bindings, one kind per hook."""

    @hookimpl
    def resolve_domains(self, registry: Metaschema) -> MetaschemaError | None:
        """Build the Enum/Flags value class of every decorated domain."""
        pending = _Pending()
        for name, domain in registry.domains.items():
            if domain.is_flags and len(domain.values) > MAX_FLAGS:
                pending.error(
                    ErrorKind.INVALID_DEFINITION,
                    name,
                    entity="domain",
                    reason=f"Flags domain has {len(domain.values)} values, limit is {MAX_FLAGS}",
                )
                continue
            if domain.is_enum or domain.is_flags:
                # Reuse a class already bound so earlier instances stay members.
                value_class = domain.value_class
                if value_class is None:
                    value_class = domain.build_value_class()
                pending.bind(domain, "value_class", value_class)
        return pending.commit()

    @hookimpl
    def resolve_categories(self, registry: Metaschema) -> MetaschemaError | None:
        """Bind field domains and link targets; rebuild the references index."""
        pending = _Pending()
        for name, category in registry.categories.items():
            pending.bind(category, "references", {kind: [] for kind in REFERENCE_TYPES})
            _bind_shape(registry, category.definition, name, name, pending)
        return pending.commit()

    @hookimpl
    def resolve_actions(self, registry: Metaschema) -> MetaschemaError | None:
        """Bind ``Args`` shapes and the form each action is submitted through."""
        pending = _Pending()
        for category in registry.categories.values():
            for action in category.actions.values():
                path = f"{category.name}.{action.name}"
                _bind_shape(registry, action.args, path, path, pending)
                form_name = action.definition.get("Form")
                if form_name is not None:
                    form = category.forms.get(form_name)
                    if form is None:
                        pending.error(ErrorKind.UNRESOLVED_FORM, path, form=form_name)
                    else:
                        pending.bind(action, "form", form)
                elif action.name in category.forms:
                    pending.bind(action, "form", category.forms[action.name])
        return pending.commit()

    @hookimpl
    def resolve_views(self, registry: Metaschema) -> MetaschemaError | None:
        return _resolve_category_data(registry, SchemaKind.VIEW, "views")

    @hookimpl
    def resolve_forms(self, registry: Metaschema) -> MetaschemaError | None:
        return _resolve_category_data(registry, SchemaKind.FORM, "forms", _bind_form_action)

    @hookimpl
    def resolve_display_modes(self, registry: Metaschema) -> MetaschemaError | None:
        return _resolve_category_data(registry, SchemaKind.DISPLAY, "display_modes")
