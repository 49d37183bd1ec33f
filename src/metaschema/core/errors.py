"""Structured error payloads.

INVARIANT: Validation, registration and resolution never raise for
expected schema or data problems. They return these objects, either as
plain lists or aggregated in a :class:`MetaschemaError`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field
from pydantic_core import to_jsonable_python

from metaschema.core.types import ErrorKind


class ValidationError(BaseModel):
    """A defect found while validating or constructing a value.

    Attributes:
        kind: Taxonomy tag (``invalidType``, ``enum``, ...).
        path: Dot/bracket qualified locator, e.g. ``Person.Friends[2]``.
        detail: Optional payload; a sub-reason string for
            ``domainValidation`` or ``{expected, actual}`` for type errors.
    """

    model_config = {"frozen": True}

    kind: ErrorKind
    path: str
    detail: Any = None

    def __str__(self) -> str:
        message = f"{self.kind}: {self.path}"
        if self.detail is not None:
            message += f" ({self.detail})"
        return message


class SchemaValidationError(BaseModel):
    """A defect found while registering or cross-linking schema fragments."""

    model_config = {"frozen": True}

    kind: ErrorKind
    path: str
    property: str | None = None
    detail: dict[str, Any] = Field(default_factory=dict)

    def __str__(self) -> str:
        location = f"{self.path}.{self.property}" if self.property else self.path
        message = f"{self.kind}: {location}"
        if self.detail:
            message += f" {self.detail}"
        return message


AnyError = ValidationError | SchemaValidationError


@dataclass(frozen=True)
class MetaschemaError:
    """Aggregate of one or more errors, returned (not raised) to callers."""

    errors: tuple[AnyError, ...]

    @classmethod
    def of(cls, errors: Iterable[AnyError]) -> MetaschemaError:
        return cls(tuple(errors))

    @classmethod
    def single(cls, kind: ErrorKind, path: str, detail: Any = None) -> MetaschemaError:
        return cls((ValidationError(kind=kind, path=path, detail=detail),))

    def __iter__(self) -> Iterator[AnyError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        return "\n".join(str(error) for error in self.errors)

    @property
    def kinds(self) -> list[str]:
        return [str(error.kind) for error in self.errors]

    def to_list(self) -> list[dict[str, Any]]:
        """JSON-safe list of error payloads."""
        return [
            to_jsonable_python(error.model_dump(exclude_none=True), fallback=repr)
            for error in self.errors
        ]
