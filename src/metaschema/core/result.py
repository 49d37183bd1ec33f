"""Coercion — explicit success/failure result of domain and instance construction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from metaschema.core.errors import ValidationError
from metaschema.core.types import ErrorKind


@dataclass(frozen=True)
class Coercion:
    """Outcome of coercing a raw value into a domain or category instance.

    ``ok`` is True when no error was recorded. A successful coercion may
    still hold ``None`` when a transform produced it.
    """

    value: Any = None
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> Coercion:
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, path: str, detail: Any = None) -> Coercion:
        return cls(error=ValidationError(kind=kind, path=path, detail=detail))

    def value_or_none(self) -> Any:
        """The constructed value, or None on failure."""
        return self.value if self.error is None else None
