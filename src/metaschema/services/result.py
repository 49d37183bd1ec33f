"""ServiceResult and ServiceError, the contract between services and the CLI.

INVARIANT: All service-layer methods return ServiceResult. Schema and
data problems arrive as ``ok=False`` results carrying one of the error
codes below, never as exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from metaschema.core.errors import MetaschemaError

# Error codes
LOAD_FAILED = "LOAD_FAILED"
SCHEMA_INVALID = "SCHEMA_INVALID"
VALIDATION_FAILED = "VALIDATION_FAILED"
BUILD_FAILED = "BUILD_FAILED"
NOT_FOUND = "NOT_FOUND"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    ``detail["errors"]`` holds the JSON-safe error list when the failure
    came from a :class:`MetaschemaError`.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @property
    def errors(self) -> list[dict[str, Any]]:
        return list(self.detail.get("errors", []))


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"validate"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        errors: MetaschemaError | None = None,
        **detail: Any,
    ) -> ServiceResult:
        """Failed result; *errors* is flattened into ``detail["errors"]``."""
        if errors is not None:
            detail["errors"] = errors.to_list()
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
