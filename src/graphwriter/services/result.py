"""ServiceResult and ServiceError: the universal service contract.

INVARIANT: All service-layer methods return ServiceResult.
Strict call sites use :meth:`ServiceResult.unwrap`, which raises instead.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceFailure(Exception):
    """Raised by :meth:`ServiceResult.unwrap` when there is no original exception."""

    def __init__(self, op: str, error: ServiceError) -> None:
        super().__init__(f"{op} failed [{error.code}]: {error.message}")
        self.op = op
        self.error = error


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"store_triples"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
        cause: The exception behind ``error``, if any. Never serialized.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
    cause: BaseException | None = Field(default=None, exclude=True, repr=False)

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        *,
        cause: BaseException | None = None,
        **detail: Any,
    ) -> ServiceResult:
        """Build a failed result with a structured error."""
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail),
            cause=cause,
        )

    def unwrap(self) -> dict[str, Any]:
        """Return ``data`` on success; raise on failure.

        The original exception is re-raised unchanged when the failure came
        from one (e.g. a store transport error); otherwise a
        :class:`ServiceFailure` is raised.
        """
        if self.ok:
            return self.data
        if self.cause is not None:
            raise self.cause
        assert self.error is not None
        raise ServiceFailure(self.op, self.error)
