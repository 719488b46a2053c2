"""Ledger exceptions and the JSON error body they render to."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standardized error response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(None, description="Additional context")


class AppError(Exception):
    """Base exception for all ledger errors.

    Subclasses set ``code`` and ``status_code`` as class attributes; a
    caller may still override the code per instance.
    """

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code

    def to_response(self) -> ErrorDetail:
        return ErrorDetail(code=self.code, message=self.message, details=self.details or None)


class ValidationError(AppError):
    """Operator input rejected, e.g. a missing or negative cash count."""

    code = "VALIDATION_ERROR"
    status_code = 422


class NotFoundError(AppError):
    """A shift, preview, sale or expense that is not there."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            f"{resource} with ID {resource_id} not found",
            details={"resource": resource, "resource_id": resource_id},
        )


class InvalidStateError(AppError):
    """The ledger is not in a state that allows the operation.

    Codes in use: INVALID_STATE, STALE_PREVIEW, UNDO_EXPIRED.
    """

    code = "INVALID_STATE"
    status_code = 400

    def __init__(self, message: str, code: str = "INVALID_STATE", details: Optional[dict] = None):
        super().__init__(message, details=details, code=code)


class UnauthorizedError(AppError):
    """No operator identity on the request."""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class TransactionError(AppError):
    """Raised when an atomic ledger write fails and was rolled back.

    Nothing from the failed operation is applied. The operator has to
    re-run the whole close/reopen; no sub-step is retried.
    """

    code = "TRANSACTION_FAILED"
    status_code = 503

    def __init__(self, operation: str, message: str, details: Optional[dict] = None):
        super().__init__(message, details={"operation": operation, **(details or {})})
