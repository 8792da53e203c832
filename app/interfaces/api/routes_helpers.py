"""Helper utilities shared across API route handlers."""

from fastapi import HTTPException, status

from app.application.operations import OperationResult
from app.domain.errors import (
    ConcurrencyConflictError,
    DuplicateRequestError,
    EngineError,
    NotFoundError,
    PartialFailureError,
    PermissionDeniedError,
    PreconditionFailedError,
    StoreError,
)
from app.interfaces.api.schemas import OperationResultRead, StepFailureRead

_STATUS_BY_ERROR: tuple[tuple[type[EngineError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateRequestError, status.HTTP_409_CONFLICT),
    (ConcurrencyConflictError, status.HTTP_409_CONFLICT),
    (PreconditionFailedError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (StoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def to_http_exception(exc: EngineError) -> HTTPException:
    """Translate an engine error into the matching HTTP error."""

    if isinstance(exc, PartialFailureError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=operation_to_schema(exc.result).model_dump(),
        )
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def operation_fields(result: OperationResult) -> dict:
    """Return the common fields of :class:`OperationResultRead` for ``result``."""

    return {
        "operation": result.operation,
        "ok": result.ok,
        "applied": list(result.applied),
        "skipped": list(result.skipped),
        "failures": [
            StepFailureRead(step=failure.step, error=failure.error)
            for failure in result.failures
        ],
    }


def operation_to_schema(result: OperationResult) -> OperationResultRead:
    return OperationResultRead(**operation_fields(result))
