"""Error taxonomy shared by the membership and notification use cases."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import only used for annotations
    from app.application.operations import OperationResult


class EngineError(Exception):
    """Base class for every error raised by the engine."""


class NotFoundError(EngineError):
    """A referenced group, user, request or content item does not exist."""

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class DuplicateRequestError(EngineError):
    """A pending membership request already exists for the user and group."""


class PreconditionFailedError(EngineError):
    """The operation is not allowed in the current state."""


class PermissionDeniedError(EngineError):
    """The acting user is not allowed to perform the operation."""


class StoreError(EngineError):
    """The record store rejected or failed a read or write."""


class ConcurrencyConflictError(StoreError):
    """A conditional write lost against a concurrent writer."""

    def __init__(self, table: str, record_id: str, expected_version: int | None) -> None:
        super().__init__(
            f"{table} {record_id} changed since version {expected_version}"
        )
        self.table = table
        self.record_id = record_id
        self.expected_version = expected_version


class PartialFailureError(EngineError):
    """Some, but not all, sub-operations of a multi-write operation failed."""

    def __init__(self, result: "OperationResult") -> None:
        failed = ", ".join(failure.step for failure in result.failures)
        super().__init__(f"{result.operation} partially failed: {failed}")
        self.result = result


class DeliveryFailureError(EngineError):
    """A push delivery attempt failed. Always handled by the delivery adapter."""


__all__ = [
    "ConcurrencyConflictError",
    "DeliveryFailureError",
    "DuplicateRequestError",
    "EngineError",
    "NotFoundError",
    "PartialFailureError",
    "PermissionDeniedError",
    "PreconditionFailedError",
    "StoreError",
]
