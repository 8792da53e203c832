"""Schemas reporting the outcome of multi-write operations."""

from __future__ import annotations

from pydantic import BaseModel, Field


class StepFailureRead(BaseModel):
    step: str
    error: str


class OperationResultRead(BaseModel):
    """Steps applied, skipped as already done, and failed.

    A non-empty ``failures`` list means the operation is incomplete and
    repeating the same request finishes it.
    """

    operation: str
    ok: bool
    applied: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failures: list[StepFailureRead] = Field(default_factory=list)


__all__ = ["OperationResultRead", "StepFailureRead"]
