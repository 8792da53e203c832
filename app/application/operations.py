"""Ordered, idempotent sub-steps for operations spanning several records.

The store has no multi-record transactions, so operations such as accepting a
join request are a sequence of independent single-record writes. Each step
checks whether its effect is already present before writing, which makes a
retry of the whole operation resume where a previous attempt stopped.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import logging

from app.domain.errors import EngineError, PartialFailureError

logger = logging.getLogger(__name__)

# A step returns True when it wrote something, False when already applied.
Step = tuple[str, Callable[[], bool]]


@dataclass(frozen=True)
class StepFailure:
    step: str
    error: str


@dataclass
class OperationResult:
    """Outcome of a multi-write operation."""

    operation: str
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[StepFailure] = field(default_factory=list)
    # Primary record produced by the operation, when there is one.
    value: Any = None

    @property
    def ok(self) -> bool:
        return not self.failures

    def fail(self, step: str, error: str) -> None:
        logger.warning("%s: step '%s' not attempted: %s", self.operation, step, error)
        self.failures.append(StepFailure(step=step, error=error))

    def raise_for_failures(self) -> "OperationResult":
        """Raise :class:`PartialFailureError` if any step failed."""

        if self.failures:
            raise PartialFailureError(self)
        return self


def run_steps(
    operation: str,
    steps: Sequence[Step],
    *,
    into: OperationResult | None = None,
) -> OperationResult:
    """Attempt every step in order, collecting failures instead of aborting.

    Passing ``into`` continues an earlier result, so an operation can run a
    second phase only when the first one completed.
    """

    result = into if into is not None else OperationResult(operation=operation)
    failures_before = len(result.failures)
    for name, step in steps:
        try:
            changed = step()
        except EngineError as exc:
            logger.warning("%s: step '%s' failed: %s", operation, name, exc)
            result.failures.append(StepFailure(step=name, error=str(exc)))
            continue
        (result.applied if changed else result.skipped).append(name)

    if len(result.failures) > failures_before:
        logger.warning(
            "%s finished with %s failed step(s); re-run to reconcile",
            operation,
            len(result.failures) - failures_before,
        )
    return result


__all__ = ["OperationResult", "Step", "StepFailure", "run_steps"]
