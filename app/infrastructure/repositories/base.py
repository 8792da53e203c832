"""Shared read-modify-write helper for versioned records."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

import logging

from sqlalchemy.orm import Session

from app.config import get_settings
from app.domain.errors import ConcurrencyConflictError
from app.infrastructure.store import RecordStore

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")

# Returns the changed fields, or ``None``/``{}`` when nothing needs writing.
Mutator = Callable[[EntityT], "dict[str, Any] | None"]


class VersionedRepository(Generic[EntityT]):
    """Base class for repositories whose records carry a ``version`` column."""

    table: str = ""

    def __init__(self, store: RecordStore | Session) -> None:
        self.store = store if isinstance(store, RecordStore) else RecordStore(store)

    def require(self, record_id: str) -> EntityT:
        return self._to_entity(self.store.get_record(self.table, record_id))

    def update_fields(self, entity: EntityT, **fields: Any) -> EntityT:
        """Write ``fields`` only if ``entity`` is still the stored version."""

        self.store.update_fields(
            self.table,
            entity.id,  # type: ignore[attr-defined]
            self._to_columns(fields),
            expected_version=entity.version,  # type: ignore[attr-defined]
        )
        return self.require(entity.id)  # type: ignore[attr-defined]

    def mutate(
        self,
        record_id: str,
        mutator: Mutator[EntityT],
        *,
        max_attempts: int | None = None,
    ) -> tuple[EntityT, bool]:
        """Apply ``mutator`` to the freshest copy of ``record_id``.

        The mutator is re-run against a re-read record whenever the
        conditional write loses a race. Returns the stored entity and whether
        anything was written.
        """

        attempts = max(1, max_attempts or get_settings().store_max_retries)
        attempt = 0
        while True:
            attempt += 1
            entity = self.require(record_id)
            changes = mutator(entity)
            if not changes:
                return entity, False
            try:
                return self.update_fields(entity, **changes), True
            except ConcurrencyConflictError:
                if attempt == attempts:
                    raise
                logger.info(
                    "Version conflict on %s %s (attempt %s/%s); retrying",
                    self.table,
                    record_id,
                    attempt,
                    attempts,
                )

    # Subclasses translate between entities and stored columns.
    def _to_entity(self, record: dict[str, Any]) -> EntityT:  # pragma: no cover
        raise NotImplementedError

    def _to_columns(self, fields: dict[str, Any]) -> dict[str, Any]:  # pragma: no cover
        raise NotImplementedError


__all__ = ["Mutator", "VersionedRepository"]
