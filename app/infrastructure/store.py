"""Record store adapter over the relational database.

Records are plain dictionaries keyed by column name. Embedded lists are
JSON columns, so the store offers no append or remove-by-id primitive: callers
always write the whole replacement list. Every row carries a ``version``
column; passing ``expected_version`` to :meth:`RecordStore.update_fields`
turns the write into a compare-and-swap.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import logging

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import ConcurrencyConflictError, NotFoundError, StoreError
from app.infrastructure.models import GroupModel, ProfileModel

logger = logging.getLogger(__name__)

TABLE_PROFILES = "profiles"
TABLE_GROUPS = "groups"

_TABLES: dict[str, Table] = {
    TABLE_PROFILES: ProfileModel.__table__,
    TABLE_GROUPS: GroupModel.__table__,
}

Procedure = Callable[..., Any]
_PROCEDURES: dict[str, Procedure] = {}


def register_procedure(name: str) -> Callable[[Procedure], Procedure]:
    """Register ``func`` as an atomic procedure callable via ``invoke_atomic``."""

    def decorator(func: Procedure) -> Procedure:
        _PROCEDURES[name] = func
        return func

    return decorator


class RecordStore:
    """Get, query and update records through a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._atomic_depth = 0

    # ------------------------------------------------------------------
    # Reads
    def get_record(self, table: str, record_id: str) -> dict[str, Any]:
        """Return the record ``record_id`` or raise :class:`NotFoundError`."""

        target = self._table(table)
        row = self._execute(
            select(target).where(target.c.id == record_id)
        ).mappings().first()
        if row is None:
            raise NotFoundError(table, record_id)
        return dict(row)

    def query_records(
        self, table: str, filters: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Return records matching every filter.

        A list, tuple or set value means "column is one of"; any other value
        is compared for equality (``None`` matches SQL ``NULL``).
        """

        target = self._table(table)
        statement = select(target)
        for column_name, value in (filters or {}).items():
            column = target.c[column_name]
            if isinstance(value, (list, tuple, set, frozenset)):
                if not value:
                    return []
                statement = statement.where(column.in_(list(value)))
            elif value is None:
                statement = statement.where(column.is_(None))
            else:
                statement = statement.where(column == value)
        rows = self._execute(statement.order_by(target.c.id)).mappings().all()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Writes
    def insert_record(self, table: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        target = self._table(table)
        values = {"version": 1, **fields}
        self._execute(insert(target).values(**values))
        self._commit()
        return self.get_record(table, values["id"])

    def update_fields(
        self,
        table: str,
        record_id: str,
        fields: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> int:
        """Partially update ``record_id`` and return its new version.

        With ``expected_version`` the write only applies when the stored
        version still matches, otherwise :class:`ConcurrencyConflictError` is
        raised and nothing is written.
        """

        target = self._table(table)
        statement = update(target).where(target.c.id == record_id)
        if expected_version is not None:
            statement = statement.where(target.c.version == expected_version)
        statement = statement.values(**fields, version=target.c.version + 1)

        result = self._execute(statement)
        if result.rowcount == 0:
            self._rollback_unless_atomic()
            if expected_version is not None and self._exists(target, record_id):
                raise ConcurrencyConflictError(table, record_id, expected_version)
            raise NotFoundError(table, record_id)
        self._commit()
        return self._current_version(target, record_id)

    def delete_record(self, table: str, record_id: str) -> None:
        target = self._table(table)
        result = self._execute(delete(target).where(target.c.id == record_id))
        if result.rowcount == 0:
            self._rollback_unless_atomic()
            raise NotFoundError(table, record_id)
        self._commit()

    # ------------------------------------------------------------------
    # Atomic procedures
    @contextmanager
    def atomic(self) -> Iterator["RecordStore"]:
        """Group every write inside the block into a single transaction."""

        self._atomic_depth += 1
        try:
            yield self
        except Exception:
            self._atomic_depth -= 1
            if self._atomic_depth == 0:
                self.session.rollback()
            raise
        self._atomic_depth -= 1
        self._commit()

    def invoke_atomic(self, procedure_name: str, params: Mapping[str, Any]) -> Any:
        """Run the registered procedure ``procedure_name`` in one transaction."""

        from app.infrastructure import procedures  # noqa: F401  # registers procedures

        procedure = _PROCEDURES.get(procedure_name)
        if procedure is None:
            raise NotFoundError("procedure", procedure_name)
        logger.debug("Invoking atomic procedure %s", procedure_name)
        with self.atomic():
            return procedure(self, **params)

    # ------------------------------------------------------------------
    # Internal helpers
    @staticmethod
    def _table(name: str) -> Table:
        try:
            return _TABLES[name]
        except KeyError as exc:
            raise StoreError(f"Unknown table '{name}'") from exc

    def _execute(self, statement):
        try:
            return self.session.execute(statement)
        except SQLAlchemyError as exc:
            self._rollback_unless_atomic()
            raise StoreError(str(exc)) from exc

    def _exists(self, target: Table, record_id: str) -> bool:
        row = self._execute(select(target.c.id).where(target.c.id == record_id)).first()
        return row is not None

    def _current_version(self, target: Table, record_id: str) -> int:
        return self._execute(
            select(target.c.version).where(target.c.id == record_id)
        ).scalar_one()

    def _commit(self) -> None:
        if self._atomic_depth:
            return
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(str(exc)) from exc

    def _rollback_unless_atomic(self) -> None:
        if not self._atomic_depth:
            self.session.rollback()


__all__ = [
    "RecordStore",
    "TABLE_GROUPS",
    "TABLE_PROFILES",
    "register_procedure",
]
