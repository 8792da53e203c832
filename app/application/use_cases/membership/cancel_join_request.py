"""Use case for withdrawing one's own join request."""

from __future__ import annotations

from typing import Any

import logging

from sqlalchemy.orm import Session

from app.infrastructure.store import RecordStore

logger = logging.getLogger(__name__)


def cancel_join_request(session: Session, *, group_id: str, user_id: str) -> dict[str, Any]:
    """Cancel the pending request of ``user_id`` as one atomic unit.

    Either the request, the requester's pending pointer and the admins'
    ``join_request`` notifications all disappear, or nothing changes.
    """

    store = RecordStore(session)
    return store.invoke_atomic(
        "cancel_join_request", {"group_id": group_id, "user_id": user_id}
    )
