"""Endpoints for reading and tidying the caller's inbox."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.application.use_cases.inbox import (
    clear_notifications as clear_notifications_uc,
    delete_notification as delete_notification_uc,
    list_notifications as list_notifications_uc,
    mark_all_notifications_read as mark_all_read_uc,
    set_notification_read as set_notification_read_uc,
)
from app.domain.entities import Notification
from app.domain.errors import EngineError
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import get_current_user_id
from app.interfaces.api.routes_helpers import to_http_exception
from app.interfaces.api.schemas import (
    NotificationCountRead,
    NotificationRead,
    NotificationReadUpdate,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = Query(False, description="Only return unread notifications"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> list[NotificationRead]:
    """Return the caller's notifications, newest first."""

    try:
        notifications = list_notifications_uc(db, user_id=user_id, unread_only=unread_only)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return [_notification_to_schema(notification) for notification in notifications]


@router.patch("/{notification_id}", response_model=NotificationRead)
def update_notification(
    notification_id: str,
    update_in: NotificationReadUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationRead:
    try:
        notification = set_notification_read_uc(
            db, user_id=user_id, notification_id=notification_id, read=update_in.read
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _notification_to_schema(notification)


@router.post("/read-all", response_model=NotificationCountRead)
def mark_all_read(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationCountRead:
    try:
        changed = mark_all_read_uc(db, user_id=user_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return NotificationCountRead(count=changed)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> None:
    try:
        delete_notification_uc(db, user_id=user_id, notification_id=notification_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/", response_model=NotificationCountRead)
def clear_notifications(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationCountRead:
    """Empty the caller's inbox."""

    try:
        cleared = clear_notifications_uc(db, user_id=user_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return NotificationCountRead(count=cleared)
