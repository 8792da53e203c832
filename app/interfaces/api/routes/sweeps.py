"""Endpoints that trigger background maintenance sweeps.

Only scheduled jobs holding the service key may call them.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.application.use_cases.membership import reconcile_memberships as reconcile_uc
from app.application.use_cases.reminders import run_reminder_sweep as run_reminder_sweep_uc
from app.domain.errors import EngineError
from app.infrastructure.database import get_db
from app.infrastructure.notifications import NotificationPublisher
from app.interfaces.api.dependencies import get_publisher, require_service_key
from app.interfaces.api.routes_helpers import operation_to_schema, to_http_exception
from app.interfaces.api.schemas import OperationResultRead, ReminderSweepRequest

router = APIRouter(prefix="/sweeps", tags=["sweeps"])


@router.post("/reminders", response_model=OperationResultRead)
def run_reminder_sweep(
    sweep_in: ReminderSweepRequest,
    db: Session = Depends(get_db),
    _: None = Depends(require_service_key),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    """Remind attendees of today's events; safe to trigger repeatedly."""

    try:
        result = run_reminder_sweep_uc(db, now=sweep_in.now, publisher=publisher)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return operation_to_schema(result)


@router.post("/memberships", response_model=OperationResultRead)
def reconcile_memberships(
    db: Session = Depends(get_db),
    _: None = Depends(require_service_key),
):
    """Repair rosters that drifted from their members' group pointers."""

    try:
        result = reconcile_uc(db)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return operation_to_schema(result)
