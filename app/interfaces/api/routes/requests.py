"""Routes implementing the join request workflow."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.application.use_cases.membership import (
    accept_join_request as accept_join_request_uc,
    cancel_join_request as cancel_join_request_uc,
    create_join_request as create_join_request_uc,
    decline_join_request as decline_join_request_uc,
    list_group_requests as list_group_requests_uc,
)
from app.application.use_cases.membership.steps import ensure_group_admin
from app.domain.errors import EngineError
from app.infrastructure.database import get_db
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.interfaces.api.dependencies import get_current_user_id, get_publisher
from app.interfaces.api.routes_helpers import (
    operation_fields,
    operation_to_schema,
    to_http_exception,
)
from app.interfaces.api.schemas import (
    JoinRequestCreate,
    JoinRequestOperationRead,
    MembershipRequestRead,
    NotificationCountRead,
    OperationResultRead,
)

router = APIRouter(prefix="/groups/{group_id}/requests", tags=["join requests"])


@router.post("/", response_model=JoinRequestOperationRead, status_code=status.HTTP_201_CREATED)
def create_join_request(
    group_id: str,
    request_in: JoinRequestCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    """Ask to join the group; its creator is notified."""

    try:
        result = create_join_request_uc(
            db,
            group_id=group_id,
            user_id=user_id,
            password=request_in.password,
            publisher=publisher,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return JoinRequestOperationRead(
        **operation_fields(result),
        request=MembershipRequestRead.model_validate(result.value),
    )


@router.get("/", response_model=list[MembershipRequestRead])
def list_requests(
    group_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Return the pending requests of the group; admins only."""

    try:
        profiles = ProfileRepository(db)
        group = GroupRepository(profiles.store).require(group_id)
        ensure_group_admin(group, profiles.require(user_id))
        requests = list_group_requests_uc(db, group_id=group_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return [MembershipRequestRead.model_validate(request) for request in requests]


@router.post("/{requester_id}/accept", response_model=OperationResultRead)
def accept_join_request(
    group_id: str,
    requester_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    """Admit the requester. Repeating the call completes a partial acceptance."""

    try:
        result = accept_join_request_uc(
            db,
            group_id=group_id,
            user_id=requester_id,
            acting_user_id=user_id,
            publisher=publisher,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return operation_to_schema(result)


@router.post("/{requester_id}/decline", response_model=OperationResultRead)
def decline_join_request(
    group_id: str,
    requester_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    try:
        result = decline_join_request_uc(
            db,
            group_id=group_id,
            user_id=requester_id,
            acting_user_id=user_id,
            publisher=publisher,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return operation_to_schema(result)


@router.delete("/me", response_model=NotificationCountRead)
def cancel_join_request(
    group_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Withdraw the caller's own request; returns the removed notification count."""

    try:
        outcome = cancel_join_request_uc(db, group_id=group_id, user_id=user_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return NotificationCountRead(count=outcome["notifications_removed"])
