"""Routes for the caller's own profile and account lifecycle."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.application.use_cases.content import FanOutResult
from app.application.use_cases.membership import list_user_requests as list_user_requests_uc
from app.application.use_cases.profiles import (
    check_in as check_in_uc,
    check_out as check_out_uc,
    create_profile as create_profile_uc,
    delete_account as delete_account_uc,
    get_profile as get_profile_uc,
    register_push_token as register_push_token_uc,
    update_notification_preferences as update_preferences_uc,
    update_profile as update_profile_uc,
)
from app.domain.entities import UserAccount
from app.domain.errors import EngineError
from app.infrastructure.database import get_db
from app.infrastructure.notifications import NotificationPublisher
from app.interfaces.api.dependencies import get_current_user_id, get_publisher
from app.interfaces.api.routes_helpers import (
    operation_fields,
    operation_to_schema,
    to_http_exception,
)
from app.interfaces.api.schemas import (
    AccountDeletion,
    MembershipRequestRead,
    NotificationPreferencesUpdate,
    OperationResultRead,
    PendingRequestRead,
    PresenceRead,
    ProfileCreate,
    ProfileRead,
    ProfileUpdate,
    PushTokenUpdate,
)

router = APIRouter(prefix="/profiles", tags=["profiles"])
logger = logging.getLogger(__name__)


def _to_read_model(account: UserAccount) -> ProfileRead:
    return ProfileRead(
        id=account.id,
        name=account.name,
        email=account.email,
        avatar_url=account.avatar_url,
        group_id=account.group_id,
        requested_group_id=account.requested_group_id,
        is_group_creator=account.is_group_creator,
        role=account.role,
        attended_events=list(account.attended_events),
        receive_event_notifications=account.receive_event_notifications,
        receive_news_notifications=account.receive_news_notifications,
        receive_check_notifications=account.receive_check_notifications,
        checked_in=account.checked_in,
        check_in_times=list(account.check_in_times),
        check_out_times=list(account.check_out_times),
        has_push_token=bool(account.push_token),
        created_at=account.created_at,
    )


def _presence_to_schema(result: FanOutResult, *, checked_in: bool) -> PresenceRead:
    return PresenceRead(
        **operation_fields(result),
        checked_in=checked_in,
        recorded_at=result.value,
        opted_out=list(result.opted_out),
    )


@router.post("/", response_model=ProfileRead, status_code=status.HTTP_201_CREATED)
def register_profile(
    profile_in: ProfileCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Create the profile of the authenticated user."""

    try:
        account = create_profile_uc(
            db,
            user_id=user_id,
            name=profile_in.name,
            email=str(profile_in.email),
            avatar_url=profile_in.avatar_url,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _to_read_model(account)


@router.get("/me", response_model=ProfileRead)
def read_current_profile(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        account = get_profile_uc(db, user_id=user_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _to_read_model(account)


@router.patch("/me", response_model=ProfileRead)
def update_current_profile(
    profile_in: ProfileUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        account = update_profile_uc(
            db, user_id=user_id, name=profile_in.name, avatar_url=profile_in.avatar_url
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _to_read_model(account)


@router.put("/me/preferences", response_model=ProfileRead)
def update_preferences(
    preferences: NotificationPreferencesUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Change which content kinds the caller is notified about."""

    try:
        account = update_preferences_uc(
            db,
            user_id=user_id,
            event=preferences.event,
            news=preferences.news,
            check=preferences.check,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _to_read_model(account)


@router.put("/me/push-token", response_model=ProfileRead)
def update_push_token(
    token_in: PushTokenUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        account = register_push_token_uc(db, user_id=user_id, push_token=token_in.push_token)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _to_read_model(account)


@router.post("/me/check-in", response_model=PresenceRead)
def check_in(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    """Check the caller in; members who want check notifications are told."""

    try:
        result = check_in_uc(db, user_id=user_id, publisher=publisher)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _presence_to_schema(result, checked_in=True)


@router.post("/me/check-out", response_model=PresenceRead)
def check_out(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    try:
        result = check_out_uc(db, user_id=user_id, publisher=publisher)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _presence_to_schema(result, checked_in=False)


@router.get("/me/requests", response_model=list[PendingRequestRead])
def list_my_requests(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Return the join requests the caller is still waiting on."""

    try:
        pending = list_user_requests_uc(db, user_id=user_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return [
        PendingRequestRead(
            group_id=item.group_id,
            group_name=item.group_name,
            request=MembershipRequestRead.model_validate(item.request),
        )
        for item in pending
    ]


@router.delete("/me", response_model=OperationResultRead)
def delete_current_account(
    deletion: AccountDeletion | None = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Delete the caller's profile, detaching or resolving their groups first."""

    deletion = deletion or AccountDeletion()
    try:
        result = delete_account_uc(
            db,
            user_id=user_id,
            group_resolution=deletion.group_resolution,
            new_owner_id=deletion.new_owner_id,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    if not result.ok:
        logger.warning("Account deletion for %s incomplete: %s", user_id, result.failures)
    return operation_to_schema(result)
