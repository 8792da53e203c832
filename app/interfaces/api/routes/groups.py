"""Routes for creating groups and managing their members."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.application.operations import OperationResult
from app.application.use_cases.membership import (
    change_member_role as change_member_role_uc,
    create_group as create_group_uc,
    delete_group as delete_group_uc,
    join_group_with_password as join_group_uc,
    leave_group as leave_group_uc,
    remove_member as remove_member_uc,
    transfer_ownership as transfer_ownership_uc,
)
from app.domain.entities import Group
from app.domain.errors import EngineError
from app.infrastructure.database import get_db
from app.infrastructure.repositories import GroupRepository
from app.interfaces.api.dependencies import get_current_user_id
from app.interfaces.api.routes_helpers import (
    operation_fields,
    operation_to_schema,
    to_http_exception,
)
from app.interfaces.api.schemas import (
    GroupCreate,
    GroupJoin,
    GroupOperationRead,
    GroupRead,
    OperationResultRead,
    OwnershipTransfer,
    ProfileRead,
    RoleUpdate,
)

from .profiles import _to_read_model as _profile_to_read_model

router = APIRouter(prefix="/groups", tags=["groups"])


def group_to_read_model(group: Group) -> GroupRead:
    return GroupRead(
        id=group.id,
        name=group.name,
        created_by=group.created_by,
        has_password=bool(group.group_password),
        users=list(group.users),
        pending_requests=sum(1 for request in group.requests if request.is_pending()),
        created_at=group.created_at,
    )


def _with_group(result: OperationResult, db: Session, group_id: str) -> GroupOperationRead:
    group = GroupRepository(db).get(group_id)
    return GroupOperationRead(
        **operation_fields(result),
        group=group_to_read_model(group) if group else None,
    )


@router.post("/", response_model=GroupOperationRead, status_code=status.HTTP_201_CREATED)
def create_group(
    group_in: GroupCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Create a group with the caller as its creator."""

    try:
        result = create_group_uc(
            db, creator_id=user_id, name=group_in.name, password=group_in.password
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _with_group(result, db, result.value.id)


@router.get("/{group_id}", response_model=GroupRead)
def read_group(
    group_id: str,
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_id),
):
    try:
        group = GroupRepository(db).require(group_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return group_to_read_model(group)


@router.post("/{group_id}/join", response_model=GroupOperationRead)
def join_group(
    group_id: str,
    join_in: GroupJoin,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Join a password-protected group directly."""

    try:
        result = join_group_uc(db, group_id=group_id, user_id=user_id, password=join_in.password)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _with_group(result, db, group_id)


@router.post("/{group_id}/leave", response_model=OperationResultRead)
def leave_group(
    group_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        result = leave_group_uc(db, user_id=user_id, group_id=group_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return operation_to_schema(result)


@router.delete("/{group_id}/members/{member_id}", response_model=OperationResultRead)
def remove_member(
    group_id: str,
    member_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Remove a member from the group; admins only."""

    try:
        result = remove_member_uc(
            db, group_id=group_id, user_id=member_id, acting_user_id=user_id
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return operation_to_schema(result)


@router.put("/{group_id}/members/{member_id}/role", response_model=ProfileRead)
def change_member_role(
    group_id: str,
    member_id: str,
    role_in: RoleUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        account = change_member_role_uc(
            db,
            group_id=group_id,
            user_id=member_id,
            role=role_in.role,
            acting_user_id=user_id,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _profile_to_read_model(account)


@router.post("/{group_id}/owner", response_model=GroupOperationRead)
def transfer_ownership(
    group_id: str,
    transfer_in: OwnershipTransfer,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Hand the group over to another member."""

    try:
        result = transfer_ownership_uc(
            db,
            group_id=group_id,
            new_owner_id=transfer_in.new_owner_id,
            acting_user_id=user_id,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _with_group(result, db, group_id)


@router.delete("/{group_id}", response_model=OperationResultRead)
def delete_group(
    group_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Delete the group after detaching every member; creator only."""

    try:
        result = delete_group_uc(db, group_id=group_id, acting_user_id=user_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return operation_to_schema(result)
