"""Group and membership schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .operation import OperationResultRead


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    password: str | None = Field(default=None, min_length=4)


class GroupJoin(BaseModel):
    password: str = Field(..., min_length=1)


class JoinRequestCreate(BaseModel):
    password: str | None = None


class RoleUpdate(BaseModel):
    role: str


class OwnershipTransfer(BaseModel):
    new_owner_id: str


class GroupRead(BaseModel):
    id: str
    name: str
    created_by: str | None
    has_password: bool
    users: list[str]
    pending_requests: int
    created_at: datetime | None


class GroupOperationRead(OperationResultRead):
    group: GroupRead | None = None


class MembershipRequestRead(BaseModel):
    id: str
    user_id: str
    status: str
    requested_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class JoinRequestOperationRead(OperationResultRead):
    request: MembershipRequestRead | None = None


class PendingRequestRead(BaseModel):
    group_id: str
    group_name: str
    request: MembershipRequestRead


__all__ = [
    "GroupCreate",
    "GroupJoin",
    "GroupOperationRead",
    "GroupRead",
    "JoinRequestCreate",
    "JoinRequestOperationRead",
    "MembershipRequestRead",
    "OwnershipTransfer",
    "PendingRequestRead",
    "RoleUpdate",
]
