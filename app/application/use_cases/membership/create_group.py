"""Use case for creating a group owned by its first member."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, run_steps
from app.domain.entities import Group
from app.domain.errors import PreconditionFailedError
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.infrastructure.security import hash_group_password

from .steps import attach_member_steps


def create_group(
    session: Session,
    *,
    creator_id: str,
    name: str,
    password: str | None = None,
) -> OperationResult:
    """Create ``name`` and make ``creator_id`` its creator and first admin."""

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    creator = profiles.require(creator_id)
    if creator.group_id is not None:
        raise PreconditionFailedError(f"User {creator_id} already belongs to a group")
    if not name.strip():
        raise PreconditionFailedError("Group name cannot be empty")

    group = groups.create(
        Group(
            id=uuid4().hex,
            name=name.strip(),
            created_by=creator_id,
            group_password=hash_group_password(password) if password else None,
        )
    )
    result = run_steps(
        "create_group",
        attach_member_steps(
            profiles, groups, group_id=group.id, user_id=creator_id, promote_to_creator=True
        ),
    )
    result.applied.insert(0, "insert_group")
    result.value = groups.require(group.id)
    return result
