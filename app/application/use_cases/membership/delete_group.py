"""Use case for deleting a group after disassociating everyone from it."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, Step, run_steps
from app.domain.errors import NotFoundError
from app.infrastructure.repositories import GroupRepository, ProfileRepository

from .steps import clear_requested_pointer_step, detach_member_steps, ensure_group_creator


def group_teardown_steps(
    profiles: ProfileRepository, groups: GroupRepository, *, group_id: str
) -> list[Step]:
    """Steps clearing every member pointer and pending pointer to ``group_id``."""

    group = groups.require(group_id)
    member_ids = list(
        dict.fromkeys([*group.users, *(m.id for m in profiles.list_by_group(group_id))])
    )
    steps: list[Step] = []
    for member_id in member_ids:
        steps.extend(
            detach_member_steps(profiles, groups, group_id=group_id, user_id=member_id)
        )
    for pending in profiles.list_by_requested_group(group_id):
        name, step = clear_requested_pointer_step(
            profiles, group_id=group_id, user_id=pending.id
        )
        steps.append((f"{name}:{pending.id}", step))
    return steps


def delete_group_record_step(groups: GroupRepository, *, group_id: str) -> Step:
    def _delete() -> bool:
        try:
            groups.delete(group_id)
        except NotFoundError:
            return False
        return True

    return ("delete_group_record", _delete)


def run_group_deletion(
    profiles: ProfileRepository,
    groups: GroupRepository,
    *,
    group_id: str,
    result: OperationResult,
) -> OperationResult:
    """Tear down ``group_id`` into ``result``; the record goes only if that succeeded."""

    if groups.get(group_id) is None:
        result.skipped.append("delete_group_record")
        return result
    failures_before = len(result.failures)
    run_steps(
        result.operation,
        group_teardown_steps(profiles, groups, group_id=group_id),
        into=result,
    )
    if len(result.failures) > failures_before:
        result.fail("delete_group_record", "members could not all be disassociated")
        return result
    return run_steps(
        result.operation,
        [delete_group_record_step(groups, group_id=group_id)],
        into=result,
    )


def delete_group(session: Session, *, group_id: str, acting_user_id: str) -> OperationResult:
    """Delete ``group_id``; only its creator may do so."""

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    ensure_group_creator(group, profiles.require(acting_user_id))

    result = OperationResult(operation="delete_group", value=group_id)
    return run_group_deletion(profiles, groups, group_id=group_id, result=result)
