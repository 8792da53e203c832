"""Use case for registering a profile for an authenticated user."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy.orm import Session

from app.domain.entities import UserAccount
from app.domain.errors import DuplicateRequestError, PreconditionFailedError
from app.infrastructure.repositories import ProfileRepository
from app.utils import now_in_app_timezone


def create_profile(
    session: Session,
    *,
    name: str,
    email: str,
    user_id: str | None = None,
    avatar_url: str | None = None,
) -> UserAccount:
    """Create an empty profile outside any group."""

    if not name.strip():
        raise PreconditionFailedError("Name cannot be empty")

    repository = ProfileRepository(session)
    profile_id = user_id or uuid4().hex
    if repository.get(profile_id) is not None:
        raise DuplicateRequestError(f"Profile {profile_id} already exists")

    account = UserAccount(
        id=profile_id,
        name=name.strip(),
        email=email.strip().lower(),
        avatar_url=avatar_url,
        created_at=now_in_app_timezone(),
    )
    return repository.create(account)
