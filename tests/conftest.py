"""Shared fixtures for the test-suite."""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PUSH_DELIVERY_ENABLED"] = "false"
os.environ["APP_TIMEZONE"] = "UTC"

import pytest
from sqlalchemy.orm import Session, sessionmaker

from app.application.use_cases.membership import (
    accept_join_request,
    create_group,
    create_join_request,
)
from app.application.use_cases.profiles import create_profile
from app.config import reset_settings_cache
from app.domain.entities import Group, UserAccount
from app.infrastructure.database import build_engine, initialize_database
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.utils import reset_app_timezone_cache


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read settings and timezone from the test environment for every test."""

    reset_settings_cache()
    reset_app_timezone_cache()
    yield
    reset_settings_cache()
    reset_app_timezone_cache()


class RecordingPublisher:
    """Publisher double that remembers which profiles were dispatched."""

    def __init__(self) -> None:
        self.dispatched: list[UserAccount] = []

    def dispatch(self, account: UserAccount) -> None:
        self.dispatched.append(account)

    @property
    def user_ids(self) -> list[str]:
        return [account.id for account in self.dispatched]


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    initialize_database(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine) -> Session:
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db = factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def profiles(session) -> ProfileRepository:
    return ProfileRepository(session)


@pytest.fixture()
def groups(session) -> GroupRepository:
    return GroupRepository(session)


@pytest.fixture()
def make_profile(session):
    def _make(user_id: str, name: str | None = None, **fields) -> UserAccount:
        account = create_profile(
            session,
            user_id=user_id,
            name=name or user_id.title(),
            email=f"{user_id}@example.com",
        )
        if fields:
            account = ProfileRepository(session).update_fields(account, **fields)
        return account

    return _make


@pytest.fixture()
def make_group(session, make_profile):
    def _make(
        creator_id: str = "alice", name: str = "Oak Street", password: str | None = None
    ) -> Group:
        if ProfileRepository(session).get(creator_id) is None:
            make_profile(creator_id)
        result = create_group(session, creator_id=creator_id, name=name, password=password)
        assert result.ok
        return result.value

    return _make


@pytest.fixture()
def community(session, make_profile, make_group, publisher):
    """Oak Street group created by alice with bob and carol as members.

    Inboxes are emptied once the setup requests are settled.
    """

    group = make_group("alice")
    for user_id in ("bob", "carol"):
        make_profile(user_id)
        create_join_request(session, group_id=group.id, user_id=user_id, publisher=publisher)
        accept_join_request(
            session,
            group_id=group.id,
            user_id=user_id,
            acting_user_id="alice",
            publisher=publisher,
        )
    profiles = ProfileRepository(session)
    for user_id in ("alice", "bob", "carol"):
        profiles.update_fields(profiles.require(user_id), notifications=[])
    publisher.dispatched.clear()
    return GroupRepository(session).require(group.id)
