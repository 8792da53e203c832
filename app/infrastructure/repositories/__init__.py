"""Repository implementations for infrastructure layer."""

from .base import VersionedRepository
from .group_repository import GroupRepository
from .profile_repository import ProfileRepository

__all__ = [
    "GroupRepository",
    "ProfileRepository",
    "VersionedRepository",
]
