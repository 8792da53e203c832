"""ORM models used by the application infrastructure."""

from .group import GroupModel
from .profile import ProfileModel

__all__ = [
    "GroupModel",
    "ProfileModel",
]
