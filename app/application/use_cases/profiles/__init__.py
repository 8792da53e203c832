"""Use cases for user profiles and account lifecycle."""

from .check_presence import check_in, check_out
from .create_profile import create_profile
from .delete_account import (
    GROUP_RESOLUTION_DELETE,
    GROUP_RESOLUTION_TRANSFER,
    GROUP_RESOLUTIONS,
    delete_account,
)
from .update_profile import (
    get_profile,
    register_push_token,
    update_notification_preferences,
    update_profile,
)

__all__ = [
    "GROUP_RESOLUTIONS",
    "GROUP_RESOLUTION_DELETE",
    "GROUP_RESOLUTION_TRANSFER",
    "check_in",
    "check_out",
    "create_profile",
    "delete_account",
    "get_profile",
    "register_push_token",
    "update_notification_preferences",
    "update_profile",
]
