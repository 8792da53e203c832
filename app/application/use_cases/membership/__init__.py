"""Use cases for group membership and join requests."""

from .accept_join_request import accept_join_request
from .cancel_join_request import cancel_join_request
from .create_group import create_group
from .create_join_request import create_join_request
from .decline_join_request import decline_join_request
from .delete_group import delete_group
from .join_group import join_group_with_password
from .leave_group import leave_group, remove_member
from .list_user_requests import PendingRequest, list_group_requests, list_user_requests
from .manage_roles import change_member_role, transfer_ownership
from .reconcile_memberships import reconcile_memberships

__all__ = [
    "PendingRequest",
    "accept_join_request",
    "cancel_join_request",
    "change_member_role",
    "create_group",
    "create_join_request",
    "decline_join_request",
    "delete_group",
    "join_group_with_password",
    "leave_group",
    "list_group_requests",
    "list_user_requests",
    "reconcile_memberships",
    "remove_member",
    "transfer_ownership",
]
