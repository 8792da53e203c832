from .content import (
    EventCreate,
    EventRead,
    FanOutRead,
    IncidentReportCreate,
    IncidentReportRead,
    NewsStoryCreate,
    NewsStoryRead,
    ViewCountRead,
)
from .group import (
    GroupCreate,
    GroupJoin,
    GroupOperationRead,
    GroupRead,
    JoinRequestCreate,
    JoinRequestOperationRead,
    MembershipRequestRead,
    OwnershipTransfer,
    PendingRequestRead,
    RoleUpdate,
)
from .notification import (
    NotificationCountRead,
    NotificationRead,
    NotificationReadUpdate,
    ReminderSweepRequest,
)
from .operation import OperationResultRead, StepFailureRead
from .profile import (
    AccountDeletion,
    NotificationPreferencesUpdate,
    PresenceRead,
    ProfileCreate,
    ProfileRead,
    ProfileUpdate,
    PushTokenUpdate,
)

__all__ = [
    "AccountDeletion",
    "EventCreate",
    "EventRead",
    "FanOutRead",
    "GroupCreate",
    "GroupJoin",
    "GroupOperationRead",
    "GroupRead",
    "IncidentReportCreate",
    "IncidentReportRead",
    "JoinRequestCreate",
    "JoinRequestOperationRead",
    "MembershipRequestRead",
    "NewsStoryCreate",
    "NewsStoryRead",
    "NotificationCountRead",
    "NotificationPreferencesUpdate",
    "NotificationRead",
    "NotificationReadUpdate",
    "OperationResultRead",
    "OwnershipTransfer",
    "PendingRequestRead",
    "PresenceRead",
    "ProfileCreate",
    "ProfileRead",
    "ProfileUpdate",
    "PushTokenUpdate",
    "ReminderSweepRequest",
    "RoleUpdate",
    "StepFailureRead",
    "ViewCountRead",
]
