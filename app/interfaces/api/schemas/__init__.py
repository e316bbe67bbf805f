from .audit_event import MutationEventAccepted, MutationEventCreate
from .notification import (
    NotificationCleanupRead,
    NotificationCountRead,
    NotificationPageRead,
    NotificationPreferenceRead,
    NotificationPreferenceUpdate,
    NotificationRead,
)

__all__ = [
    "MutationEventAccepted",
    "MutationEventCreate",
    "NotificationCleanupRead",
    "NotificationCountRead",
    "NotificationPageRead",
    "NotificationPreferenceRead",
    "NotificationPreferenceUpdate",
    "NotificationRead",
]
