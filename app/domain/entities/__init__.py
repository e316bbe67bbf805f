"""Domain entities exposed by the application."""

from .mutation_event import AuditAction, MutationEvent
from .notification import (
    Broadcast,
    ConcreteRecipient,
    Direct,
    Notification,
    NotificationChannel,
    NotificationDraft,
    NotificationPage,
    NotificationPriority,
    NotificationType,
    RecipientSpec,
)
from .notification_preference import NotificationPreference
from .role import Role, UserRole
from .user import User

__all__ = [
    "AuditAction",
    "MutationEvent",
    "Broadcast",
    "ConcreteRecipient",
    "Direct",
    "Notification",
    "NotificationChannel",
    "NotificationDraft",
    "NotificationPage",
    "NotificationPriority",
    "NotificationType",
    "RecipientSpec",
    "NotificationPreference",
    "Role",
    "UserRole",
    "User",
]
