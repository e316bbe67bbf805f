"""Repository implementations for infrastructure layer."""

from .notification_preference_repository import NotificationPreferenceRepository
from .notification_repository import NotificationRepository
from .user_repository import UserRepository

__all__ = [
    "NotificationPreferenceRepository",
    "NotificationRepository",
    "UserRepository",
]
