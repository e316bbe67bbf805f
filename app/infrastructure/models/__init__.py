"""ORM models used by the application infrastructure."""

from .role import RoleModel
from .user import UserModel
from .notification import NotificationModel
from .notification_preference import NotificationPreferenceModel

__all__ = [
    "RoleModel",
    "UserModel",
    "NotificationModel",
    "NotificationPreferenceModel",
]
