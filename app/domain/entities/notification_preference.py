"""Domain entity holding a user's notification opt-outs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .notification import NotificationChannel, NotificationType


def default_channel_preferences() -> dict[str, bool]:
    return {channel.value: True for channel in NotificationChannel}


@dataclass
class NotificationPreference:
    """Per-user switches for delivery channels and notification types.

    Channels default to enabled. A type is enabled unless explicitly set to
    ``False``.
    """

    user_id: str
    channel_preferences: dict[str, bool] = field(
        default_factory=default_channel_preferences
    )
    type_preferences: dict[str, bool] = field(default_factory=dict)
    updated_at: datetime | None = None
    id: int | None = None

    def is_channel_enabled(self, channel: NotificationChannel | str) -> bool:
        key = NotificationChannel(channel).value
        return bool(self.channel_preferences.get(key, True))

    def is_type_enabled(self, notification_type: NotificationType | str) -> bool:
        key = NotificationType(notification_type).value
        return self.type_preferences.get(key, True) is not False


__all__ = ["NotificationPreference", "default_channel_preferences"]
