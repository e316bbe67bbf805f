"""Per-user opt-outs applied to notification creation and delivery."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from sqlalchemy.orm import Session

from app.domain.entities import (
    ConcreteRecipient,
    NotificationChannel,
    NotificationPreference,
    NotificationType,
)
from app.infrastructure.repositories import NotificationPreferenceRepository

logger = logging.getLogger(__name__)


class PreferenceFilter:
    """Answer whether a user accepts a notification type or a channel.

    The type gate decides whether a notification is created for a user at all.
    Each channel gate is independent of the others and of the type gate.
    Users without stored preferences accept everything.
    """

    def __init__(self, repository: NotificationPreferenceRepository) -> None:
        self._repository = repository
        self._cache: dict[str, NotificationPreference | None] = {}

    def is_type_enabled(self, user_id: str, notification_type: NotificationType) -> bool:
        preference = self._preference(user_id)
        return preference is None or preference.is_type_enabled(notification_type)

    def is_channel_enabled(self, user_id: str, channel: NotificationChannel) -> bool:
        preference = self._preference(user_id)
        return preference is None or preference.is_channel_enabled(channel)

    def filter_recipients(
        self,
        recipients: Iterable[ConcreteRecipient],
        notification_type: NotificationType,
        *,
        channel: NotificationChannel = NotificationChannel.IN_APP,
    ) -> list[ConcreteRecipient]:
        """Keep recipients accepting both ``notification_type`` and ``channel``."""

        accepted: list[ConcreteRecipient] = []
        for recipient in recipients:
            if not self.is_type_enabled(recipient.id, notification_type):
                logger.debug(
                    "User %s opted out of %s notifications", recipient.id, notification_type.value
                )
                continue
            if not self.is_channel_enabled(recipient.id, channel):
                logger.debug("User %s disabled the %s channel", recipient.id, channel.value)
                continue
            accepted.append(recipient)
        return accepted

    def _preference(self, user_id: str) -> NotificationPreference | None:
        key = str(user_id)
        if key not in self._cache:
            self._cache[key] = self._repository.get(key)
        return self._cache[key]


def get_preferences(session: Session, user_id: str) -> NotificationPreference:
    """Return the stored preferences of ``user_id``, creating the defaults."""

    return NotificationPreferenceRepository(session).get_or_create(user_id)


def update_preferences(
    session: Session,
    user_id: str,
    *,
    channel_preferences: Mapping[str, bool] | None = None,
    type_preferences: Mapping[str, bool] | None = None,
) -> NotificationPreference:
    """Apply a partial update to the preferences of ``user_id``."""

    preference = NotificationPreferenceRepository(session).update(
        user_id,
        channel_preferences=channel_preferences,
        type_preferences=type_preferences,
    )
    logger.debug("Updated notification preferences for user %s", user_id)
    return preference


__all__ = ["PreferenceFilter", "get_preferences", "update_preferences"]
