"""Persistence helpers for notification preferences."""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy.orm import Session

from app.domain.entities import (
    NotificationChannel,
    NotificationPreference,
    NotificationType,
)
from app.domain.entities.notification_preference import default_channel_preferences
from app.infrastructure.models import NotificationPreferenceModel
from app.utils import ensure_app_timezone, now_in_app_naive_datetime


class NotificationPreferenceRepository:
    """Store one preference row per user."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> NotificationPreference | None:
        model = self._get_model(user_id)
        return self._to_entity(model) if model else None

    def get_or_create(self, user_id: str) -> NotificationPreference:
        model = self._get_model(user_id)
        if model is None:
            model = NotificationPreferenceModel(
                user_id=str(user_id),
                channel_preferences=default_channel_preferences(),
                type_preferences={},
                updated_at=now_in_app_naive_datetime(),
            )
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def update(
        self,
        user_id: str,
        *,
        channel_preferences: Mapping[str, bool] | None = None,
        type_preferences: Mapping[str, bool] | None = None,
    ) -> NotificationPreference:
        """Merge the given switches into the stored preferences.

        Keys that are not mentioned keep their current value.
        """

        self.get_or_create(user_id)
        model = self._get_model(user_id)
        if channel_preferences:
            merged = dict(model.channel_preferences or default_channel_preferences())
            for channel, enabled in channel_preferences.items():
                merged[NotificationChannel(channel).value] = bool(enabled)
            model.channel_preferences = merged
        if type_preferences:
            merged = dict(model.type_preferences or {})
            for notification_type, enabled in type_preferences.items():
                merged[NotificationType(notification_type).value] = bool(enabled)
            model.type_preferences = merged
        model.updated_at = now_in_app_naive_datetime()
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def _get_model(self, user_id: str) -> NotificationPreferenceModel | None:
        return (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id == str(user_id))
            .first()
        )

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreference:
        channels = default_channel_preferences()
        channels.update(model.channel_preferences or {})
        return NotificationPreference(
            id=model.id,
            user_id=model.user_id,
            channel_preferences=channels,
            type_preferences=dict(model.type_preferences or {}),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationPreferenceRepository"]
