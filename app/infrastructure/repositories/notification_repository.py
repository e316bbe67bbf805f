"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from fastapi.encoders import jsonable_encoder
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from app.domain.entities import (
    Notification,
    NotificationPriority,
    NotificationType,
    UserRole,
)
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)


class NotificationRepository:
    """Durable store for :class:`Notification` rows.

    Every lookup that mutates a row is scoped by ``recipient_id`` so a user can
    never touch another user's notifications.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def create(self, notification: Notification) -> Notification:
        return self.create_many([notification])[0]

    def create_many(self, notifications: Sequence[Notification]) -> list[Notification]:
        """Insert every row in one transaction and return the stored entities."""

        if not notifications:
            return []
        models = []
        for notification in notifications:
            model = NotificationModel()
            self._apply_entity_to_model(model, notification)
            models.append(model)
        self.session.add_all(models)
        self.session.commit()
        for model in models:
            self.session.refresh(model)
        return [self._to_entity(model) for model in models]

    def list_for_recipient(
        self,
        recipient_id: str,
        *,
        limit: int,
        offset: int = 0,
        include_archived: bool = False,
        notification_type: NotificationType | None = None,
    ) -> list[Notification]:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.recipient_id == recipient_id
        )
        if not include_archived:
            query = query.filter(NotificationModel.is_archived.is_(False))
        if notification_type is not None:
            query = query.filter(
                NotificationModel.type == NotificationType(notification_type).value
            )
        query = (
            query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
            .offset(offset)
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def list_unread_for_recipient(
        self, recipient_id: str, *, limit: int | None = 50
    ) -> list[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.is_read.is_(False))
            .filter(NotificationModel.is_archived.is_(False))
            .order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_unread(self, recipient_id: str) -> int:
        statement = (
            select(func.count(NotificationModel.id))
            .where(NotificationModel.recipient_id == recipient_id)
            .where(NotificationModel.is_read.is_(False))
            .where(NotificationModel.is_archived.is_(False))
        )
        return int(self.session.execute(statement).scalar_one())

    def mark_as_read(self, notification_id: int, recipient_id: str) -> Notification | None:
        return self._set_flag(notification_id, recipient_id, is_read=True)

    def archive(self, notification_id: int, recipient_id: str) -> Notification | None:
        return self._set_flag(notification_id, recipient_id, is_archived=True)

    def mark_all_as_read(self, recipient_id: str) -> int:
        """Flip every unread row of ``recipient_id`` and return how many changed."""

        statement = (
            update(NotificationModel)
            .where(NotificationModel.recipient_id == recipient_id)
            .where(NotificationModel.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        return int(result.rowcount or 0)

    def delete(self, notification_id: int, recipient_id: str) -> bool:
        model = self._get_owned_model(notification_id, recipient_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    def count_expired(self, *, now: datetime | None = None) -> int:
        cutoff = ensure_app_naive_datetime(now) if now else now_in_app_naive_datetime()
        statement = (
            select(func.count(NotificationModel.id))
            .where(NotificationModel.expires_at.is_not(None))
            .where(NotificationModel.expires_at < cutoff)
        )
        return int(self.session.execute(statement).scalar_one())

    def delete_expired(self, *, now: datetime | None = None) -> int:
        """Delete rows whose ``expires_at`` lies before ``now`` for all users."""

        cutoff = ensure_app_naive_datetime(now) if now else now_in_app_naive_datetime()
        statement = (
            delete(NotificationModel)
            .where(NotificationModel.expires_at.is_not(None))
            .where(NotificationModel.expires_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        return int(result.rowcount or 0)

    def _set_flag(
        self, notification_id: int, recipient_id: str, **flags: bool
    ) -> Notification | None:
        model = self._get_owned_model(notification_id, recipient_id)
        if model is None:
            return None
        for name, value in flags.items():
            setattr(model, name, value)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def _get_owned_model(
        self, notification_id: int, recipient_id: str
    ) -> NotificationModel | None:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.recipient_id == recipient_id)
            .first()
        )

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        model.type = NotificationType(notification.type).value
        model.title = notification.title
        model.message = notification.message
        model.recipient_id = str(notification.recipient_id)
        model.recipient_role = UserRole(notification.recipient_role).value
        model.entity_type = notification.entity_type
        model.entity_id = str(notification.entity_id)
        model.extra_metadata = jsonable_encoder(dict(notification.metadata or {}))
        model.is_read = bool(notification.is_read)
        model.is_archived = bool(notification.is_archived)
        model.priority = NotificationPriority(notification.priority).value
        model.action_url = notification.action_url
        model.created_at = (
            ensure_app_naive_datetime(notification.created_at)
            or now_in_app_naive_datetime()
        )
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            type=NotificationType(model.type),
            title=model.title,
            message=model.message,
            recipient_id=model.recipient_id,
            recipient_role=UserRole(model.recipient_role),
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            metadata=dict(model.extra_metadata or {}),
            is_read=model.is_read,
            is_archived=model.is_archived,
            created_at=ensure_app_timezone(model.created_at),
            expires_at=ensure_app_timezone(model.expires_at),
            priority=NotificationPriority(model.priority),
            action_url=model.action_url,
        )


__all__ = ["NotificationRepository"]
