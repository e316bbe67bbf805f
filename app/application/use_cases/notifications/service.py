"""Notification lifecycle API: creation, listing and per-user state changes."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    Broadcast,
    ConcreteRecipient,
    Notification,
    NotificationDraft,
    NotificationPage,
    NotificationType,
    UserRole,
)
from app.infrastructure.notifications import RealtimeDispatcher
from app.infrastructure.repositories import NotificationRepository, UserRepository

from .recipients import RecipientResolver

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class NotificationService:
    """Persist notifications and manage their read/archive lifecycle.

    The store is authoritative. Realtime pushes happen only after a write has
    been committed, and a missing row or a row owned by another user is
    reported as ``None``/``False`` rather than an error. Store failures are
    logged and re-raised.
    """

    def __init__(self, session: Session, dispatcher: RealtimeDispatcher) -> None:
        self.session = session
        self.repository = NotificationRepository(session)
        self.dispatcher = dispatcher

    def create_notification(self, data: Notification) -> Notification:
        """Store one notification and push it to its recipient."""

        with self._store_errors("create notification", recipient_id=data.recipient_id):
            saved = self.repository.create(replace(data, id=None))
        logger.debug(
            "Created notification %s of type %s for %s",
            saved.id,
            saved.type.value,
            saved.recipient_id,
        )
        self._push_created([saved])
        return saved

    def create_notification_for_many(
        self,
        recipients: Sequence[ConcreteRecipient],
        draft: NotificationDraft,
    ) -> list[Notification]:
        """Store one independent row per recipient, then push each of them.

        ``draft.recipients`` is ignored; the rows go to ``recipients``.
        """

        rows = [Notification.from_draft(draft, recipient) for recipient in recipients]
        if not rows:
            return []
        with self._store_errors("create notifications", type=draft.type.value):
            saved = self.repository.create_many(rows)
        logger.debug(
            "Created %d notifications of type %s", len(saved), draft.type.value
        )
        self._push_created(saved)
        return saved

    def create_system_notification(
        self, role: UserRole, draft: NotificationDraft
    ) -> list[Notification]:
        """Notify every active user currently holding ``role``."""

        resolver = RecipientResolver(UserRepository(self.session))
        recipients = resolver.resolve([Broadcast(role=UserRole(role))])
        return self.create_notification_for_many(recipients, draft)

    def get_user_notifications(
        self,
        user_id: str,
        *,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        include_archived: bool = False,
        notification_type: NotificationType | None = None,
    ) -> NotificationPage:
        """Return one newest-first page for ``user_id``.

        One extra row is fetched to tell whether another page exists.
        """

        if limit <= 0:
            raise ValueError("limit must be a positive integer")
        if offset < 0:
            raise ValueError("offset must not be negative")

        with self._store_errors("list notifications", user_id=user_id):
            rows = self.repository.list_for_recipient(
                str(user_id),
                limit=limit + 1,
                offset=offset,
                include_archived=include_archived,
                notification_type=notification_type,
            )
        has_more = len(rows) > limit
        return NotificationPage(
            notifications=rows[:limit], has_more=has_more, offset=offset, limit=limit
        )

    def get_unread_count(self, user_id: str) -> int:
        with self._store_errors("count unread notifications", user_id=user_id):
            return self.repository.count_unread(str(user_id))

    def list_unread(self, user_id: str, *, limit: int | None = 50) -> list[Notification]:
        with self._store_errors("list unread notifications", user_id=user_id):
            return self.repository.list_unread_for_recipient(str(user_id), limit=limit)

    def mark_as_read(self, notification_id: int, user_id: str) -> Notification | None:
        with self._store_errors(
            "mark notification as read", notification_id=notification_id, user_id=user_id
        ):
            notification = self.repository.mark_as_read(notification_id, str(user_id))
        if notification is not None:
            logger.debug("Marked notification %s as read for %s", notification_id, user_id)
            self._push_unread_count(user_id)
        return notification

    def mark_all_as_read(self, user_id: str) -> int:
        with self._store_errors("mark all notifications as read", user_id=user_id):
            count = self.repository.mark_all_as_read(str(user_id))
        logger.debug("Marked %d notifications as read for %s", count, user_id)
        if count:
            self._push_unread_count(user_id)
        return count

    def archive_notification(self, notification_id: int, user_id: str) -> Notification | None:
        with self._store_errors(
            "archive notification", notification_id=notification_id, user_id=user_id
        ):
            notification = self.repository.archive(notification_id, str(user_id))
        if notification is not None:
            logger.debug("Archived notification %s for %s", notification_id, user_id)
            self._push_unread_count(user_id)
        return notification

    def delete_notification(self, notification_id: int, user_id: str) -> bool:
        with self._store_errors(
            "delete notification", notification_id=notification_id, user_id=user_id
        ):
            deleted = self.repository.delete(notification_id, str(user_id))
        if deleted:
            logger.debug("Deleted notification %s for %s", notification_id, user_id)
            self._push_unread_count(user_id)
        return deleted

    def cleanup_expired_notifications(self) -> int:
        """Delete every expired notification and return how many were removed."""

        with self._store_errors("clean up expired notifications"):
            deleted = self.repository.delete_expired()
        if deleted:
            logger.info("Cleaned up %d expired notifications", deleted)
        return deleted

    def _push_created(self, notifications: Sequence[Notification]) -> None:
        for notification in notifications:
            self.dispatcher.push_to_user(notification.recipient_id, notification)

    def _push_unread_count(self, user_id: str) -> None:
        if not self.dispatcher.active:
            return
        try:
            count = self.repository.count_unread(str(user_id))
        except SQLAlchemyError:
            logger.warning("Could not refresh unread count for %s", user_id, exc_info=True)
            return
        self.dispatcher.push_unread_count(str(user_id), count)

    @contextmanager
    def _store_errors(self, action: str, **context: object) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to %s (%s)", action, context)
            raise


__all__ = ["DEFAULT_PAGE_SIZE", "NotificationService"]
