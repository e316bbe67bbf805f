"""Best-effort realtime pushes of notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from anyio import from_thread

from app.domain.entities import Notification

from .manager import NotificationConnectionManager

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_EVENT = "notification:new"
UNREAD_COUNT_EVENT = "notification:unread-count"


class RealtimeDispatcher:
    """Serialize notifications and schedule their delivery.

    Every push is fire-and-forget and returns whether a send was scheduled.
    Without a connection manager, without a connected session for the target
    or without an event loop to schedule on, the push is logged and skipped.
    """

    def __init__(self, manager: NotificationConnectionManager | None) -> None:
        self._manager = manager
        self._tasks: set[asyncio.Task] = set()

    @property
    def manager(self) -> NotificationConnectionManager | None:
        return self._manager

    @property
    def active(self) -> bool:
        return self._manager is not None

    def push_to_user(self, user_id: str, notification: Notification) -> bool:
        """Schedule ``notification`` for every session of ``user_id``."""

        if self._manager is None:
            logger.warning(
                "Realtime registry not initialized; notification %s not pushed",
                notification.id,
            )
            return False
        if not self._manager.is_connected(user_id):
            logger.debug("User %s has no open session; push skipped", user_id)
            return False
        message = {"type": NEW_NOTIFICATION_EVENT, "data": serialize_notification(notification)}
        return self._schedule(self._manager.send_to_user, str(user_id), message)

    def push_to_role(self, role: str, notification: Notification) -> bool:
        """Schedule ``notification`` for every session registered under ``role``."""

        if self._manager is None:
            logger.warning(
                "Realtime registry not initialized; notification %s not pushed to role %s",
                notification.id,
                role,
            )
            return False
        if not self._manager.has_role_connections(role):
            logger.debug("No open session for role %s; push skipped", role)
            return False
        message = {"type": NEW_NOTIFICATION_EVENT, "data": serialize_notification(notification)}
        return self._schedule(self._manager.send_to_role, str(role), message)

    def push_to_all(self, notification: Notification) -> bool:
        if self._manager is None:
            logger.warning(
                "Realtime registry not initialized; broadcast of %s skipped", notification.id
            )
            return False
        message = {"type": NEW_NOTIFICATION_EVENT, "data": serialize_notification(notification)}
        return self._schedule(self._manager.send_to_all, message)

    def push_unread_count(self, user_id: str, count: int) -> bool:
        """Tell the sessions of ``user_id`` their new unread count."""

        if self._manager is None:
            logger.warning("Realtime registry not initialized; unread count not pushed")
            return False
        if not self._manager.is_connected(user_id):
            return False
        message = {"type": UNREAD_COUNT_EVENT, "data": {"count": count}}
        return self._schedule(self._manager.send_to_user, str(user_id), message)

    def _schedule(
        self, send: Callable[..., Awaitable[None]], *args: Any
    ) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(send, *args)
            except RuntimeError:
                logger.warning("No event loop reachable from this thread; realtime push dropped")
                return False
            except Exception:
                logger.exception("Realtime push failed")
                return False
        else:
            task = loop.create_task(send(*args))
            self._tasks.add(task)
            task.add_done_callback(self._task_done)
        return True

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Realtime push failed", exc_info=exc)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "type": notification.type.value,
        "title": notification.title,
        "message": notification.message,
        "recipient_id": notification.recipient_id,
        "recipient_role": notification.recipient_role.value,
        "entity_type": notification.entity_type,
        "entity_id": notification.entity_id,
        "metadata": notification.metadata or {},
        "is_read": notification.is_read,
        "is_archived": notification.is_archived,
        "priority": notification.priority.value,
        "action_url": notification.action_url,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "expires_at": notification.expires_at.isoformat()
        if notification.expires_at
        else None,
    }


__all__ = [
    "NEW_NOTIFICATION_EVENT",
    "UNREAD_COUNT_EVENT",
    "RealtimeDispatcher",
    "serialize_notification",
]
