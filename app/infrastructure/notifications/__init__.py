"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager
from .publisher import (
    NEW_NOTIFICATION_EVENT,
    UNREAD_COUNT_EVENT,
    RealtimeDispatcher,
    serialize_notification,
)

__all__ = [
    "NotificationConnectionManager",
    "NEW_NOTIFICATION_EVENT",
    "UNREAD_COUNT_EVENT",
    "RealtimeDispatcher",
    "serialize_notification",
]
