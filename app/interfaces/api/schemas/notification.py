"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import (
    NotificationChannel,
    NotificationPriority,
    NotificationType,
    UserRole,
)


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: NotificationType
    title: str
    message: str
    recipient_id: str
    recipient_role: UserRole
    entity_type: str
    entity_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    is_archived: bool
    priority: NotificationPriority
    action_url: str | None = None
    created_at: datetime
    expires_at: datetime | None = None


class NotificationPageRead(BaseModel):
    notifications: list[NotificationRead]
    has_more: bool
    offset: int
    limit: int


class NotificationCountRead(BaseModel):
    count: int


class NotificationCleanupRead(BaseModel):
    deleted: int


class NotificationPreferenceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    channel_preferences: dict[NotificationChannel, bool]
    type_preferences: dict[NotificationType, bool] = Field(default_factory=dict)
    updated_at: datetime | None = None


class NotificationPreferenceUpdate(BaseModel):
    """Partial update: only the switches present are changed."""

    channel_preferences: dict[NotificationChannel, bool] | None = None
    type_preferences: dict[NotificationType, bool] | None = None


__all__ = [
    "NotificationCleanupRead",
    "NotificationCountRead",
    "NotificationPageRead",
    "NotificationPreferenceRead",
    "NotificationPreferenceUpdate",
    "NotificationRead",
]
