"""Domain entities for user notifications and their fan-out drafts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from .role import UserRole


class NotificationType(str, Enum):
    """Kinds of notifications delivered to users."""

    USER_SIGNUP = "user_signup"
    USER_UPDATE = "user_update"
    USER_ROLE_CHANGE = "user_role_change"
    USER_STATUS_CHANGE = "user_status_change"

    COMPANY_CREATE = "company_create"
    COMPANY_UPDATE = "company_update"
    COMPANY_STATUS_CHANGE = "company_status_change"

    JOB_CREATE = "job_create"
    JOB_UPDATE = "job_update"
    JOB_STATUS_CHANGE = "job_status_change"
    JOB_CLOSE = "job_close"

    CANDIDATE_ASSIGN = "candidate_assign"
    CANDIDATE_STATUS_CHANGE = "candidate_status_change"
    CANDIDATE_DOCUMENT_UPLOAD = "candidate_document_upload"
    CANDIDATE_PROFILE_UPDATE = "candidate_profile_update"

    HR_ASSIGN = "hr_assign"
    AGENT_ASSIGN = "agent_assign"
    ROLE_REASSIGN = "role_reassign"

    INTERVIEW_SCHEDULE = "interview_schedule"
    INTERVIEW_UPDATE = "interview_update"
    INTERVIEW_CANCEL = "interview_cancel"

    SYSTEM_MAINTENANCE = "system_maintenance"
    SYSTEM_UPDATE = "system_update"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationChannel(str, Enum):
    """Delivery channels a user can opt out of independently."""

    IN_APP = "in_app"
    EMAIL = "email"
    PUSH = "push"


@dataclass(frozen=True)
class Broadcast:
    """Every active user holding ``role`` at delivery time."""

    role: UserRole


@dataclass(frozen=True)
class Direct:
    """A concrete user id, delivered as-is."""

    id: str
    role: UserRole


RecipientSpec = Union[Broadcast, Direct]


@dataclass(frozen=True)
class ConcreteRecipient:
    id: str
    role: UserRole


@dataclass
class NotificationDraft:
    """Notification content produced for one event, before fan-out."""

    type: NotificationType
    title: str
    message: str
    recipients: list[RecipientSpec]
    entity_type: str
    entity_id: str
    metadata: dict[str, Any] = field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    action_url: str | None = None
    expires_at: datetime | None = None


@dataclass
class Notification:
    """Information message persisted for a single recipient."""

    id: int | None
    type: NotificationType
    title: str
    message: str
    recipient_id: str
    recipient_role: UserRole
    entity_type: str
    entity_id: str
    metadata: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    is_archived: bool = False
    created_at: datetime | None = None
    expires_at: datetime | None = None
    priority: NotificationPriority = NotificationPriority.MEDIUM
    action_url: str | None = None

    @classmethod
    def from_draft(
        cls, draft: NotificationDraft, recipient: ConcreteRecipient
    ) -> "Notification":
        """Build the unsaved row ``draft`` produces for ``recipient``."""

        return cls(
            id=None,
            type=draft.type,
            title=draft.title,
            message=draft.message,
            recipient_id=recipient.id,
            recipient_role=recipient.role,
            entity_type=draft.entity_type,
            entity_id=draft.entity_id,
            metadata=dict(draft.metadata),
            expires_at=draft.expires_at,
            priority=draft.priority,
            action_url=draft.action_url,
        )


@dataclass
class NotificationPage:
    """One newest-first page of a user's notifications."""

    notifications: list[Notification]
    has_more: bool
    offset: int
    limit: int


__all__ = [
    "Broadcast",
    "ConcreteRecipient",
    "Direct",
    "Notification",
    "NotificationChannel",
    "NotificationDraft",
    "NotificationPage",
    "NotificationPriority",
    "NotificationType",
    "RecipientSpec",
]
