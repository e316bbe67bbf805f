"""Domain entity describing one committed change to a platform entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AuditAction(str, Enum):
    """Actions recorded by the audit trail of the domain layer."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"
    UPLOAD = "upload"
    DOWNLOAD = "download"
    APPROVE = "approve"
    REJECT = "reject"
    ASSIGN = "assign"
    ADVANCE = "advance"


@dataclass(frozen=True)
class MutationEvent:
    """Who did what to which entity.

    ``action`` and ``entity_type`` are plain strings so producers can emit
    actions this service does not know about; they are simply not mapped.
    """

    actor: str
    action: str
    entity_type: str
    entity_id: str
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime | None = None


__all__ = ["AuditAction", "MutationEvent"]
