"""Schemas for mutation events submitted by the domain layer."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.domain.entities import MutationEvent


class MutationEventCreate(BaseModel):
    """One committed change to a platform entity."""

    actor: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1, description="create, update, delete, assign, ...")
    entity_type: str = Field(..., min_length=1, description="User, Job, Candidate, ...")
    entity_id: str = Field(..., min_length=1)
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime | None = None

    def to_entity(self) -> MutationEvent:
        return MutationEvent(
            actor=self.actor,
            action=self.action,
            entity_type=self.entity_type,
            entity_id=self.entity_id,
            before=self.before,
            after=self.after,
            metadata=dict(self.metadata),
            timestamp=self.timestamp,
        )


class MutationEventAccepted(BaseModel):
    accepted: bool
    recognized: bool


__all__ = ["MutationEventAccepted", "MutationEventCreate"]
