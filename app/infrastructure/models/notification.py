"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String
from sqlalchemy.dialects.mssql import JSON as MSSQLJSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import expression
from sqlalchemy.types import JSON

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime

json_type = JSONB().with_variant(JSON(), "sqlite").with_variant(MSSQLJSON(), "mssql")


class NotificationModel(Base):
    """One notification row per recipient.

    ``recipient_id`` deliberately has no foreign key: direct recipients are
    stored exactly as the producer named them.
    """

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_recipient_read", "recipient_id", "is_read", "created_at"),
        Index("ix_notification_recipient_archived", "recipient_id", "is_archived", "created_at"),
        Index("ix_notification_role_type", "recipient_role", "type", "created_at"),
        Index("ix_notification_entity", "entity_type", "entity_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(String(1000), nullable=False)
    recipient_id = Column(String(64), nullable=False, index=True)
    recipient_role = Column(String(20), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(64), nullable=False)
    # ``metadata`` is reserved on declarative classes.
    extra_metadata = Column("metadata", json_type, nullable=False, default=dict)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    is_archived = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    priority = Column(String(10), nullable=False, default="medium", index=True)
    action_url = Column(String(255), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    expires_at = Column(DateTime(), nullable=True, index=True)


__all__ = ["NotificationModel", "json_type"]
