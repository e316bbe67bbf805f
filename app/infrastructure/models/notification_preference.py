"""SQLAlchemy model for per-user notification preferences."""

from sqlalchemy import Column, DateTime, Integer, String

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime

from .notification import json_type


class NotificationPreferenceModel(Base):
    __tablename__ = "notification_preference"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    channel_preferences = Column(json_type, nullable=False, default=dict)
    type_preferences = Column(json_type, nullable=False, default=dict)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationPreferenceModel"]
