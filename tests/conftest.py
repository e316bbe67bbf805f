"""Shared fixtures: a throwaway sqlite database and recording fakes."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "notification_service_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ.setdefault("APP_TIMEZONE", "UTC")

from app.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.domain.entities import (  # noqa: E402
    Notification,
    NotificationPriority,
    NotificationType,
    UserRole,
)
from app.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from app.infrastructure.models import RoleModel, UserModel  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    """Start every test from empty tables."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def anyio_backend():
    return "asyncio"


def create_user(
    role: UserRole,
    email: str,
    *,
    name: str = "Test User",
    is_active: bool = True,
    deleted: bool = False,
) -> str:
    """Insert a user holding ``role`` and return its recipient id."""

    with SessionLocal() as db:
        role_model = db.query(RoleModel).filter_by(alias=role.value).first()
        if role_model is None:
            role_model = RoleModel(name=role.value.title(), alias=role.value)
            db.add(role_model)
            db.commit()
            db.refresh(role_model)
        user = UserModel(
            role_id=role_model.id,
            name=name,
            email=email,
            is_active=is_active,
            deleted=deleted,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return str(user.id)


def build_notification(recipient_id: str = "u", **overrides) -> Notification:
    values = {
        "id": None,
        "type": NotificationType.JOB_CREATE,
        "title": "New Job Posted",
        "message": "A new job has been posted",
        "recipient_id": recipient_id,
        "recipient_role": UserRole.AGENT,
        "entity_type": "Job",
        "entity_id": "42",
        "metadata": {"jobTitle": "Backend Engineer"},
        "priority": NotificationPriority.MEDIUM,
    }
    values.update(overrides)
    return Notification(**values)


class RecordingDispatcher:
    """Stand-in for the realtime dispatcher that remembers every push."""

    def __init__(self, active: bool = True) -> None:
        self.active = active
        self.manager = None
        self.user_pushes: list[tuple[str, Notification]] = []
        self.unread_counts: list[tuple[str, int]] = []

    def push_to_user(self, user_id: str, notification: Notification) -> bool:
        self.user_pushes.append((user_id, notification))
        return True

    def push_to_role(self, role: str, notification: Notification) -> bool:
        return False

    def push_to_all(self, notification: Notification) -> bool:
        return False

    def push_unread_count(self, user_id: str, count: int) -> bool:
        self.unread_counts.append((user_id, count))
        return True


@pytest.fixture()
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture()
def make_user():
    return create_user


@pytest.fixture()
def make_notification():
    return build_notification
