"""Tests for turning mutation events into stored notifications."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.application.use_cases.notifications import (
    NotificationFanOut,
    NotificationService,
    update_preferences,
)
from app.domain.entities import (
    MutationEvent,
    NotificationChannel,
    NotificationPriority,
    NotificationType,
    UserRole,
)
from app.infrastructure.database import SessionLocal


@pytest.fixture()
def fan_out(dispatcher) -> NotificationFanOut:
    return NotificationFanOut(SessionLocal, dispatcher)


def _stored(session, dispatcher, user_id: str):
    return NotificationService(session, dispatcher).get_user_notifications(user_id).notifications


def test_user_signup_reaches_every_admin(fan_out, session, dispatcher, make_user) -> None:
    admins = [make_user(UserRole.ADMIN, f"admin{i}@example.com") for i in range(2)]
    hr = make_user(UserRole.HR, "hr@example.com")
    event = MutationEvent(
        actor="system",
        action="create",
        entity_type="User",
        entity_id=hr,
        after={"email": "a@b.com", "role": "HR"},
    )

    created = fan_out.handle(event)

    assert sorted(n.recipient_id for n in created) == sorted(admins)
    assert {n.type for n in created} == {NotificationType.USER_SIGNUP}
    assert _stored(session, dispatcher, hr) == []
    for admin in admins:
        assert len(_stored(session, dispatcher, admin)) == 1
    assert [user_id for user_id, _ in dispatcher.user_pushes] == [n.recipient_id for n in created]


def test_job_status_change_creates_three_rows(fan_out, session, dispatcher) -> None:
    event = MutationEvent(
        actor="admin-1",
        action="update",
        entity_type="Job",
        entity_id="55",
        metadata={
            "statusChange": True,
            "oldStatus": "draft",
            "newStatus": "published",
            "hrIds": ["h1"],
            "agentIds": ["a1"],
        },
    )

    created = fan_out.handle(event)

    assert [(n.recipient_id, n.recipient_role) for n in created] == [
        ("admin-1", UserRole.ADMIN),
        ("h1", UserRole.HR),
        ("a1", UserRole.AGENT),
    ]
    assert all(n.type is NotificationType.JOB_STATUS_CHANGE for n in created)
    assert all(n.priority is NotificationPriority.HIGH for n in created)
    assert len(_stored(session, dispatcher, "h1")) == 1


def test_unmet_guard_creates_nothing(fan_out, dispatcher) -> None:
    event = MutationEvent(
        actor="1", action="update", entity_type="User", entity_id="2", metadata={}
    )

    assert fan_out.handle(event) == []
    assert dispatcher.user_pushes == []


@pytest.mark.parametrize(
    ("entity_type", "action"),
    [("Role", "create"), ("Job", "delete"), ("", ""), ("Interview", "approve")],
)
def test_unknown_pairs_create_nothing(fan_out, dispatcher, entity_type, action) -> None:
    event = MutationEvent(actor="1", action=action, entity_type=entity_type, entity_id="2")

    assert fan_out.handle(event) == []
    assert dispatcher.user_pushes == []


def test_mapper_failure_is_swallowed(dispatcher, caplog) -> None:
    def broken_mapper(event):
        raise KeyError("boom")

    fan_out = NotificationFanOut(SessionLocal, dispatcher, mapper=broken_mapper)
    event = MutationEvent(actor="1", action="create", entity_type="User", entity_id="2")

    assert fan_out.handle(event) == []
    assert "Failed to map" in caplog.text


def test_resolution_failure_yields_no_rows(dispatcher, monkeypatch) -> None:
    from app.infrastructure.repositories import UserRepository

    def fail(self, role):
        raise RuntimeError("directory offline")

    monkeypatch.setattr(UserRepository, "list_active_user_ids_by_role", fail)
    fan_out = NotificationFanOut(SessionLocal, dispatcher)
    event = MutationEvent(
        actor="7",
        action="create",
        entity_type="Job",
        entity_id="1",
        after={"title": "Backend Engineer"},
    )

    assert fan_out.handle(event) == []
    assert dispatcher.user_pushes == []


def test_opted_out_recipients_are_skipped(fan_out, session) -> None:
    update_preferences(session, "h1", type_preferences={"job_status_change": False})
    update_preferences(session, "a1", channel_preferences={"in_app": False})
    event = MutationEvent(
        actor="admin-1",
        action="update",
        entity_type="Job",
        entity_id="55",
        metadata={"statusChange": True, "hrIds": ["h1"], "agentIds": ["a1"]},
    )

    created = fan_out.handle(event)

    assert [n.recipient_id for n in created] == ["admin-1"]


def test_default_ttl_sets_expiry(dispatcher) -> None:
    fan_out = NotificationFanOut(SessionLocal, dispatcher, default_ttl=timedelta(days=7))
    event = MutationEvent(
        actor="admin-1",
        action="update",
        entity_type="Job",
        entity_id="55",
        metadata={"statusChange": True},
    )

    [created] = fan_out.handle(event)

    assert created.expires_at is not None
    assert created.expires_at - created.created_at > timedelta(days=6)


def test_external_senders_respect_channel_switches(session, dispatcher) -> None:
    update_preferences(session, "h1", channel_preferences={"email": False})
    sent: list[str] = []

    def send_email(notification) -> None:
        sent.append(notification.recipient_id)

    def send_push(notification) -> None:
        raise ConnectionError("push gateway down")

    fan_out = NotificationFanOut(
        SessionLocal,
        dispatcher,
        channel_senders={
            NotificationChannel.EMAIL: send_email,
            NotificationChannel.PUSH: send_push,
        },
    )
    event = MutationEvent(
        actor="admin-1",
        action="update",
        entity_type="Job",
        entity_id="55",
        metadata={"statusChange": True, "hrIds": ["h1"]},
    )

    created = fan_out.handle(event)

    assert len(created) == 2
    assert sent == ["admin-1"]


def test_in_app_sender_is_rejected(dispatcher) -> None:
    with pytest.raises(ValueError):
        NotificationFanOut(
            SessionLocal,
            dispatcher,
            channel_senders={NotificationChannel.IN_APP: lambda notification: None},
        )


@pytest.mark.anyio
async def test_handle_async_runs_in_worker_thread(fan_out, make_user) -> None:
    admin = make_user(UserRole.ADMIN, "admin@example.com")
    event = MutationEvent(
        actor="system",
        action="create",
        entity_type="User",
        entity_id="99",
        after={"email": "new@example.com"},
    )

    created = await fan_out.handle_async(event)

    assert [n.recipient_id for n in created] == [admin]


def test_datetime_values_in_event_metadata_are_stored(fan_out, make_user) -> None:
    admin = make_user(UserRole.ADMIN, "admin@example.com")
    event = MutationEvent(
        actor="7",
        action="create",
        entity_type="Interview",
        entity_id="31",
        metadata={
            "candidateUserId": "c1",
            "scheduledAt": datetime(2026, 1, 1, tzinfo=timezone.utc),
        },
    )

    created = fan_out.handle(event)

    assert [n.recipient_id for n in created] == ["c1", admin]
    assert all(n.metadata["scheduledAt"] == "2026-01-01T00:00:00+00:00" for n in created)
