"""Tests for the (entity type, action) template table."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import TEMPLATES, is_recognized, map_event
from app.domain.entities import (
    AuditAction,
    Broadcast,
    Direct,
    MutationEvent,
    NotificationPriority,
    NotificationType,
    UserRole,
)


def _event(entity_type: str, action: str, **kwargs) -> MutationEvent:
    kwargs.setdefault("actor", "7")
    kwargs.setdefault("entity_id", "100")
    return MutationEvent(entity_type=entity_type, action=action, **kwargs)


def test_table_covers_the_recognized_pairs() -> None:
    assert len(TEMPLATES) == 17
    assert ("agentassignment", "update") in TEMPLATES
    assert ("candidateassignment", "update") in TEMPLATES


@pytest.mark.parametrize(
    ("entity_type", "action"),
    [("Role", "create"), ("Job", "delete"), ("User", "login"), ("Company", "delete")],
)
def test_unrecognized_pairs_map_to_nothing(entity_type: str, action: str) -> None:
    assert not is_recognized(entity_type, action)
    assert map_event(_event(entity_type, action)) is None


def test_lookup_ignores_case_and_accepts_enum_actions() -> None:
    event = _event("USER", AuditAction.CREATE, after={"email": "a@b.com"})

    draft = map_event(event)

    assert draft is not None
    assert draft.type is NotificationType.USER_SIGNUP


def test_user_created_broadcasts_to_admins() -> None:
    draft = map_event(_event("User", "create", after={"email": "a@b.com", "role": "HR"}))

    assert draft.type is NotificationType.USER_SIGNUP
    assert draft.title == "New User Registration"
    assert draft.message == "A new user has registered: a@b.com"
    assert draft.recipients == [Broadcast(role=UserRole.ADMIN)]
    assert draft.metadata == {"email": "a@b.com", "role": "hr"}
    assert draft.priority is NotificationPriority.MEDIUM


def test_user_update_without_role_change_is_skipped() -> None:
    assert map_event(_event("User", "update", metadata={})) is None


def test_user_role_change_targets_user_and_acting_admin() -> None:
    draft = map_event(
        _event(
            "User",
            "update",
            entity_id="12",
            metadata={"roleChange": True, "oldRole": "agent", "newRole": "hr"},
        )
    )

    assert draft.type is NotificationType.USER_ROLE_CHANGE
    assert draft.message == "User role has been updated from agent to hr"
    assert draft.recipients == [
        Direct(id="12", role=UserRole.HR),
        Direct(id="7", role=UserRole.ADMIN),
    ]
    assert draft.priority is NotificationPriority.HIGH


def test_job_status_change_lists_actor_hr_and_agents() -> None:
    draft = map_event(
        _event(
            "Job",
            "update",
            metadata={
                "statusChange": True,
                "oldStatus": "draft",
                "newStatus": "published",
                "hrIds": ["h1"],
                "agentIds": ["a1"],
            },
        )
    )

    assert draft.type is NotificationType.JOB_STATUS_CHANGE
    assert draft.priority is NotificationPriority.HIGH
    assert draft.message == "Job status has been updated from draft to published"
    assert draft.recipients == [
        Direct(id="7", role=UserRole.ADMIN),
        Direct(id="h1", role=UserRole.HR),
        Direct(id="a1", role=UserRole.AGENT),
    ]
    assert draft.action_url == "/jobs/100"


def test_job_update_ignores_non_list_id_fields() -> None:
    draft = map_event(
        _event("Job", "update", metadata={"statusChange": True, "hrIds": "h1"})
    )

    assert draft.recipients == [Direct(id="7", role=UserRole.ADMIN)]
    assert draft.message == "Job status has been updated"


def test_job_created_broadcasts_to_three_roles() -> None:
    draft = map_event(_event("Job", "create", after={"title": "Backend Engineer"}))

    assert draft.recipients == [
        Broadcast(role=UserRole.SUPERADMIN),
        Broadcast(role=UserRole.ADMIN),
        Broadcast(role=UserRole.AGENT),
    ]
    assert draft.metadata["creatorName"] == "Unknown User"


def test_candidate_assignment_requires_status_change_flag() -> None:
    assert map_event(_event("CandidateAssignment", "update", metadata={})) is None

    draft = map_event(
        _event(
            "CandidateAssignment",
            "update",
            metadata={
                "candidateStatusChanged": True,
                "candidateName": "Ana",
                "oldCandidateStatus": "new",
                "newCandidateStatus": "shortlisted",
                "jobTitle": "N/A",
                "assignedToId": "5",
                "assignedById": "6",
            },
        )
    )

    assert draft.message == 'Candidate Ana status changed from "new" to "shortlisted"'
    assert draft.recipients == [
        Direct(id="5", role=UserRole.HR),
        Direct(id="6", role=UserRole.AGENT),
    ]


def test_interview_reschedule_also_reaches_admins() -> None:
    metadata = {
        "candidateUserId": "c1",
        "assignedAgentId": "a1",
        "candidateName": "Ana",
        "updatedByName": "Bob",
    }
    plain = map_event(_event("Interview", "update", metadata=metadata))
    rescheduled = map_event(
        _event("Interview", "update", metadata={**metadata, "scheduledAtChanged": True})
    )

    assert plain.message == "Bob updated interview for Ana"
    assert len(plain.recipients) == 2
    assert rescheduled.message == "Bob rescheduled interview for Ana"
    assert rescheduled.recipients[2:] == [
        Broadcast(role=UserRole.ADMIN),
        Broadcast(role=UserRole.SUPERADMIN),
    ]


def test_agent_assignment_counts_resources() -> None:
    draft = map_event(
        _event(
            "AgentAssignment",
            "create",
            metadata={
                "agentId": "3",
                "agentName": "Carla",
                "assignedByName": "Dana",
                "hrIds": ["10", "11"],
                "candidateIds": ["20"],
            },
        )
    )

    assert draft.title == "Agent Assignment Created"
    assert draft.message == "Dana assigned resources to agent Carla (2 HR users, 1 candidate)"
    assert draft.recipients[:3] == [
        Direct(id="3", role=UserRole.AGENT),
        Direct(id="10", role=UserRole.HR),
        Direct(id="11", role=UserRole.HR),
    ]
    assert draft.metadata["hrCount"] == 2
    assert draft.action_url == "/users/agent-assignments/3"


def test_user_deleted_notifies_acting_admin() -> None:
    draft = map_event(_event("User", "delete", metadata={"email": "gone@example.com"}))

    assert draft.type is NotificationType.USER_STATUS_CHANGE
    assert draft.priority is NotificationPriority.HIGH
    assert draft.message == "User account has been deleted: gone@example.com"
    assert draft.recipients == [Direct(id="7", role=UserRole.ADMIN)]


def test_company_created_broadcasts_to_admins() -> None:
    draft = map_event(_event("Company", "create", after={"name": "Acme"}))

    assert draft.type is NotificationType.COMPANY_CREATE
    assert draft.priority is NotificationPriority.MEDIUM
    assert draft.message == "A new company has been created: Acme"
    assert draft.recipients == [Broadcast(role=UserRole.ADMIN)]
    assert draft.metadata["creatorId"] == "7"
    assert draft.metadata["creatorName"] == "Unknown User"


def test_company_updated_notifies_actor_and_hr() -> None:
    draft = map_event(
        _event("Company", "update", metadata={"name": "Acme", "hrIds": ["h1", "h2"]})
    )

    assert draft.type is NotificationType.COMPANY_UPDATE
    assert draft.priority is NotificationPriority.MEDIUM
    assert draft.recipients == [
        Direct(id="7", role=UserRole.ADMIN),
        Direct(id="h1", role=UserRole.HR),
        Direct(id="h2", role=UserRole.HR),
    ]


def test_candidate_assigned_reaches_agent_and_admins() -> None:
    draft = map_event(
        _event("Candidate", "assign", metadata={"assignedTo": "Carla", "assignedToId": "3"})
    )

    assert draft.type is NotificationType.CANDIDATE_ASSIGN
    assert draft.priority is NotificationPriority.HIGH
    assert draft.message == "Candidate has been assigned to Carla"
    assert draft.recipients == [
        Direct(id="3", role=UserRole.AGENT),
        Broadcast(role=UserRole.ADMIN),
    ]
    assert draft.action_url == "/candidates/100"


def test_candidate_updated_requires_status_change() -> None:
    assert map_event(_event("Candidate", "update", metadata={"agentIds": ["a1"]})) is None

    draft = map_event(
        _event(
            "Candidate",
            "update",
            metadata={"statusChange": True, "agentIds": ["a1"], "hrIds": ["h1"]},
        )
    )

    assert draft.type is NotificationType.CANDIDATE_STATUS_CHANGE
    assert draft.priority is NotificationPriority.HIGH
    assert draft.recipients == [
        Direct(id="100", role=UserRole.CANDIDATE),
        Direct(id="a1", role=UserRole.AGENT),
        Direct(id="h1", role=UserRole.HR),
    ]


def test_application_updated_requires_status_change() -> None:
    assert map_event(_event("Application", "update", metadata={"candidateId": "c1"})) is None

    draft = map_event(
        _event(
            "Application",
            "update",
            metadata={
                "statusChange": True,
                "oldStatus": "applied",
                "newStatus": "interview",
                "candidateId": "c1",
                "agentIds": ["a1"],
            },
        )
    )

    assert draft.type is NotificationType.CANDIDATE_STATUS_CHANGE
    assert draft.priority is NotificationPriority.HIGH
    assert draft.message == "Application status has been updated from applied to interview"
    assert draft.recipients == [
        Direct(id="c1", role=UserRole.CANDIDATE),
        Direct(id="a1", role=UserRole.AGENT),
    ]
    assert draft.action_url == "/applications/100"


def test_interview_created_reaches_participants_and_admins() -> None:
    draft = map_event(
        _event(
            "Interview",
            "create",
            metadata={
                "candidateUserId": "c1",
                "assignedAgentId": "a1",
                "candidateName": "Ana",
                "createdByName": "Bob",
                "interviewType": "technical",
            },
        )
    )

    assert draft.type is NotificationType.INTERVIEW_SCHEDULE
    assert draft.priority is NotificationPriority.HIGH
    assert draft.message == "Bob scheduled a technical interview for Ana"
    assert draft.recipients == [
        Direct(id="c1", role=UserRole.CANDIDATE),
        Direct(id="a1", role=UserRole.AGENT),
        Broadcast(role=UserRole.ADMIN),
        Broadcast(role=UserRole.SUPERADMIN),
    ]


def test_interview_deleted_without_participants_reaches_admins() -> None:
    draft = map_event(_event("Interview", "delete", metadata={}))

    assert draft.type is NotificationType.INTERVIEW_UPDATE
    assert draft.priority is NotificationPriority.HIGH
    assert draft.message == "Someone deleted interview"
    assert draft.recipients == [
        Broadcast(role=UserRole.ADMIN),
        Broadcast(role=UserRole.SUPERADMIN),
    ]
    assert draft.action_url == "/interviews"


def test_interview_status_change_without_values_reads_cleanly() -> None:
    draft = map_event(
        _event(
            "Interview",
            "update",
            metadata={"statusChanged": True, "updatedByName": "Bob", "candidateName": "Ana"},
        )
    )
    partial = map_event(
        _event(
            "Interview",
            "update",
            metadata={"statusChanged": True, "updatedByName": "Bob", "newStatus": "done"},
        )
    )

    assert draft.message == "Bob changed interview status for Ana"
    assert partial.message == 'Bob changed interview status to "done"'
    assert "None" not in draft.message


def test_agent_assignment_deleted_notifies_actor_and_admins() -> None:
    draft = map_event(_event("AgentAssignment", "delete"))

    assert draft.type is NotificationType.AGENT_ASSIGN
    assert draft.priority is NotificationPriority.HIGH
    assert draft.recipients == [
        Direct(id="7", role=UserRole.ADMIN),
        Broadcast(role=UserRole.ADMIN),
        Broadcast(role=UserRole.SUPERADMIN),
    ]
    assert draft.metadata == {"deletedBy": "7"}


@pytest.mark.parametrize(("entity_type", "action"), sorted(TEMPLATES))
def test_templates_tolerate_malformed_payloads(entity_type: str, action: str) -> None:
    event = _event(entity_type, action, metadata="not-a-dict", after=["unexpected"])

    draft = map_event(event)

    assert draft is None or draft.entity_id == "100"


def test_string_id_lists_produce_no_recipients() -> None:
    draft = map_event(_event("Company", "update", metadata={"hrIds": "h1"}))

    assert draft.recipients == [Direct(id="7", role=UserRole.ADMIN)]
