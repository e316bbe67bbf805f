"""Map domain mutation events to notification drafts.

Each recognized ``(entity type, action)`` pair has one template function in
:data:`TEMPLATES`. Templates are pure: they only read the event, never the
database, and return ``None`` when the event does not meet their condition.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable

from app.domain.entities import (
    AuditAction,
    Broadcast,
    Direct,
    MutationEvent,
    NotificationDraft,
    NotificationPriority,
    NotificationType,
    RecipientSpec,
    UserRole,
)

logger = logging.getLogger(__name__)

Template = Callable[[MutationEvent], "NotificationDraft | None"]


def map_event(event: MutationEvent) -> NotificationDraft | None:
    """Return the draft ``event`` produces, or ``None`` when it produces nothing."""

    key = (_normalize(event.entity_type), _normalize(event.action))
    template = TEMPLATES.get(key)
    if template is None:
        logger.debug(
            "No notification mapping for entity type %s and action %s",
            event.entity_type,
            event.action,
        )
        return None

    draft = template(event)
    if draft is None:
        logger.debug(
            "Event %s/%s on %s does not qualify for a notification",
            event.entity_type,
            event.action,
            event.entity_id,
        )
    return draft


def is_recognized(entity_type: str, action: str | AuditAction) -> bool:
    return (_normalize(entity_type), _normalize(action)) in TEMPLATES


# -- helpers ---------------------------------------------------------------


def _normalize(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    return str(value or "").strip().lower()


def _metadata(event: MutationEvent) -> dict[str, Any]:
    return event.metadata if isinstance(event.metadata, dict) else {}


def _after(event: MutationEvent) -> dict[str, Any]:
    return event.after if isinstance(event.after, dict) else {}


def _as_role(value: Any) -> UserRole | None:
    try:
        return UserRole(_normalize(value))
    except ValueError:
        return None


def _direct(user_id: Any, role: UserRole | None) -> list[RecipientSpec]:
    if user_id in (None, "") or role is None:
        return []
    return [Direct(id=str(user_id), role=role)]


def _directs(user_ids: Any, role: UserRole) -> list[RecipientSpec]:
    """One :class:`Direct` per id in ``user_ids``; anything but a list yields none."""

    if not isinstance(user_ids, (list, tuple)):
        return []
    specs: list[RecipientSpec] = []
    for user_id in user_ids:
        specs.extend(_direct(user_id, role))
    return specs


def _broadcast(*roles: UserRole) -> list[RecipientSpec]:
    return [Broadcast(role=role) for role in roles]


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _pluralize(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def _transition(subject: str, old: Any, new: Any) -> str:
    if old is not None and new is not None:
        return f"{subject} has been updated from {old} to {new}"
    if new is not None:
        return f"{subject} has been updated to {new}"
    return f"{subject} has been updated"


def _count(value: Any) -> int:
    return len(value) if isinstance(value, (list, tuple)) else 0


def _draft(
    event: MutationEvent,
    *,
    entity_type: str,
    type: NotificationType,
    title: str,
    message: str,
    recipients: Iterable[RecipientSpec],
    metadata: dict[str, Any],
    priority: NotificationPriority,
    action_url: str | None = None,
) -> NotificationDraft:
    return NotificationDraft(
        type=type,
        title=title,
        message=message,
        recipients=list(recipients),
        entity_type=entity_type,
        entity_id=str(event.entity_id),
        metadata=_compact(metadata),
        priority=priority,
        action_url=action_url,
    )


# -- users -----------------------------------------------------------------


def user_created(event: MutationEvent) -> NotificationDraft:
    after = _after(event)
    email = after.get("email")
    role = after.get("role") or _metadata(event).get("role")
    message = "A new user has registered"
    if email:
        message = f"{message}: {email}"
    return _draft(
        event,
        entity_type="User",
        type=NotificationType.USER_SIGNUP,
        title="New User Registration",
        message=message,
        recipients=_broadcast(UserRole.ADMIN),
        metadata={"email": email, "role": _normalize(role) or None},
        priority=NotificationPriority.MEDIUM,
    )


def user_updated(event: MutationEvent) -> NotificationDraft | None:
    metadata = _metadata(event)
    if not metadata.get("roleChange"):
        return None
    old_role = metadata.get("oldRole")
    new_role = metadata.get("newRole")
    user_role = _as_role(_after(event).get("role") or metadata.get("role") or new_role)
    return _draft(
        event,
        entity_type="User",
        type=NotificationType.USER_ROLE_CHANGE,
        title="User Role Updated",
        message=_transition("User role", old_role, new_role),
        recipients=[
            *_direct(event.entity_id, user_role),
            *_direct(event.actor, UserRole.ADMIN),
        ],
        metadata={"oldRole": old_role, "newRole": new_role},
        priority=NotificationPriority.HIGH,
    )


def user_deleted(event: MutationEvent) -> NotificationDraft:
    email = _metadata(event).get("email")
    message = "User account has been deleted"
    if email:
        message = f"{message}: {email}"
    return _draft(
        event,
        entity_type="User",
        type=NotificationType.USER_STATUS_CHANGE,
        title="User Account Deleted",
        message=message,
        recipients=_direct(event.actor, UserRole.ADMIN),
        metadata={"email": email},
        priority=NotificationPriority.HIGH,
    )


# -- companies -------------------------------------------------------------


def company_created(event: MutationEvent) -> NotificationDraft:
    metadata = _metadata(event)
    name = _after(event).get("name") or metadata.get("name")
    message = "A new company has been created"
    if name:
        message = f"{message}: {name}"
    return _draft(
        event,
        entity_type="Company",
        type=NotificationType.COMPANY_CREATE,
        title="New Company Created",
        message=message,
        recipients=_broadcast(UserRole.ADMIN),
        metadata={
            "companyName": name,
            "companyCustomId": metadata.get("companyCustomId"),
            "creatorId": str(event.actor) if event.actor else None,
            "creatorCustomId": metadata.get("creatorCustomId"),
            "creatorName": metadata.get("creatorName") or "Unknown User",
            "creatorRole": metadata.get("creatorRole"),
        },
        priority=NotificationPriority.MEDIUM,
    )


def company_updated(event: MutationEvent) -> NotificationDraft:
    metadata = _metadata(event)
    name = metadata.get("name") or _after(event).get("name")
    message = "Company details have been updated"
    if name:
        message = f"{message}: {name}"
    return _draft(
        event,
        entity_type="Company",
        type=NotificationType.COMPANY_UPDATE,
        title="Company Details Updated",
        message=message,
        recipients=[
            *_direct(event.actor, UserRole.ADMIN),
            *_directs(metadata.get("hrIds"), UserRole.HR),
        ],
        metadata={"companyName": name},
        priority=NotificationPriority.MEDIUM,
    )


# -- jobs ------------------------------------------------------------------


def job_created(event: MutationEvent) -> NotificationDraft:
    after = _after(event)
    metadata = _metadata(event)
    title = after.get("title") or metadata.get("title")
    message = "A new job has been posted"
    if title:
        message = f"{message}: {title}"
    return _draft(
        event,
        entity_type="Job",
        type=NotificationType.JOB_CREATE,
        title="New Job Posted",
        message=message,
        recipients=_broadcast(UserRole.SUPERADMIN, UserRole.ADMIN, UserRole.AGENT),
        metadata={
            "jobTitle": title,
            "jobCustomId": metadata.get("jobCustomId"),
            "companyId": after.get("companyId"),
            "creatorId": str(event.actor) if event.actor else None,
            "creatorCustomId": metadata.get("creatorCustomId"),
            "creatorName": metadata.get("creatorName") or "Unknown User",
            "creatorRole": metadata.get("creatorRole"),
        },
        priority=NotificationPriority.MEDIUM,
        action_url=f"/jobs/{event.entity_id}",
    )


def job_updated(event: MutationEvent) -> NotificationDraft | None:
    metadata = _metadata(event)
    if not metadata.get("statusChange"):
        return None
    old_status = metadata.get("oldStatus")
    new_status = metadata.get("newStatus")
    return _draft(
        event,
        entity_type="Job",
        type=NotificationType.JOB_STATUS_CHANGE,
        title="Job Status Updated",
        message=_transition("Job status", old_status, new_status),
        recipients=[
            *_direct(event.actor, UserRole.ADMIN),
            *_directs(metadata.get("hrIds"), UserRole.HR),
            *_directs(metadata.get("agentIds"), UserRole.AGENT),
        ],
        metadata={
            "jobTitle": metadata.get("title"),
            "oldStatus": old_status,
            "newStatus": new_status,
        },
        priority=NotificationPriority.HIGH,
        action_url=f"/jobs/{event.entity_id}",
    )


# -- candidates and applications -------------------------------------------


def candidate_assigned(event: MutationEvent) -> NotificationDraft:
    metadata = _metadata(event)
    assigned_to = metadata.get("assignedTo")
    message = "Candidate has been assigned"
    if assigned_to:
        message = f"{message} to {assigned_to}"
    return _draft(
        event,
        entity_type="Candidate",
        type=NotificationType.CANDIDATE_ASSIGN,
        title="Candidate Assigned",
        message=message,
        recipients=[
            *_direct(metadata.get("assignedToId"), UserRole.AGENT),
            *_broadcast(UserRole.ADMIN),
        ],
        metadata={
            "candidateName": metadata.get("candidateName"),
            "assignedTo": assigned_to,
        },
        priority=NotificationPriority.HIGH,
        action_url=f"/candidates/{event.entity_id}",
    )


def candidate_updated(event: MutationEvent) -> NotificationDraft | None:
    metadata = _metadata(event)
    if not metadata.get("statusChange"):
        return None
    old_status = metadata.get("oldStatus")
    new_status = metadata.get("newStatus")
    return _draft(
        event,
        entity_type="Candidate",
        type=NotificationType.CANDIDATE_STATUS_CHANGE,
        title="Candidate Status Updated",
        message=_transition("Candidate status", old_status, new_status),
        recipients=[
            *_direct(event.entity_id, UserRole.CANDIDATE),
            *_directs(metadata.get("agentIds"), UserRole.AGENT),
            *_directs(metadata.get("hrIds"), UserRole.HR),
        ],
        metadata={
            "candidateName": metadata.get("candidateName"),
            "oldStatus": old_status,
            "newStatus": new_status,
        },
        priority=NotificationPriority.HIGH,
        action_url=f"/candidates/{event.entity_id}",
    )


def application_updated(event: MutationEvent) -> NotificationDraft | None:
    metadata = _metadata(event)
    if not metadata.get("statusChange"):
        return None
    old_status = metadata.get("oldStatus")
    new_status = metadata.get("newStatus")
    return _draft(
        event,
        entity_type="Application",
        type=NotificationType.CANDIDATE_STATUS_CHANGE,
        title="Application Status Updated",
        message=_transition("Application status", old_status, new_status),
        recipients=[
            *_direct(metadata.get("candidateId"), UserRole.CANDIDATE),
            *_directs(metadata.get("agentIds"), UserRole.AGENT),
            *_directs(metadata.get("hrIds"), UserRole.HR),
        ],
        metadata={
            "jobTitle": metadata.get("jobTitle"),
            "candidateName": metadata.get("candidateName"),
            "oldStatus": old_status,
            "newStatus": new_status,
        },
        priority=NotificationPriority.HIGH,
        action_url=f"/applications/{event.entity_id}",
    )


def candidate_assignment_updated(event: MutationEvent) -> NotificationDraft | None:
    metadata = _metadata(event)
    if not metadata.get("candidateStatusChanged"):
        return None
    candidate_name = metadata.get("candidateName") or "a candidate"
    old_status = metadata.get("oldCandidateStatus") or "new"
    new_status = metadata.get("newCandidateStatus") or "new"
    job_title = metadata.get("jobTitle") or ""
    assigned_to_id = metadata.get("assignedToId")
    assigned_by_id = metadata.get("assignedById")

    message = f'Candidate {candidate_name} status changed from "{old_status}" to "{new_status}"'
    if job_title and job_title != "N/A":
        message += f' for job "{job_title}"'

    return _draft(
        event,
        entity_type="CandidateAssignment",
        type=NotificationType.CANDIDATE_STATUS_CHANGE,
        title="Candidate Status Updated",
        message=message,
        recipients=[
            *_direct(assigned_to_id, UserRole.HR),
            *_direct(assigned_by_id, UserRole.AGENT),
        ],
        metadata={
            "candidateId": metadata.get("candidateId"),
            "candidateName": candidate_name,
            "candidateCustomId": metadata.get("candidateCustomId"),
            "oldStatus": old_status,
            "newStatus": new_status,
            "jobTitle": job_title,
            "jobId": metadata.get("jobCustomId"),
            "assignedToId": assigned_to_id,
            "assignedById": assigned_by_id,
        },
        priority=NotificationPriority.MEDIUM,
        action_url=f"/candidate-assignments/{event.entity_id}",
    )


# -- interviews ------------------------------------------------------------


def _interview_participants(metadata: dict[str, Any]) -> list[RecipientSpec]:
    """The candidate's own account and the agent assigned to them."""

    return [
        *_direct(metadata.get("candidateUserId"), UserRole.CANDIDATE),
        *_direct(metadata.get("assignedAgentId"), UserRole.AGENT),
    ]


def _interview_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    return {
        "candidateName": metadata.get("candidateName"),
        "candidateCustomId": metadata.get("candidateCustomId"),
        "jobTitle": metadata.get("jobTitle"),
        "jobCustomId": metadata.get("jobCustomId"),
    }


def interview_created(event: MutationEvent) -> NotificationDraft:
    metadata = _metadata(event)
    after = _after(event)
    interview_type = metadata.get("interviewType") or after.get("type")
    scheduled_by = metadata.get("createdByName") or "Someone"
    message = f"{scheduled_by} scheduled a {interview_type or 'new'} interview"
    if metadata.get("candidateName"):
        message += f" for {metadata['candidateName']}"
    return _draft(
        event,
        entity_type="Interview",
        type=NotificationType.INTERVIEW_SCHEDULE,
        title="Interview Scheduled",
        message=message,
        recipients=[
            *_interview_participants(metadata),
            *_broadcast(UserRole.ADMIN, UserRole.SUPERADMIN),
        ],
        metadata={
            **_interview_metadata(metadata),
            "scheduledAt": metadata.get("scheduledAt") or after.get("scheduledAt"),
            "interviewType": interview_type,
            "interviewRound": metadata.get("interviewRound"),
        },
        priority=NotificationPriority.HIGH,
        action_url=f"/interviews/{event.entity_id}",
    )


def interview_updated(event: MutationEvent) -> NotificationDraft:
    metadata = _metadata(event)
    updated_by = metadata.get("updatedByName") or "Someone"
    candidate = metadata.get("candidateName")
    suffix = f" for {candidate}" if candidate else ""
    status_changed = bool(metadata.get("statusChanged"))
    rescheduled = bool(metadata.get("scheduledAtChanged"))

    if status_changed:
        old_status = metadata.get("oldStatus")
        new_status = metadata.get("newStatus")
        if old_status is not None and new_status is not None:
            message = (
                f'{updated_by} changed interview status from "{old_status}" '
                f'to "{new_status}"{suffix}'
            )
        elif new_status is not None:
            message = f'{updated_by} changed interview status to "{new_status}"{suffix}'
        else:
            message = f"{updated_by} changed interview status{suffix}"
    elif rescheduled:
        message = f"{updated_by} rescheduled interview{suffix}"
    else:
        message = f"{updated_by} updated interview{suffix}"

    recipients = _interview_participants(metadata)
    if status_changed or rescheduled:
        recipients.extend(_broadcast(UserRole.ADMIN, UserRole.SUPERADMIN))

    return _draft(
        event,
        entity_type="Interview",
        type=NotificationType.INTERVIEW_UPDATE,
        title="Interview Updated",
        message=message,
        recipients=recipients,
        metadata={
            **_interview_metadata(metadata),
            "statusChanged": metadata.get("statusChanged"),
            "oldStatus": metadata.get("oldStatus"),
            "newStatus": metadata.get("newStatus"),
            "scheduledAtChanged": metadata.get("scheduledAtChanged"),
            "oldScheduledAt": metadata.get("oldScheduledAt"),
            "newScheduledAt": metadata.get("newScheduledAt"),
        },
        priority=NotificationPriority.HIGH,
        action_url=f"/interviews/{event.entity_id}",
    )


def interview_deleted(event: MutationEvent) -> NotificationDraft:
    metadata = _metadata(event)
    deleted_by = metadata.get("deletedByName") or "Someone"
    message = f"{deleted_by} deleted interview"
    if metadata.get("candidateName"):
        message += f" for {metadata['candidateName']}"
    return _draft(
        event,
        entity_type="Interview",
        type=NotificationType.INTERVIEW_UPDATE,
        title="Interview Deleted",
        message=message,
        recipients=[
            *_interview_participants(metadata),
            *_broadcast(UserRole.ADMIN, UserRole.SUPERADMIN),
        ],
        metadata={
            **_interview_metadata(metadata),
            "interviewType": metadata.get("interviewType"),
        },
        priority=NotificationPriority.HIGH,
        action_url="/interviews",
    )


# -- agent assignments -----------------------------------------------------


def agent_assignment_saved(event: MutationEvent) -> NotificationDraft:
    metadata = _metadata(event)
    after = _after(event)
    agent_id = metadata.get("agentId") or after.get("agentId")
    hr_ids = metadata.get("hrIds") or after.get("assignedHRs")
    candidate_ids = metadata.get("candidateIds") or after.get("assignedCandidates")
    agent_name = metadata.get("agentName") or "Unknown Agent"
    admin_name = metadata.get("assignedByName") or "Unknown Admin"
    hr_count = _count(hr_ids)
    candidate_count = _count(candidate_ids)
    created = _normalize(event.action) == AuditAction.CREATE.value

    if created:
        message = f"{admin_name} assigned resources to agent {agent_name}"
    else:
        message = f"{admin_name} updated assignments for agent {agent_name}"
    counts = []
    if hr_count:
        counts.append(_pluralize(hr_count, "HR user"))
    if candidate_count:
        counts.append(_pluralize(candidate_count, "candidate"))
    if counts:
        message += f" ({', '.join(counts)})"

    return _draft(
        event,
        entity_type="AgentAssignment",
        type=NotificationType.AGENT_ASSIGN,
        title="Agent Assignment Created" if created else "Agent Assignment Updated",
        message=message,
        recipients=[
            *_direct(agent_id, UserRole.AGENT),
            *_directs(hr_ids, UserRole.HR),
            *_broadcast(UserRole.ADMIN, UserRole.SUPERADMIN),
        ],
        metadata={
            "agentId": str(agent_id) if agent_id else None,
            "agentName": agent_name,
            "agentCustomId": metadata.get("agentCustomId"),
            "assignedBy": metadata.get("assignedBy"),
            "assignedByName": admin_name,
            "assignedByCustomId": metadata.get("assignedByCustomId"),
            "assignedByRole": metadata.get("assignedByRole"),
            "hrCount": hr_count,
            "candidateCount": candidate_count,
            "hrIds": [str(item) for item in hr_ids] if hr_count else [],
            "candidateIds": [str(item) for item in candidate_ids] if candidate_count else [],
        },
        priority=NotificationPriority.HIGH,
        action_url=f"/users/agent-assignments/{agent_id}" if agent_id else None,
    )


def agent_assignment_deleted(event: MutationEvent) -> NotificationDraft:
    return _draft(
        event,
        entity_type="AgentAssignment",
        type=NotificationType.AGENT_ASSIGN,
        title="Agent Assignment Removed",
        message="Agent assignment has been removed",
        recipients=[
            *_direct(event.actor, UserRole.ADMIN),
            *_broadcast(UserRole.ADMIN, UserRole.SUPERADMIN),
        ],
        metadata={"deletedBy": str(event.actor) if event.actor else None},
        priority=NotificationPriority.HIGH,
    )


def _key(entity_type: str, action: AuditAction) -> tuple[str, str]:
    return entity_type.lower(), action.value


TEMPLATES: dict[tuple[str, str], Template] = {
    _key("User", AuditAction.CREATE): user_created,
    _key("User", AuditAction.UPDATE): user_updated,
    _key("User", AuditAction.DELETE): user_deleted,
    _key("Company", AuditAction.CREATE): company_created,
    _key("Company", AuditAction.UPDATE): company_updated,
    _key("Job", AuditAction.CREATE): job_created,
    _key("Job", AuditAction.UPDATE): job_updated,
    _key("Candidate", AuditAction.ASSIGN): candidate_assigned,
    _key("Candidate", AuditAction.UPDATE): candidate_updated,
    _key("Application", AuditAction.UPDATE): application_updated,
    _key("Interview", AuditAction.CREATE): interview_created,
    _key("Interview", AuditAction.UPDATE): interview_updated,
    _key("Interview", AuditAction.DELETE): interview_deleted,
    _key("AgentAssignment", AuditAction.CREATE): agent_assignment_saved,
    _key("AgentAssignment", AuditAction.UPDATE): agent_assignment_saved,
    _key("AgentAssignment", AuditAction.DELETE): agent_assignment_deleted,
    _key("CandidateAssignment", AuditAction.UPDATE): candidate_assignment_updated,
}


__all__ = ["TEMPLATES", "is_recognized", "map_event"]
