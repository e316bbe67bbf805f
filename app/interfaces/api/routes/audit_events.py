"""Intake endpoint for mutation events emitted by the domain layer."""

from fastapi import APIRouter, BackgroundTasks, Depends, status

from app.application.use_cases.notifications import NotificationFanOut, is_recognized
from app.domain.entities import User
from app.interfaces.api.dependencies import get_notification_fan_out, require_admin
from app.interfaces.api.schemas import MutationEventAccepted, MutationEventCreate

router = APIRouter(prefix="/audit-events", tags=["audit_events"])


@router.post(
    "/",
    response_model=MutationEventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def submit_audit_event(
    payload: MutationEventCreate,
    background_tasks: BackgroundTasks,
    fan_out: NotificationFanOut = Depends(get_notification_fan_out),
    _: User = Depends(require_admin),
) -> MutationEventAccepted:
    """Queue notification fan-out for one committed mutation.

    The response does not wait for delivery; unrecognized events are
    accepted and ignored.
    """

    event = payload.to_entity()
    background_tasks.add_task(fan_out.handle, event)
    return MutationEventAccepted(
        accepted=True,
        recognized=is_recognized(event.entity_type, event.action),
    )
