"""Endpoints and websocket handler for user notifications."""

from __future__ import annotations

import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    DEFAULT_PAGE_SIZE,
    NotificationService,
    get_preferences,
    update_preferences,
)
from app.config import get_settings
from app.domain.entities import NotificationType, User
from app.infrastructure.database import SessionLocal, get_db
from app.infrastructure.notifications import serialize_notification
from app.interfaces.api.dependencies import (
    get_current_active_user,
    get_notification_service,
    require_admin,
    resolve_current_user,
)
from app.interfaces.api.schemas import (
    NotificationCleanupRead,
    NotificationCountRead,
    NotificationPageRead,
    NotificationPreferenceRead,
    NotificationPreferenceUpdate,
    NotificationRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
    )


@router.get("/", response_model=NotificationPageRead)
def list_notifications(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    offset: int = Query(0, ge=0),
    include_archived: bool = Query(False),
    notification_type: NotificationType | None = Query(None, alias="type"),
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> NotificationPageRead:
    """Return one newest-first page of the authenticated user's notifications."""

    limit = min(limit, get_settings().notification_page_max_limit)
    page = service.get_user_notifications(
        current_user.recipient_id,
        limit=limit,
        offset=offset,
        include_archived=include_archived,
        notification_type=notification_type,
    )
    return NotificationPageRead(
        notifications=[NotificationRead.model_validate(n) for n in page.notifications],
        has_more=page.has_more,
        offset=page.offset,
        limit=page.limit,
    )


@router.get("/unread", response_model=NotificationCountRead)
def unread_count(
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> NotificationCountRead:
    return NotificationCountRead(count=service.get_unread_count(current_user.recipient_id))


@router.put("/read-all", response_model=NotificationCountRead)
def mark_all_as_read(
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> NotificationCountRead:
    """Mark every unread notification as read and return how many changed."""

    return NotificationCountRead(count=service.mark_all_as_read(current_user.recipient_id))


@router.get("/preferences", response_model=NotificationPreferenceRead)
def read_preferences(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationPreferenceRead:
    preference = get_preferences(db, current_user.recipient_id)
    return NotificationPreferenceRead.model_validate(preference)


@router.put("/preferences", response_model=NotificationPreferenceRead)
def write_preferences(
    payload: NotificationPreferenceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationPreferenceRead:
    """Change some channel or type switches, leaving the others untouched."""

    preference = update_preferences(
        db,
        current_user.recipient_id,
        channel_preferences={
            channel.value: enabled
            for channel, enabled in (payload.channel_preferences or {}).items()
        },
        type_preferences={
            notification_type.value: enabled
            for notification_type, enabled in (payload.type_preferences or {}).items()
        },
    )
    return NotificationPreferenceRead.model_validate(preference)


@router.post("/cleanup-expired", response_model=NotificationCleanupRead)
def cleanup_expired(
    service: NotificationService = Depends(get_notification_service),
    _: User = Depends(require_admin),
) -> NotificationCleanupRead:
    return NotificationCleanupRead(deleted=service.cleanup_expired_notifications())


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_as_read(
    notification_id: int,
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    notification = service.mark_as_read(notification_id, current_user.recipient_id)
    if notification is None:
        raise _not_found()
    return NotificationRead.model_validate(notification)


@router.put("/{notification_id}/archive", response_model=NotificationRead)
def archive(
    notification_id: int,
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    notification = service.archive_notification(notification_id, current_user.recipient_id)
    if notification is None:
        raise _not_found()
    return NotificationRead.model_validate(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(
    notification_id: int,
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> Response:
    if not service.delete_notification(notification_id, current_user.recipient_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    dispatcher = websocket.app.state.realtime_dispatcher
    manager = dispatcher.manager
    token = websocket.query_params.get("token")
    if manager is None or not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
        pending = NotificationService(session, dispatcher).list_unread(user.recipient_id)
    except HTTPException:
        await websocket.close(code=1008)
        return
    except Exception:
        logger.exception("Could not open a notification session")
        await websocket.close(code=1011)
        return
    finally:
        session.close()

    user_id = user.recipient_id
    await manager.connect(user_id, user.role.alias, websocket)
    logger.debug("User %s connected to notifications", user_id)
    try:
        await websocket.send_json(
            {"type": "init", "data": [serialize_notification(n) for n in pending]}
        )
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue
            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.debug("User %s disconnected from notifications", user_id)
    finally:
        manager.disconnect(user_id, websocket)
