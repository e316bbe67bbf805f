"""Turn domain mutation events into per-recipient notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from datetime import timedelta

from anyio import to_thread
from sqlalchemy.orm import Session

from app.domain.entities import (
    MutationEvent,
    Notification,
    NotificationChannel,
    NotificationDraft,
)
from app.infrastructure.notifications import RealtimeDispatcher
from app.infrastructure.repositories import (
    NotificationPreferenceRepository,
    UserRepository,
)
from app.utils import now_in_app_timezone

from .preferences import PreferenceFilter
from .recipients import RecipientResolutionError, RecipientResolver
from .service import NotificationService
from .templates import map_event

logger = logging.getLogger(__name__)

ChannelSender = Callable[[Notification], None]


class NotificationFanOut:
    """Event handler wiring the mapper, resolver, preferences, store and pushes.

    ``handle`` never raises. Every recipient of one event is written in a
    single commit before any push for that event is scheduled.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        dispatcher: RealtimeDispatcher,
        *,
        default_ttl: timedelta | None = None,
        channel_senders: Mapping[NotificationChannel, ChannelSender] | None = None,
        mapper: Callable[[MutationEvent], NotificationDraft | None] = map_event,
    ) -> None:
        senders = dict(channel_senders or {})
        if NotificationChannel.IN_APP in senders:
            raise ValueError("The in-app channel is delivered by the store, not by a sender")
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._default_ttl = default_ttl
        self._channel_senders = senders
        self._mapper = mapper

    def handle(self, event: MutationEvent) -> list[Notification]:
        """Create the notifications ``event`` calls for and return them.

        Any failure is logged and yields an empty list.
        """

        try:
            draft = self._mapper(event)
        except Exception:
            logger.exception(
                "Failed to map %s/%s event on %s",
                event.entity_type,
                event.action,
                event.entity_id,
            )
            return []
        if draft is None:
            return []

        try:
            session = self._session_factory()
        except Exception:
            logger.exception("Could not open a session for %s notifications", draft.type.value)
            return []
        try:
            return self._fan_out(session, event, draft)
        except Exception:
            logger.exception(
                "Failed to handle %s/%s event on %s for notifications",
                event.entity_type,
                event.action,
                event.entity_id,
            )
            return []
        finally:
            session.close()

    async def handle_async(self, event: MutationEvent) -> list[Notification]:
        """Run :meth:`handle` in a worker thread so the event loop stays free."""

        return await to_thread.run_sync(self.handle, event)

    def _fan_out(
        self, session: Session, event: MutationEvent, draft: NotificationDraft
    ) -> list[Notification]:
        try:
            recipients = RecipientResolver(UserRepository(session)).resolve(draft.recipients)
        except RecipientResolutionError:
            logger.warning(
                "Recipient resolution failed for %s on %s %s; nothing sent",
                draft.type.value,
                draft.entity_type,
                draft.entity_id,
                exc_info=True,
            )
            return []
        if not recipients:
            logger.debug(
                "No recipients found for %s on %s %s",
                draft.type.value,
                draft.entity_type,
                draft.entity_id,
            )
            return []

        preferences = PreferenceFilter(NotificationPreferenceRepository(session))
        accepted = preferences.filter_recipients(recipients, draft.type)
        if not accepted:
            logger.debug("Every recipient of %s opted out", draft.type.value)
            return []

        if draft.expires_at is None and self._default_ttl is not None:
            draft = replace(draft, expires_at=now_in_app_timezone() + self._default_ttl)

        service = NotificationService(session, self._dispatcher)
        created = service.create_notification_for_many(accepted, draft)
        logger.info(
            "Created %d %s notifications for %s %s",
            len(created),
            draft.type.value,
            draft.entity_type,
            draft.entity_id,
        )
        self._deliver_external(created, preferences)
        return created

    def _deliver_external(
        self, notifications: Sequence[Notification], preferences: PreferenceFilter
    ) -> None:
        for channel, sender in self._channel_senders.items():
            for notification in notifications:
                if not preferences.is_channel_enabled(notification.recipient_id, channel):
                    logger.debug(
                        "User %s disabled the %s channel", notification.recipient_id, channel.value
                    )
                    continue
                try:
                    sender(notification)
                except Exception:
                    logger.exception(
                        "The %s sender failed for notification %s",
                        channel.value,
                        notification.id,
                    )


__all__ = ["ChannelSender", "NotificationFanOut"]
