"""Expand recipient specs into concrete users."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from app.domain.entities import (
    Broadcast,
    ConcreteRecipient,
    Direct,
    RecipientSpec,
    UserRole,
)

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    def list_active_user_ids_by_role(self, role: UserRole) -> Sequence[str]:
        ...


class RecipientResolutionError(RuntimeError):
    """Raised when the directory could not be queried for a broadcast."""


class RecipientResolver:
    """Resolve :class:`Broadcast` specs against current role membership.

    Specs are expanded in order and the result is not de-duplicated: a user
    named directly and also reached by a broadcast appears twice.
    """

    def __init__(self, directory: UserDirectory) -> None:
        self._directory = directory

    def resolve(self, specs: Sequence[RecipientSpec]) -> list[ConcreteRecipient]:
        recipients: list[ConcreteRecipient] = []
        for spec in specs:
            if isinstance(spec, Direct):
                recipients.append(ConcreteRecipient(id=spec.id, role=spec.role))
            elif isinstance(spec, Broadcast):
                recipients.extend(self._expand(spec.role))
            else:
                raise TypeError(f"Unsupported recipient spec: {spec!r}")
        return recipients

    def _expand(self, role: UserRole) -> list[ConcreteRecipient]:
        try:
            user_ids = self._directory.list_active_user_ids_by_role(role)
        except Exception as exc:
            raise RecipientResolutionError(
                f"Could not list active users with role {role.value}"
            ) from exc
        logger.debug("Broadcast to %s resolved to %d users", role.value, len(user_ids))
        return [ConcreteRecipient(id=str(user_id), role=role) for user_id in user_ids]


__all__ = [
    "RecipientResolutionError",
    "RecipientResolver",
    "UserDirectory",
]
