"""Connection management helpers for notification websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Manage active websocket connections grouped by user and by role."""

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)
        self._role_connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)
        self._roles: dict[WebSocket, str] = {}

    async def connect(self, user_id: str, role: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self.register(user_id, role, websocket)

    def register(self, user_id: str, role: str, websocket: WebSocket) -> None:
        """Add an already accepted ``websocket`` to the user and role channels."""

        self._connections[str(user_id)].add(websocket)
        self._role_connections[str(role)].add(websocket)
        self._roles[websocket] = str(role)

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pools of ``user_id`` and its role."""

        key = str(user_id)
        connections = self._connections.get(key)
        if connections is not None:
            connections.discard(websocket)
            if not connections:
                self._connections.pop(key, None)

        role = self._roles.pop(websocket, None)
        if role is None:
            return
        role_connections = self._role_connections.get(role)
        if role_connections is not None:
            role_connections.discard(websocket)
            if not role_connections:
                self._role_connections.pop(role, None)

    def is_connected(self, user_id: str) -> bool:
        return bool(self._connections.get(str(user_id)))

    def has_role_connections(self, role: str) -> bool:
        return bool(self._role_connections.get(str(role)))

    def connected_users_count(self) -> int:
        return len(self._connections)

    def connected_count_by_role(self, role: str) -> int:
        return len(self._role_connections.get(str(role), ()))

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection for ``user_id``."""

        key = str(user_id)
        for connection in list(self._connections.get(key, set())):
            await self._send(key, connection, message)

    async def send_to_role(self, role: str, message: dict[str, Any]) -> None:
        for connection in list(self._role_connections.get(str(role), set())):
            await self._send(self._owner_of(connection), connection, message)

    async def send_to_all(self, message: dict[str, Any]) -> None:
        for user_id, connections in list(self._connections.items()):
            for connection in list(connections):
                await self._send(user_id, connection, message)

    async def _send(
        self, user_id: str | None, connection: WebSocket, message: dict[str, Any]
    ) -> None:
        try:
            await connection.send_json(message)
        except Exception:
            logger.debug("Dropping websocket for user %s after a failed send", user_id)
            if user_id is not None:
                self.disconnect(user_id, connection)

    def _owner_of(self, connection: WebSocket) -> str | None:
        for user_id, connections in self._connections.items():
            if connection in connections:
                return user_id
        return None


__all__ = ["NotificationConnectionManager"]
