"""Bookkeeping of open WebSockets per room, and pushing messages to them"""

import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Which player sits behind which socket, per room.
    ----

    Only used from the event loop. The bookkeeping methods never await, so they cannot interleave.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, dict[str, WebSocket]] = {}

    def join(self, room_id: str, player_id: str, websocket: WebSocket) -> None:
        self._rooms.setdefault(room_id, {})[player_id] = websocket

    def leave(self, room_id: str, player_id: str) -> None:
        members = self._rooms.get(room_id)
        if members is None:
            return
        members.pop(player_id, None)
        if not members:
            del self._rooms[room_id]

    def disconnect(self, player_id: str) -> list[str]:
        """Forget the player everywhere. Returns the rooms they were in."""
        rooms = [room_id for room_id, members in self._rooms.items() if player_id in members]
        for room_id in rooms:
            self.leave(room_id, player_id)
        return rooms

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> None:
        await websocket.send_json(message)

    async def broadcast(self, room_id: str, message: dict[str, Any]) -> None:
        """Push to everybody in the room. A socket that is already closed gets dropped."""
        targets = list(self._rooms.get(room_id, {}).items())
        for player_id, websocket in targets:
            try:
                await websocket.send_json(message)
            except RuntimeError as exc:
                logger.warning("Dropping closed socket of %s in room %s: %s", player_id, room_id, exc)
                self.leave(room_id, player_id)
