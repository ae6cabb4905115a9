"""Orchestration of communication from the transport layer to the game engine and room directory (and the reverse direction)."""

import logging
from typing import Optional

from src.api.models import (
    CreateRoomRequest,
    GameResponse,
    GetGameRequest,
    JoinRoomRequest,
    LeaveRoomRequest,
    MoveRequest,
    MoveResponse,
    MoveResultResponse,
)
from src.core.config import DEFAULT_GRID_SIZE
from src.core.exceptions import RoomNotFoundError
from src.dots.game import Game
from src.rooms.directory import RoomDirectory

logger = logging.getLogger(__name__)


class DotsService:
    """Orchestration of layers for dots-and-boxes rooms."""

    def __init__(
        self, directory: RoomDirectory, default_grid_size: int = DEFAULT_GRID_SIZE
    ) -> None:
        self.directory = directory
        self.default_grid_size = default_grid_size

    # -- TRANSPORT LOGIC ---
    def create_room(self, request: CreateRoomRequest) -> GameResponse:
        """A player asked for a new room. They get the first seat."""
        grid_size = self.default_grid_size if request.grid_size is None else request.grid_size
        room_id = self.directory.create_room(request.player_id, grid_size)
        game = self._fetch_game(room_id)
        return GameResponse.from_state(game.get_state())

    def join_room(self, request: JoinRoomRequest) -> GameResponse:
        """
        A player asked to join a room by its ID.
        ---
        Raises RoomNotFoundError or RoomFullError, so the caller can tell the two apart.
        """
        game = self.directory.join_room(request.room_id, request.player_id)
        return GameResponse.from_state(game.get_state())

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """
        Attempt a move.
        ---
        A rejected move raises its GameError and leaves the game untouched.
        """
        game = self._fetch_game(request.room_id)
        result = game.make_move(request.player_id, request.edge.to_edge())
        self.directory.touch(request.room_id)
        return MoveResponse(
            result=MoveResultResponse.from_result(result),
            game_state=GameResponse.from_state(game.get_state()),
        )

    def leave_room(self, request: LeaveRoomRequest) -> Optional[GameResponse]:
        """
        A player left (or their connection dropped).
        ---
        Returns the state the remaining player should see, or None if the room is gone.
        """
        game = self.directory.get_game(request.room_id)
        if game is None:
            return None
        game.remove_player(request.player_id)
        self.directory.touch(request.room_id)
        logger.info("Player %s left room %s", request.player_id, game.room_id)
        return GameResponse.from_state(game.get_state())

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """Retrieve current game state."""
        game = self._fetch_game(request.room_id)
        return GameResponse.from_state(game.get_state())

    def evict_expired_rooms(self) -> list[str]:
        return self.directory.evict_expired()

    def room_count(self) -> int:
        return len(self.directory)

    # -- Internal helpers --
    def _fetch_game(self, room_id: str) -> Game:
        """Attempt to find the game in the directory and raise error if it fails."""
        game = self.directory.get_game(room_id)
        if game is None:
            raise RoomNotFoundError(f"Room {room_id!r} not found.")
        return game
