"""Implementation of RoomDirectory that keeps all rooms in process memory"""

import logging
import random
import string
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from src.core.config import (
    FINISHED_ROOM_TTL_SEC,
    IDLE_ROOM_TTL_SEC,
    MAX_GRID_SIZE,
    MIN_GRID_SIZE,
    ROOM_ID_LENGTH,
)
from src.core.exceptions import (
    InvalidRequestError,
    RoomFullError,
    RoomNotFoundError,
)
from src.core.shared_types import Status
from src.dots.game import Game

logger = logging.getLogger(__name__)

ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits
MAX_ID_ATTEMPTS = 20

Clock = Callable[[], float]


def normalize_room_id(room_id: str) -> str:
    """Room IDs are typed in by people: ignore case and stray whitespace."""
    return room_id.strip().upper()


@dataclass
class _RoomEntry:
    game: Game
    last_activity: float


class InMemoryRoomDirectory:
    """
    Rooms are held in a dict guarded by a single lock.
    ----

    The lock only protects the mapping itself (registration, lookup, eviction).
    Each Game serialises its own operations, so rooms never wait on each other.
    """

    def __init__(
        self,
        min_grid_size: int = MIN_GRID_SIZE,
        max_grid_size: int = MAX_GRID_SIZE,
        room_id_length: int = ROOM_ID_LENGTH,
        finished_room_ttl: float = FINISHED_ROOM_TTL_SEC,
        idle_room_ttl: float = IDLE_ROOM_TTL_SEC,
        clock: Clock = time.monotonic,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.min_grid_size = min_grid_size
        self.max_grid_size = max_grid_size
        self.room_id_length = room_id_length
        self.finished_room_ttl = finished_room_ttl
        self.idle_room_ttl = idle_room_ttl
        self._clock = clock
        self._rng = rng or random.SystemRandom()
        self._rooms: dict[str, _RoomEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        with self._lock:
            return normalize_room_id(room_id) in self._rooms

    def create_room(self, initial_player_id: str, grid_size: int) -> str:
        """Create a new game, seat its first player and return the new room ID."""
        self._validate_grid_size(grid_size)
        self.evict_expired()

        with self._lock:
            room_id = self._generate_room_id()
            game = Game.new_game(room_id=room_id, grid_size=grid_size)
            game.add_player(initial_player_id)
            self._rooms[room_id] = _RoomEntry(game=game, last_activity=self._clock())

        logger.info("Room %s created by %s (grid %d)", room_id, initial_player_id, grid_size)
        return room_id

    def join_room(self, room_id: str, player_id: str) -> Game:
        """Seat the player in an existing room. Raises RoomNotFoundError / RoomFullError."""
        with self._lock:
            entry = self._rooms.get(normalize_room_id(room_id))
            if entry is None:
                raise RoomNotFoundError(f"Room {room_id!r} not found.")
            entry.last_activity = self._clock()

        if not entry.game.add_player(player_id):
            raise RoomFullError(f"Room {entry.game.room_id} is full.")

        logger.info("Player %s joined room %s", player_id, entry.game.room_id)
        return entry.game

    def get_game(self, room_id: str) -> Game | None:
        """Get the game by room ID, if it exists."""
        with self._lock:
            entry = self._rooms.get(normalize_room_id(room_id))
        return entry.game if entry else None

    def remove_room(self, room_id: str) -> Game | None:
        """Drop a room from the directory."""
        with self._lock:
            entry = self._rooms.pop(normalize_room_id(room_id), None)
        if entry is None:
            return None
        logger.info("Room %s removed", entry.game.room_id)
        return entry.game

    def touch(self, room_id: str) -> None:
        """Record activity in a room (resets its idle time)."""
        with self._lock:
            entry = self._rooms.get(normalize_room_id(room_id))
            if entry is not None:
                entry.last_activity = self._clock()

    def evict_expired(self) -> list[str]:
        """
        Remove rooms nobody will play in anymore
        ----

        * finished, and idle for at least finished_room_ttl
        * no live players, and idle for at least idle_room_ttl
        * no players at all
        """
        now = self._clock()
        with self._lock:
            expired = [
                room_id
                for room_id, entry in self._rooms.items()
                if self._is_expired(entry, now)
            ]
            for room_id in expired:
                del self._rooms[room_id]

        for room_id in expired:
            logger.info("Room %s evicted", room_id)
        return expired

    # --- PRIVATE HELPERS ---
    def _validate_grid_size(self, grid_size: int) -> None:
        if not self.min_grid_size <= grid_size <= self.max_grid_size:
            raise InvalidRequestError(
                f"Grid size must be between {self.min_grid_size} and {self.max_grid_size}, got {grid_size}."
            )

    def _generate_room_id(self) -> str:
        """Caller must hold the lock, so the ID is still unused when it gets registered."""
        for _ in range(MAX_ID_ATTEMPTS):
            room_id = "".join(self._rng.choices(ROOM_ID_ALPHABET, k=self.room_id_length))
            if room_id not in self._rooms:
                return room_id
        raise RuntimeError("Unable to allocate a free room ID.")

    def _is_expired(self, entry: _RoomEntry, now: float) -> bool:
        game = entry.game
        idle_for = now - entry.last_activity
        if not game.seats:
            return True
        if game.status == Status.FINISHED and idle_for >= self.finished_room_ttl:
            return True
        return not game.has_live_players and idle_for >= self.idle_room_ttl
