"""Protocol for the room directory (the in-memory one is all we need for now)"""

from typing import Protocol

from src.dots.game import Game


class RoomDirectory(Protocol):
    """Maps room IDs to the one Game living in that room"""

    def create_room(self, initial_player_id: str, grid_size: int) -> str:
        """Create a new game, seat its first player and return the new room ID."""
        ...

    def join_room(self, room_id: str, player_id: str) -> Game:
        """Seat the player in an existing room. Raises RoomNotFoundError / RoomFullError."""
        ...

    def get_game(self, room_id: str) -> Game | None:
        """Get the game by room ID, if it exists."""
        ...

    def remove_room(self, room_id: str) -> Game | None:
        """Drop a room from the directory."""
        ...

    def touch(self, room_id: str) -> None:
        """Record activity in a room (resets its idle time)."""
        ...

    def evict_expired(self) -> list[str]:
        """Remove rooms that are finished or abandoned for too long. Returns the evicted IDs."""
        ...

    def __len__(self) -> int: ...
