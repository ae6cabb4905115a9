"""
Boundary layer data model(s).

These objects are what the Game hands over to the Service.
Both the API layer (higher) and the domain layer (lower) use them, which keeps the
engine's internal containers from leaking across the boundary.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.core.shared_types import ErrorKind, Seat, Status

# Type aliases to make the models easier to read
PlayerId = str
EdgeKey = str
BoxKey = str


@dataclass(frozen=True)
class PlayerInfo:
    id: PlayerId
    seat: Seat
    connected: bool


@dataclass(frozen=True)
class GameState:
    """Point-in-time snapshot of a single room. Never shares containers with the Game it came from."""

    room_id: str
    players: list[PlayerInfo]
    grid_size: int
    edges: list[EdgeKey]
    boxes: dict[BoxKey, PlayerId]
    scores: dict[PlayerId, int]
    current_turn: Optional[PlayerId]
    winner: Optional[str]
    status: Status


@dataclass(frozen=True)
class MoveResult:
    valid: bool
    completed_boxes: int = 0
    next_turn: Optional[PlayerId] = None
    error: Optional[ErrorKind] = None
    message: str = field(default="", compare=False)
