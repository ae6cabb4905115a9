"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from src.core.exceptions import InvalidRequestError
from src.core.models import GameState, MoveResult
from src.dots.edge import Edge

PlayerId = str


class CamelModel(BaseModel):
    """The client speaks camelCase JSON (roomId, gridSize, ...). Python code keeps snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_room_id(value: str) -> str:
    normalized = value.strip().upper()
    if not normalized or not normalized.isalnum():
        raise InvalidRequestError(f"Cannot interpret {value!r} as a room ID.")
    return normalized


def _validate_player_id(value: str) -> str:
    if not value.strip():
        raise InvalidRequestError("Player ID cannot be empty.")
    return value


# --- REQUEST MODELS ---
class EdgePayload(CamelModel):
    """Wire format of an edge: two dots, in any order. Whether they make a legal edge is up to the game."""

    x1: int
    y1: int
    x2: int
    y2: int

    def to_edge(self) -> Edge:
        return Edge.from_coordinates(self.x1, self.y1, self.x2, self.y2)


class CreateRoomRequest(CamelModel):
    player_id: str
    grid_size: Optional[int] = None

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: str) -> str:
        return _validate_player_id(value)


class JoinRoomRequest(CamelModel):
    room_id: str
    player_id: str

    @field_validator("room_id")
    @classmethod
    def validate_room_id(cls, value: str) -> str:
        return _validate_room_id(value)

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: str) -> str:
        return _validate_player_id(value)


class MoveRequest(CamelModel):
    room_id: str
    player_id: str
    edge: EdgePayload

    @field_validator("room_id")
    @classmethod
    def validate_room_id(cls, value: str) -> str:
        return _validate_room_id(value)


class LeaveRoomRequest(CamelModel):
    room_id: str
    player_id: str

    @field_validator("room_id")
    @classmethod
    def validate_room_id(cls, value: str) -> str:
        return _validate_room_id(value)


class GetGameRequest(CamelModel):
    room_id: str

    @field_validator("room_id")
    @classmethod
    def validate_room_id(cls, value: str) -> str:
        return _validate_room_id(value)


# --- HTTP BODIES (room ID comes from the path) ---
class PlayerBody(CamelModel):
    player_id: str


class MoveBody(CamelModel):
    player_id: str
    edge: EdgePayload


# --- RESPONSE MODELS ---
class PlayerResponse(CamelModel):
    id: PlayerId
    initials: str
    connected: bool


class GameResponse(CamelModel):
    room_id: str
    players: list[PlayerResponse]
    grid_size: int
    edges: list[str]
    boxes: dict[str, PlayerId]
    scores: dict[PlayerId, int]
    current_turn: Optional[PlayerId]
    winner: Optional[str]
    status: str

    @classmethod
    def from_state(cls, state: GameState) -> "GameResponse":
        return cls(
            room_id=state.room_id,
            players=[
                PlayerResponse(id=p.id, initials=p.seat.value, connected=p.connected)
                for p in state.players
            ],
            grid_size=state.grid_size,
            edges=state.edges,
            boxes=state.boxes,
            scores=state.scores,
            current_turn=state.current_turn,
            winner=state.winner,
            status=state.status.value,
        )


class MoveResultResponse(CamelModel):
    valid: bool
    completed_boxes: int
    next_turn: Optional[PlayerId]
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: MoveResult) -> "MoveResultResponse":
        return cls(
            valid=result.valid,
            completed_boxes=result.completed_boxes,
            next_turn=result.next_turn,
            error=result.error.value if result.error else None,
        )


class MoveResponse(CamelModel):
    result: MoveResultResponse
    game_state: GameResponse


class ErrorResponse(CamelModel):
    error: str
    detail: str
