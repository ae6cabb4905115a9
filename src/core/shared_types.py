"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class Seat(StrEnum):
    """The two fixed player slots. P1 is the first to join and always opens the game."""

    P1 = "P1"
    P2 = "P2"

    @property
    def other(self) -> "Seat":
        return Seat.P2 if self is Seat.P1 else Seat.P1


class ErrorKind(StrEnum):
    ROOM_NOT_FOUND = "RoomNotFound"
    ROOM_FULL = "RoomFull"
    GAME_NOT_ACTIVE = "GameNotActive"
    NOT_YOUR_TURN = "NotYourTurn"
    INVALID_EDGE = "InvalidEdge"
    EDGE_TAKEN = "EdgeTaken"
    INVALID_REQUEST = "InvalidRequest"


# Literal stored as the winner when both seats end with the same score
DRAW = "draw"

# Seats in the order they get assigned
SEAT_ORDER: tuple[Seat, ...] = (Seat.P1, Seat.P2)
