"""
Custom exceptions shared by all layers.

Every exception carries an ErrorKind, which is what gets reported back to the client.
"""

from src.core.shared_types import ErrorKind


class GameError(Exception):
    """Top-level exception. Anything the engine, directory or service rejects derives from this."""

    kind: ErrorKind = ErrorKind.INVALID_REQUEST


# --- DIRECTORY ---
class RoomNotFoundError(GameError):
    kind = ErrorKind.ROOM_NOT_FOUND


class RoomFullError(GameError):
    kind = ErrorKind.ROOM_FULL


# --- ENGINE ---
class GameNotActiveError(GameError):
    kind = ErrorKind.GAME_NOT_ACTIVE


class NotYourTurnError(GameError):
    kind = ErrorKind.NOT_YOUR_TURN


class InvalidEdgeError(GameError):
    kind = ErrorKind.INVALID_EDGE


class EdgeTakenError(GameError):
    kind = ErrorKind.EDGE_TAKEN


# --- API / REQUESTS ---
class InvalidRequestError(GameError):
    kind = ErrorKind.INVALID_REQUEST
