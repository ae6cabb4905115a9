"""
FastAPI application: REST routes and the WebSocket the clients play over.

Both transports go through DotsService only. After every change of a room's state,
the fresh snapshot is pushed to everybody connected to that room.
"""

import json
import logging
import uuid
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.connections import ConnectionManager
from src.api.models import (
    CreateRoomRequest,
    ErrorResponse,
    GameResponse,
    GetGameRequest,
    JoinRoomRequest,
    LeaveRoomRequest,
    MoveBody,
    MoveRequest,
    MoveResponse,
    PlayerBody,
)
from src.core.config import Settings
from src.core.exceptions import GameError
from src.core.shared_types import ErrorKind
from src.rooms.directory import RoomDirectory
from src.rooms.memory_directory import InMemoryRoomDirectory
from src.services.dots_service import DotsService

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.ROOM_NOT_FOUND: 404,
    ErrorKind.ROOM_FULL: 409,
    ErrorKind.GAME_NOT_ACTIVE: 409,
    ErrorKind.NOT_YOUR_TURN: 409,
    ErrorKind.EDGE_TAKEN: 409,
    ErrorKind.INVALID_EDGE: 400,
    ErrorKind.INVALID_REQUEST: 422,
}

router = APIRouter()


def _service(request: Request) -> DotsService:
    return request.app.state.service


def _connections(request: Request) -> ConnectionManager:
    return request.app.state.connections


def _dump(model: GameResponse | MoveResponse) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def game_update(state: GameResponse) -> dict[str, Any]:
    return {"type": "game_update", "gameState": _dump(state)}


def error_message(message_type: str, exc: Exception) -> dict[str, Any]:
    kind = exc.kind if isinstance(exc, GameError) else ErrorKind.INVALID_REQUEST
    return {"type": message_type, "error": kind.value, "message": str(exc)}


async def handle_game_error(request: Request, exc: GameError) -> JSONResponse:
    body = ErrorResponse(error=exc.kind.value, detail=str(exc))
    return JSONResponse(
        status_code=ERROR_STATUS_CODES[exc.kind],
        content=body.model_dump(by_alias=True),
    )


# --- REST ROUTES ---
@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    return {"status": "ok", "rooms": _service(request).room_count()}


@router.post("/api/rooms", status_code=201)
async def create_room(request: Request, body: CreateRoomRequest) -> dict[str, Any]:
    state = _service(request).create_room(body)
    return _dump(state)


@router.get("/api/rooms/{room_id}")
async def get_room(request: Request, room_id: str) -> dict[str, Any]:
    state = _service(request).get_game_state(GetGameRequest(room_id=room_id))
    return _dump(state)


@router.post("/api/rooms/{room_id}/join")
async def join_room(request: Request, room_id: str, body: PlayerBody) -> dict[str, Any]:
    state = _service(request).join_room(
        JoinRoomRequest(room_id=room_id, player_id=body.player_id)
    )
    await _connections(request).broadcast(state.room_id, game_update(state))
    return _dump(state)


@router.post("/api/rooms/{room_id}/moves")
async def make_move(request: Request, room_id: str, body: MoveBody) -> dict[str, Any]:
    response = _service(request).make_move(
        MoveRequest(room_id=room_id, player_id=body.player_id, edge=body.edge)
    )
    state = response.game_state
    await _connections(request).broadcast(state.room_id, game_update(state))
    return _dump(response)


@router.post("/api/rooms/{room_id}/leave")
async def leave_room(request: Request, room_id: str, body: PlayerBody) -> dict[str, Any]:
    state = _service(request).leave_room(
        LeaveRoomRequest(room_id=room_id, player_id=body.player_id)
    )
    if state is None:
        return {"left": True, "gameState": None}
    await _connections(request).broadcast(state.room_id, game_update(state))
    return {"left": True, "gameState": _dump(state)}


# --- WEBSOCKET ---
class PlayerSession:
    """One WebSocket connection. The player ID lives as long as the connection does."""

    def __init__(
        self,
        websocket: WebSocket,
        service: DotsService,
        connections: ConnectionManager,
    ) -> None:
        self.websocket = websocket
        self.service = service
        self.connections = connections
        self.player_id = uuid.uuid4().hex
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[None]]] = {
            "create_room": self.on_create_room,
            "join_room": self.on_join_room,
            "make_move": self.on_make_move,
            "leave_room": self.on_leave_room,
        }

    async def run(self) -> None:
        await self.websocket.accept()
        logger.info("Player %s connected", self.player_id)
        await self.reply({"type": "connected", "playerId": self.player_id})
        try:
            while True:
                raw = await self.websocket.receive_text()
                await self.dispatch(raw)
        except WebSocketDisconnect:
            logger.info("Player %s disconnected", self.player_id)
        finally:
            await self.on_disconnect()

    async def dispatch(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except ValueError:
            await self.reply({"type": "error", "error": ErrorKind.INVALID_REQUEST.value, "message": "Message is not valid JSON."})
            return

        message_type = message.get("type") if isinstance(message, dict) else None
        handler = self._handlers.get(message_type) if isinstance(message_type, str) else None
        if handler is None:
            logger.warning("Player %s sent unknown message type %r", self.player_id, message_type)
            await self.reply(
                {"type": "error", "error": ErrorKind.INVALID_REQUEST.value, "message": f"Unknown message type: {message_type!r}"}
            )
            return
        await handler(message)

    async def reply(self, message: dict[str, Any]) -> None:
        await self.connections.send(self.websocket, message)

    # --- message handlers ---
    async def on_create_room(self, message: dict[str, Any]) -> None:
        try:
            request = CreateRoomRequest(player_id=self.player_id, grid_size=message.get("gridSize"))
            state = self.service.create_room(request)
        except (GameError, ValidationError) as exc:
            await self.reply(error_message("error", exc))
            return

        self.connections.join(state.room_id, self.player_id, self.websocket)
        await self.reply({"type": "room_created", "roomId": state.room_id, "gameState": _dump(state)})

    async def on_join_room(self, message: dict[str, Any]) -> None:
        try:
            request = JoinRoomRequest(room_id=message.get("roomId", ""), player_id=self.player_id)
            state = self.service.join_room(request)
        except (GameError, ValidationError) as exc:
            await self.reply({**error_message("joined", exc), "success": False})
            return

        self.connections.join(state.room_id, self.player_id, self.websocket)
        await self.reply({"type": "joined", "success": True, "gameState": _dump(state)})
        await self.connections.broadcast(state.room_id, game_update(state))

    async def on_make_move(self, message: dict[str, Any]) -> None:
        try:
            request = MoveRequest(
                room_id=message.get("roomId", ""),
                player_id=self.player_id,
                edge=message.get("edge"),
            )
            response = self.service.make_move(request)
        except (GameError, ValidationError) as exc:
            # only the offending player hears about a rejected move
            await self.reply(error_message("move_error", exc))
            return

        await self.connections.broadcast(response.game_state.room_id, game_update(response.game_state))

    async def on_leave_room(self, message: dict[str, Any]) -> None:
        try:
            request = LeaveRoomRequest(room_id=message.get("roomId", ""), player_id=self.player_id)
        except (GameError, ValidationError) as exc:
            await self.reply(error_message("error", exc))
            return

        self.connections.leave(request.room_id, self.player_id)
        await self._leave_and_notify(request.room_id)
        await self.reply({"type": "left", "roomId": request.room_id})

    async def on_disconnect(self) -> None:
        for room_id in self.connections.disconnect(self.player_id):
            await self._leave_and_notify(room_id)

    async def _leave_and_notify(self, room_id: str) -> None:
        state = self.service.leave_room(LeaveRoomRequest(room_id=room_id, player_id=self.player_id))
        if state is not None:
            await self.connections.broadcast(room_id, game_update(state))


@router.websocket("/ws")
async def play(websocket: WebSocket) -> None:
    session = PlayerSession(
        websocket,
        service=websocket.app.state.service,
        connections=websocket.app.state.connections,
    )
    await session.run()


# --- APP FACTORY ---
def create_app(
    settings: Optional[Settings] = None, directory: Optional[RoomDirectory] = None
) -> FastAPI:
    """Wire the app together. Tests pass their own directory (e.g. with a fake clock)."""
    settings = settings or Settings.from_env()
    if directory is None:
        directory = InMemoryRoomDirectory(
            min_grid_size=settings.min_grid_size,
            max_grid_size=settings.max_grid_size,
            room_id_length=settings.room_id_length,
            finished_room_ttl=settings.finished_room_ttl,
            idle_room_ttl=settings.idle_room_ttl,
        )

    app = FastAPI(title="Dots and Boxes", description="Two-player dots-and-boxes, played over a WebSocket")
    app.state.settings = settings
    app.state.service = DotsService(directory, default_grid_size=settings.default_grid_size)
    app.state.connections = ConnectionManager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GameError, handle_game_error)
    app.include_router(router)
    return app
