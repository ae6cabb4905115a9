"""
The Game class is the entrypoint into the domain layer for the service layer.
It owns the state of a single room and is the only place that state gets mutated:
seating players, validating and applying moves, scoring boxes and ending the game.
The service layer only ever sees GameState snapshots and MoveResults.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.exceptions import (
    EdgeTakenError,
    GameError,
    GameNotActiveError,
    InvalidEdgeError,
    InvalidRequestError,
    NotYourTurnError,
)
from src.core.models import GameState, MoveResult
from src.core.shared_types import DRAW, SEAT_ORDER, Seat, Status
from src.dots.edge import (
    Edge,
    Point,
    box_edges,
    candidate_boxes,
    is_box_on_grid,
    total_boxes,
    total_edges,
)
from src.dots.player import Player

logger = logging.getLogger(__name__)

# A single box needs two dots per side
MIN_GRID_SIZE = 2


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    room_id: str
    grid_size: int
    seats: dict[Seat, Player] = field(default_factory=dict)
    edges: dict[Edge, str] = field(default_factory=dict)  # claim order, edge -> who drew it
    boxes: dict[Point, str] = field(default_factory=dict)
    scores: dict[str, int] = field(default_factory=dict)
    turn: Seat = Seat.P1
    status: Status = Status.WAITING
    winner: Optional[str] = None
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False, compare=False
    )

    @classmethod
    def new_game(cls, room_id: str, grid_size: int) -> Self:
        """An empty grid, waiting for its players."""
        if grid_size < MIN_GRID_SIZE:
            raise InvalidRequestError(
                f"Grid size must be at least {MIN_GRID_SIZE} dots per side, got {grid_size}."
            )
        return cls(room_id=room_id, grid_size=grid_size)

    # --- DERIVED PROPERTIES ---
    @property
    def total_boxes(self) -> int:
        return total_boxes(self.grid_size)

    @property
    def total_edges(self) -> int:
        return total_edges(self.grid_size)

    @property
    def claimed_boxes(self) -> int:
        return len(self.boxes)

    @property
    def player_ids(self) -> list[str]:
        return [player.id for player in self.seats.values()]

    @property
    def is_full(self) -> bool:
        return len(self.seats) == len(SEAT_ORDER)

    @property
    def has_live_players(self) -> bool:
        return any(player.connected for player in self.seats.values())

    @property
    def current_turn(self) -> Optional[str]:
        """Player id holding the turn. None if nobody sits in the turn seat (yet, or anymore)."""
        player = self.seats.get(self.turn)
        return player.id if player else None

    # --- PLAYERS ---
    def add_player(self, player_id: str) -> bool:
        """
        Seat a player
        ----

        * already seated: mark live again and accept (a refresh of the client ends up here)
        * game over: reject, a finished game never takes new players
        * both seats taken: reject, room is full
        * otherwise take the first free seat. Filling the second seat starts the game, P1 to move.
        """
        with self._lock:
            seat = self._find_seat(player_id)
            if seat is not None:
                self.seats[seat].connected = True
                return True

            if self.status == Status.FINISHED or self.is_full:
                return False

            new_seat = next(s for s in SEAT_ORDER if s not in self.seats)
            self.seats[new_seat] = Player(id=player_id, seat=new_seat)
            self.scores[player_id] = 0

            if self.is_full and self.status == Status.WAITING:
                self.turn = Seat.P1
                self._change_status(Status.PLAYING)
                logger.info("Room %s: game started on a %dx%d grid", self.room_id, self.grid_size, self.grid_size)
            return True

    def remove_player(self, player_id: str) -> None:
        """
        A player left the room
        ----

        * waiting: the seat is freed again
        * playing: the seat is freed and the game ends, without a winner
        * finished: nothing changes except the player is marked as gone
        """
        with self._lock:
            seat = self._find_seat(player_id)
            if seat is None:
                return

            if self.status == Status.FINISHED:
                self.mark_disconnected(player_id)
                return

            del self.seats[seat]
            if self.status == Status.PLAYING:
                # score entry is kept: the boxes this player owns still count
                self._change_status(Status.FINISHED)
                logger.info("Room %s: %s left mid-game, game over", self.room_id, player_id)
            else:
                self.scores.pop(player_id, None)

    def mark_disconnected(self, player_id: str) -> None:
        """Connection dropped, but the seat is kept."""
        with self._lock:
            seat = self._find_seat(player_id)
            if seat is not None:
                self.seats[seat].connected = False

    # --- MOVES ---
    def make_move(self, player_id: str, edge: Edge) -> MoveResult:
        """
        Attempt to claim an edge
        -----

        1. the game must be in progress
        2. it must be your turn
        3. the edge must connect two neighbouring dots on the grid
        4. the edge must not be claimed yet

        Raises the matching GameError on the first failed check (nothing gets changed in that case).
        Completing a box lets you go again, otherwise the turn passes to your opponent.
        """
        with self._lock:
            # make sure the game is (still) in progress
            if self.status != Status.PLAYING:
                raise GameNotActiveError(f"Game is not active. status: {self.status}")

            # make sure it is your turn
            self._assert_your_turn(player_id)

            # NOTE: Edge is canonical by construction, so the lookups below are orientation-independent
            if not edge.is_valid(self.grid_size):
                raise InvalidEdgeError(
                    f"{edge.key} does not connect two neighbouring dots on a {self.grid_size}x{self.grid_size} grid."
                )
            if edge in self.edges:
                raise EdgeTakenError(f"Edge {edge.key} has already been claimed.")

            self.edges[edge] = player_id
            completed = self._claim_completed_boxes(edge, player_id)

            if not completed:
                self.turn = self.turn.other

            self._update_game_status()

            return MoveResult(
                valid=True,
                completed_boxes=len(completed),
                next_turn=self.current_turn,
            )

    def attempt_move(self, player_id: str, edge: Edge) -> MoveResult:
        """Same as make_move, but reports a rejected move in the MoveResult instead of raising."""
        try:
            return self.make_move(player_id, edge)
        except GameError as exc:
            logger.debug("Room %s: move %s by %s rejected: %s", self.room_id, edge.key, player_id, exc)
            return MoveResult(valid=False, error=exc.kind, message=str(exc))

    # --- SNAPSHOT ---
    def get_state(self) -> GameState:
        """Fresh copies of everything. Later moves never show up in an earlier snapshot."""
        with self._lock:
            return GameState(
                room_id=self.room_id,
                players=[self.seats[seat].to_info() for seat in SEAT_ORDER if seat in self.seats],
                grid_size=self.grid_size,
                edges=[edge.key for edge in self.edges],
                boxes={box.to_key(): owner for box, owner in self.boxes.items()},
                scores=dict(self.scores),
                current_turn=self.current_turn,
                winner=self.winner,
                status=self.status,
            )

    # -- PRIVATE HELPERS ---
    def _find_seat(self, player_id: str) -> Optional[Seat]:
        return next(
            (seat for seat, player in self.seats.items() if player.id == player_id),
            None,
        )

    def _assert_your_turn(self, player_id: str) -> None:
        """You must wait for your turn before drawing a line."""
        player_to_move = self.current_turn
        if player_id != player_to_move:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for player {player_to_move} to make a move first."
            )

    def _is_box_complete(self, top_left: Point) -> bool:
        if not is_box_on_grid(top_left, self.grid_size):
            return False
        return all(side in self.edges for side in box_edges(top_left))

    def _claim_completed_boxes(self, edge: Edge, player_id: str) -> list[Point]:
        """
        Only the boxes touching the new edge can have been completed by it,
        so there is no need to rescan the whole board.
        """
        completed: list[Point] = []
        for box in candidate_boxes(edge, self.grid_size):
            if box in self.boxes:
                continue
            if self._is_box_complete(box):
                self.boxes[box] = player_id
                self.scores[player_id] = self.scores.get(player_id, 0) + 1
                completed.append(box)
        return completed

    def _update_game_status(self) -> None:
        """All boxes claimed? Game over. Strictly higher score wins, equal scores is a draw."""
        if self.claimed_boxes < self.total_boxes:
            return

        self.winner = self._determine_winner()
        self._change_status(Status.FINISHED)
        logger.info("Room %s: game finished, winner: %s", self.room_id, self.winner)

    def _determine_winner(self) -> str:
        first = self.seats[Seat.P1].id
        second = self.seats[Seat.P2].id
        if self.scores[first] > self.scores[second]:
            return first
        if self.scores[second] > self.scores[first]:
            return second
        return DRAW

    def _change_status(self, new_status: Status) -> None:
        self.status = new_status
