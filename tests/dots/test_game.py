"""Unit tests for /src/dots/game.py"""

import threading

import pytest
from conftest import ALICE, BOB, edge, new_playing_game

from src.core.exceptions import (
    EdgeTakenError,
    GameNotActiveError,
    InvalidEdgeError,
    InvalidRequestError,
    NotYourTurnError,
)
from src.core.shared_types import DRAW, ErrorKind, Seat, Status
from src.dots.edge import Point, all_edges
from src.dots.game import Game


def _snapshot(game: Game) -> tuple:
    """Everything a rejected move must leave untouched."""
    return (
        dict(game.edges),
        dict(game.boxes),
        dict(game.scores),
        game.turn,
        game.status,
        game.winner,
    )


# -- CREATION / SEATING --
def test_new_game_is_waiting() -> None:
    game = Game.new_game(room_id="ABC123", grid_size=4)
    assert game.status == Status.WAITING
    assert game.seats == {}
    assert game.total_boxes == 9
    assert game.total_edges == 24
    assert game.current_turn is None


@pytest.mark.parametrize("grid_size", [-1, 0, 1])
def test_grid_too_small(grid_size: int) -> None:
    with pytest.raises(InvalidRequestError):
        Game.new_game(room_id="ABC123", grid_size=grid_size)


def test_first_player_gets_p1_and_game_keeps_waiting() -> None:
    game = Game.new_game(room_id="ABC123", grid_size=3)
    assert game.add_player(ALICE)
    assert game.seats[Seat.P1].id == ALICE
    assert game.scores == {ALICE: 0}
    assert game.status == Status.WAITING


def test_second_player_starts_the_game() -> None:
    game = new_playing_game()
    assert game.seats[Seat.P2].id == BOB
    assert game.status == Status.PLAYING
    assert game.turn == Seat.P1
    assert game.current_turn == ALICE
    assert game.scores == {ALICE: 0, BOB: 0}


def test_third_player_is_rejected() -> None:
    game = new_playing_game()
    assert not game.add_player("carol")
    assert game.player_ids == [ALICE, BOB]
    assert "carol" not in game.scores


def test_rejoining_is_idempotent() -> None:
    """Re-joining with a seated ID keeps the seat, does not create a duplicate and marks the player live."""
    game = new_playing_game()
    game.mark_disconnected(BOB)
    assert not game.seats[Seat.P2].connected

    assert game.add_player(BOB)
    assert game.seats[Seat.P2].connected
    assert game.player_ids == [ALICE, BOB]
    assert game.status == Status.PLAYING


# -- MOVE VALIDATION --
def test_cannot_move_while_waiting() -> None:
    game = Game.new_game(room_id="ABC123", grid_size=3)
    game.add_player(ALICE)
    with pytest.raises(GameNotActiveError):
        game.make_move(ALICE, edge(0, 0, 1, 0))


def test_not_your_turn(playing_game: Game) -> None:
    before = _snapshot(playing_game)
    with pytest.raises(NotYourTurnError):
        playing_game.make_move(BOB, edge(0, 0, 1, 0))
    assert _snapshot(playing_game) == before


def test_unknown_player_is_not_on_turn(playing_game: Game) -> None:
    with pytest.raises(NotYourTurnError):
        playing_game.make_move("mallory", edge(0, 0, 1, 0))


@pytest.mark.parametrize(
    "coordinates",
    [
        (0, 0, 1, 1),  # diagonal
        (0, 0, 2, 0),  # longer than one step
        (2, 2, 3, 2),  # leaves the 3x3 grid
        (0, 2, 0, 3),  # leaves the 3x3 grid
        (1, 1, 1, 1),  # a single dot
    ],
)
def test_invalid_edge(playing_game: Game, coordinates: tuple[int, int, int, int]) -> None:
    before = _snapshot(playing_game)
    with pytest.raises(InvalidEdgeError):
        playing_game.make_move(ALICE, edge(*coordinates))
    assert _snapshot(playing_game) == before


def test_edge_taken_in_either_direction(playing_game: Game) -> None:
    playing_game.make_move(ALICE, edge(0, 0, 1, 0))
    before = _snapshot(playing_game)

    with pytest.raises(EdgeTakenError):
        playing_game.make_move(BOB, edge(1, 0, 0, 0))
    assert _snapshot(playing_game) == before
    assert len(playing_game.edges) == 1


def test_validation_order_turn_before_edge(playing_game: Game) -> None:
    """Checks short-circuit: a wrong player with a bad edge hears about the turn first."""
    with pytest.raises(NotYourTurnError):
        playing_game.make_move(BOB, edge(0, 0, 5, 5))


def test_attempt_move_reports_instead_of_raising(playing_game: Game) -> None:
    result = playing_game.attempt_move(BOB, edge(0, 0, 1, 0))
    assert not result.valid
    assert result.error == ErrorKind.NOT_YOUR_TURN
    assert result.completed_boxes == 0

    result = playing_game.attempt_move(ALICE, edge(0, 0, 1, 0))
    assert result.valid
    assert result.error is None
    assert result.next_turn == BOB

    result = playing_game.attempt_move(BOB, edge(0, 0, 1, 0))
    assert result.error == ErrorKind.EDGE_TAKEN


# -- TURNS AND SCORING --
def test_turn_passes_when_no_box_completed(playing_game: Game) -> None:
    result = playing_game.make_move(ALICE, edge(0, 0, 1, 0))
    assert result.valid
    assert result.completed_boxes == 0
    assert result.next_turn == BOB
    assert playing_game.turn == Seat.P2


def test_single_box_game() -> None:
    """Smallest board: P2 draws the last side, takes the only box and wins 1-0."""
    game = new_playing_game(grid_size=2)

    assert game.make_move(ALICE, edge(0, 0, 1, 0)).next_turn == BOB
    assert game.make_move(BOB, edge(0, 0, 0, 1)).next_turn == ALICE
    assert game.make_move(ALICE, edge(1, 0, 1, 1)).next_turn == BOB
    result = game.make_move(BOB, edge(0, 1, 1, 1))

    assert result.valid
    assert result.completed_boxes == 1
    assert game.boxes == {Point(0, 0): BOB}
    assert game.scores == {ALICE: 0, BOB: 1}
    assert game.status == Status.FINISHED
    assert game.winner == BOB

    with pytest.raises(GameNotActiveError):
        game.make_move(BOB, edge(0, 0, 1, 0))


def test_one_move_completes_two_boxes() -> None:
    """Top row of a 3x3 grid: the shared middle line closes both boxes at once, and the mover goes again."""
    game = new_playing_game(grid_size=3)
    surrounding = [
        edge(0, 0, 1, 0),
        edge(1, 0, 2, 0),
        edge(0, 1, 1, 1),
        edge(1, 1, 2, 1),
        edge(0, 0, 0, 1),
        edge(2, 0, 2, 1),
    ]
    for line in surrounding:
        result = game.make_move(game.current_turn, line)
        assert result.completed_boxes == 0

    assert game.current_turn == ALICE
    result = game.make_move(ALICE, edge(1, 1, 1, 0))

    assert result.completed_boxes == 2
    assert result.next_turn == ALICE
    assert game.scores[ALICE] == 2
    assert game.boxes == {Point(0, 0): ALICE, Point(1, 0): ALICE}
    assert game.status == Status.PLAYING


def test_draw() -> None:
    """Bob already owns the bottom row. Alice closes the top row with the last line: 2-2."""
    game = new_playing_game(grid_size=3)
    last_line = edge(1, 0, 1, 1)
    game.edges = {line: BOB for line in all_edges(3) if line != last_line}
    game.boxes = {Point(0, 1): BOB, Point(1, 1): BOB}
    game.scores[BOB] = 2

    result = game.make_move(ALICE, last_line)

    assert result.completed_boxes == 2
    assert game.status == Status.FINISHED
    assert game.winner == DRAW


@pytest.mark.parametrize("grid_size", [2, 3, 4, 6])
def test_full_game_invariants(grid_size: int) -> None:
    """Claim every edge, whoever is on turn. Turn and score invariants hold after every move."""
    game = new_playing_game(grid_size=grid_size)

    for line in all_edges(grid_size):
        mover = game.current_turn
        result = game.make_move(mover, line)

        if result.completed_boxes:
            assert game.current_turn == mover
        else:
            assert game.current_turn != mover or game.status == Status.FINISHED
        assert sum(game.scores.values()) == len(game.boxes)

    assert len(game.edges) == game.total_edges
    assert game.claimed_boxes == game.total_boxes
    assert game.status == Status.FINISHED
    assert game.winner is not None


def test_box_ownership_never_changes(playing_game: Game) -> None:
    for line in [edge(0, 0, 1, 0), edge(0, 0, 0, 1), edge(1, 0, 1, 1), edge(0, 1, 1, 1)]:
        playing_game.make_move(playing_game.current_turn, line)
    owner = playing_game.boxes[Point(0, 0)]

    # the box below shares (0,1)-(1,1); completing it must not touch the first box
    for line in [edge(0, 1, 0, 2), edge(1, 1, 1, 2), edge(0, 2, 1, 2)]:
        playing_game.make_move(playing_game.current_turn, line)
    assert playing_game.boxes[Point(0, 0)] == owner
    assert Point(0, 1) in playing_game.boxes


# -- LEAVING --
def test_leaving_mid_game_finishes_without_winner(playing_game: Game) -> None:
    playing_game.make_move(ALICE, edge(0, 0, 1, 0))
    playing_game.remove_player(BOB)

    assert playing_game.status == Status.FINISHED
    assert playing_game.winner is None
    assert playing_game.player_ids == [ALICE]
    assert BOB in playing_game.scores
    with pytest.raises(GameNotActiveError):
        playing_game.make_move(ALICE, edge(1, 0, 2, 0))


def test_finished_game_takes_no_new_players(playing_game: Game) -> None:
    playing_game.make_move(ALICE, edge(0, 0, 1, 0))
    playing_game.remove_player(BOB)

    assert not playing_game.add_player("carol")
    assert not playing_game.add_player(BOB)
    assert playing_game.player_ids == [ALICE]
    assert playing_game.scores == {ALICE: 0, BOB: 0}
    assert playing_game.status == Status.FINISHED


def test_leaving_while_waiting_frees_the_seat() -> None:
    game = Game.new_game(room_id="ABC123", grid_size=3)
    game.add_player(ALICE)
    game.remove_player(ALICE)

    assert game.status == Status.WAITING
    assert game.seats == {}
    assert game.scores == {}

    assert game.add_player(BOB)
    assert game.seats[Seat.P1].id == BOB


def test_leaving_a_finished_game_only_marks_disconnected() -> None:
    game = new_playing_game(grid_size=2)
    for line in [edge(0, 0, 1, 0), edge(0, 0, 0, 1), edge(1, 0, 1, 1), edge(0, 1, 1, 1)]:
        game.make_move(game.current_turn, line)

    game.remove_player(ALICE)

    assert game.status == Status.FINISHED
    assert game.winner == BOB
    assert game.player_ids == [ALICE, BOB]
    assert not game.seats[Seat.P1].connected


def test_removing_unknown_player_is_a_noop(playing_game: Game) -> None:
    playing_game.remove_player("nobody")
    assert playing_game.status == Status.PLAYING
    assert playing_game.player_ids == [ALICE, BOB]


# -- SNAPSHOTS --
def test_state_snapshot(playing_game: Game) -> None:
    playing_game.make_move(ALICE, edge(1, 0, 0, 0))
    state = playing_game.get_state()

    assert state.room_id == "ROOM01"
    assert state.grid_size == 3
    assert [(p.id, p.seat, p.connected) for p in state.players] == [
        (ALICE, Seat.P1, True),
        (BOB, Seat.P2, True),
    ]
    assert state.edges == ["0,0-1,0"]
    assert state.boxes == {}
    assert state.scores == {ALICE: 0, BOB: 0}
    assert state.current_turn == BOB
    assert state.winner is None
    assert state.status == Status.PLAYING


def test_snapshots_are_independent(playing_game: Game) -> None:
    before = playing_game.get_state()
    before.edges.append("9,9-9,10")
    before.scores[ALICE] = 100

    playing_game.make_move(ALICE, edge(0, 0, 1, 0))
    after = playing_game.get_state()

    assert after.edges == ["0,0-1,0"]
    assert after.scores[ALICE] == 0
    assert before.current_turn == ALICE


def test_edges_listed_in_claim_order(playing_game: Game) -> None:
    lines = [edge(2, 2, 2, 1), edge(0, 0, 1, 0), edge(1, 1, 0, 1)]
    for line in lines:
        playing_game.make_move(playing_game.current_turn, line)
    assert playing_game.get_state().edges == ["2,1-2,2", "0,0-1,0", "0,1-1,1"]


# -- CONCURRENCY --
def test_concurrent_moves_are_serialised(playing_game: Game) -> None:
    """Many threads race to draw the same line for the player on turn: exactly one wins."""
    barrier = threading.Barrier(8)
    results = []

    def _attempt() -> None:
        barrier.wait()
        results.append(playing_game.attempt_move(ALICE, edge(0, 0, 1, 0)))

    threads = [threading.Thread(target=_attempt) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sum(result.valid for result in results) == 1
    assert {result.error for result in results if not result.valid} == {ErrorKind.NOT_YOUR_TURN}
    assert len(playing_game.edges) == 1
