"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/helpers required for testing multiple layers.
"""

from typing import Iterator

import pytest

from src.dots.edge import Edge
from src.dots.game import Game
from src.rooms.memory_directory import InMemoryRoomDirectory
from src.services.dots_service import DotsService

ALICE = "alice"
BOB = "bob"


class FakeClock:
    """Time only moves when a test says so."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def edge(x1: int, y1: int, x2: int, y2: int) -> Edge:
    """Shorthand used all over the tests"""
    return Edge.from_coordinates(x1, y1, x2, y2)


def new_playing_game(grid_size: int = 3, room_id: str = "ROOM01") -> Game:
    """A game with alice (P1) and bob (P2) seated, alice to move."""
    game = Game.new_game(room_id=room_id, grid_size=grid_size)
    game.add_player(ALICE)
    game.add_player(BOB)
    return game


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def directory(clock: FakeClock) -> Iterator[InMemoryRoomDirectory]:
    """Isolated directory per test, with a clock the test controls."""
    yield InMemoryRoomDirectory(
        min_grid_size=2,
        max_grid_size=20,
        finished_room_ttl=300,
        idle_room_ttl=1800,
        clock=clock,
    )


@pytest.fixture
def service(directory: InMemoryRoomDirectory) -> DotsService:
    return DotsService(directory, default_grid_size=5)


@pytest.fixture
def playing_game() -> Game:
    return new_playing_game()
