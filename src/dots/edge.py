"""
Grid geometry: dots, edges and boxes

Every edge gets canonicalised on construction (smaller dot first), so the same line
drawn in either direction always ends up as the same member of a set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True, order=True)
class Point:
    """A dot on the grid. Ordered lexicographically: x first, then y."""

    x: int
    y: int

    def is_within_bounds(self, grid_size: int) -> bool:
        return (0 <= self.x <= grid_size - 1) and (0 <= self.y <= grid_size - 1)

    def to_key(self) -> str:
        return f"{self.x},{self.y}"


@dataclass(frozen=True)
class Edge:
    """Line between two dots. `start` is always the smaller of the two points."""

    start: Point
    end: Point

    def __post_init__(self) -> None:
        if self.end < self.start:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    @classmethod
    def from_coordinates(cls, x1: int, y1: int, x2: int, y2: int) -> Edge:
        """Wire format: two coordinate pairs, in any order."""
        return cls(Point(x1, y1), Point(x2, y2))

    @property
    def key(self) -> str:
        return f"{self.start.to_key()}-{self.end.to_key()}"

    @property
    def is_horizontal(self) -> bool:
        return self.start.y == self.end.y and self.end.x - self.start.x == 1

    @property
    def is_vertical(self) -> bool:
        return self.start.x == self.end.x and self.end.y - self.start.y == 1

    def is_adjacent(self) -> bool:
        """Exactly one axis differs, and by exactly one. No diagonals, no long lines."""
        return self.is_horizontal or self.is_vertical

    def is_within_bounds(self, grid_size: int) -> bool:
        return self.start.is_within_bounds(grid_size) and self.end.is_within_bounds(grid_size)

    def is_valid(self, grid_size: int) -> bool:
        return self.is_adjacent() and self.is_within_bounds(grid_size)


# --- BOXES ---
def box_edges(top_left: Point) -> tuple[Edge, Edge, Edge, Edge]:
    """The four sides of the box: top, bottom, left, right"""
    x, y = top_left.x, top_left.y
    return (
        Edge(Point(x, y), Point(x + 1, y)),
        Edge(Point(x, y + 1), Point(x + 1, y + 1)),
        Edge(Point(x, y), Point(x, y + 1)),
        Edge(Point(x + 1, y), Point(x + 1, y + 1)),
    )


def is_box_on_grid(top_left: Point, grid_size: int) -> bool:
    return (0 <= top_left.x <= grid_size - 2) and (0 <= top_left.y <= grid_size - 2)


def candidate_boxes(edge: Edge, grid_size: int) -> list[Point]:
    """
    The (at most two) boxes an edge is a side of
    ----

    * horizontal edge: the box above it and the box below it
    * vertical edge: the box to its left and the box to its right

    Boxes that would fall off the board are skipped.
    """
    x, y = edge.start.x, edge.start.y
    if edge.is_horizontal:
        candidates = [Point(x, y - 1), Point(x, y)]
    else:
        candidates = [Point(x - 1, y), Point(x, y)]
    return [box for box in candidates if is_box_on_grid(box, grid_size)]


# --- GRID TOTALS ---
def total_boxes(grid_size: int) -> int:
    return (grid_size - 1) ** 2


def total_edges(grid_size: int) -> int:
    return 2 * grid_size * (grid_size - 1)


def all_edges(grid_size: int) -> Iterator[Edge]:
    """Every legal edge on the grid: horizontal lines row by row, then vertical lines column by column."""
    for y in range(grid_size):
        for x in range(grid_size - 1):
            yield Edge(Point(x, y), Point(x + 1, y))
    for x in range(grid_size):
        for y in range(grid_size - 1):
            yield Edge(Point(x, y), Point(x, y + 1))
