"""Toroidal grid arithmetic for the snake game."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterable

    from toroid_snake.snake import Direction

GRID_SIZE = 20
MIN_GRID_SIZE = 4


class Point(NamedTuple):
    """An (x, y) cell coordinate."""

    x: int
    y: int


def wrap_step(point: Point, direction: Direction, grid_size: int) -> Point:
    """Move *point* one cell in *direction*, wrapping around the edges."""
    dx, dy = direction.value
    return Point((point.x + dx) % grid_size, (point.y + dy) % grid_size)


class Grid:
    """Square toroidal grid.

    Moving past one edge re-enters from the opposite edge, so there is no
    wall collision. Occupancy masks are indexed ``[y, x]`` to match NumPy
    row-major ordering.
    """

    def __init__(self, size: int = GRID_SIZE) -> None:
        if size < MIN_GRID_SIZE:
            raise ValueError(
                f"Grid size must be at least {MIN_GRID_SIZE}×{MIN_GRID_SIZE}.",
            )
        self.size = size

    @property
    def capacity(self) -> int:
        """Total number of cells."""
        return self.size * self.size

    def contains(self, point: Point) -> bool:
        """Check whether a coordinate lies within the grid."""
        return 0 <= point.x < self.size and 0 <= point.y < self.size

    def step(self, point: Point, direction: Direction) -> Point:
        """Return the neighbour of *point* in *direction*."""
        return wrap_step(point, direction, self.size)

    def occupancy(self, body: Iterable[Point]) -> np.ndarray:
        """Return a boolean mask with ``True`` on every body cell."""
        mask = np.zeros((self.size, self.size), dtype=bool)
        for x, y in body:
            mask[y, x] = True
        return mask

    def free_cells(self, body: Iterable[Point]) -> list[Point]:
        """Return every cell not covered by *body*."""
        ys, xs = np.where(~self.occupancy(body))
        return [Point(x, y) for x, y in zip(xs.tolist(), ys.tolist(), strict=True)]
