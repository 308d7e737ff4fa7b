"""Food placement logic."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from toroid_snake.grid import Point

if TYPE_CHECKING:
    from collections.abc import Sequence

    from toroid_snake.grid import Grid

logger = logging.getLogger(__name__)

STRATEGIES = ("rejection", "free_cells")


class GridFullError(ValueError):
    """Raised when there is no unoccupied cell left for food."""


class FoodPlacer:
    """Places food uniformly at random among the cells not on the snake.

    Uses a seeded NumPy RNG for deterministic, reproducible placement.

    Two strategies produce the same distribution:

    * ``"rejection"`` draws random cells until one is off the body. The
      expected number of draws grows without bound as the body approaches
      the grid capacity, and a body covering every cell never terminates.
      This is accepted for a 20×20 grid and realistic snake lengths.
    * ``"free_cells"`` samples directly from the list of unoccupied cells and
      finishes in bounded time. It raises :class:`GridFullError` on a full
      grid.
    """

    def __init__(
        self,
        grid: Grid,
        strategy: str = "rejection",
        rng: np.random.Generator | None = None,
    ) -> None:
        if strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown food strategy {strategy!r}; "
                f"expected one of {', '.join(STRATEGIES)}.",
            )
        self.grid = grid
        self.strategy = strategy
        self.rng = rng if rng is not None else np.random.default_rng()

    def place(self, body: Sequence[Point]) -> Point:
        """Return a random cell that is not part of *body*."""
        if self.strategy == "free_cells":
            return self._place_from_free_cells(body)
        return self._place_by_rejection(body)

    def _place_by_rejection(self, body: Sequence[Point]) -> Point:
        occupied = set(body)
        draws = 0
        while True:
            draws += 1
            x, y = self.rng.integers(0, self.grid.size, size=2).tolist()
            candidate = Point(x, y)
            if candidate not in occupied:
                if draws > 1:
                    logger.debug("Food placed after %d draws.", draws)
                return candidate

    def _place_from_free_cells(self, body: Sequence[Point]) -> Point:
        free = self.grid.free_cells(body)
        if not free:
            logger.warning("No empty cells available for food placement.")
            raise GridFullError("No unoccupied cell left for food.")
        return free[int(self.rng.integers(len(free)))]
