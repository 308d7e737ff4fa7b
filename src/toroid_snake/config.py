"""Game configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from toroid_snake.food import STRATEGIES
from toroid_snake.grid import GRID_SIZE, MIN_GRID_SIZE, Point
from toroid_snake.snake import Direction

logger = logging.getLogger(__name__)


def default_snake(
    grid_size: int, direction: Direction, length: int = 3,
) -> tuple[Point, ...]:
    """Starting body for *grid_size*, head first, wrapped onto the grid."""
    head_x, head_y = max(grid_size // 4, 2), grid_size // 2
    dx, dy = direction.value
    return tuple(
        Point((head_x - dx * i) % grid_size, (head_y - dy * i) % grid_size)
        for i in range(length)
    )


@dataclass(frozen=True)
class GameConfig:
    """Tunable parameters for a game session.

    Supports JSON serialization for reproducibility. Leaving
    ``initial_snake`` unset places a three-segment snake a quarter of the
    way across the middle row, trailing behind ``initial_direction``; on the
    default 20×20 grid that is ``(5, 10), (4, 10), (3, 10)``.
    """

    grid_size: int = GRID_SIZE
    tick_interval_ms: int = 130
    initial_snake: tuple[tuple[int, int], ...] | None = None
    initial_direction: str = "right"
    food_strategy: str = "rejection"
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.grid_size < MIN_GRID_SIZE:
            raise ValueError(
                f"grid_size must be at least {MIN_GRID_SIZE}.",
            )
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive.")
        Direction.from_name(self.initial_direction)
        snake = self.snake_points
        if not snake:
            raise ValueError("initial_snake must have at least 1 segment.")
        for x, y in snake:
            if not (0 <= x < self.grid_size and 0 <= y < self.grid_size):
                raise ValueError(
                    f"initial_snake segment ({x}, {y}) is outside the grid.",
                )
        if len(set(snake)) != len(snake):
            raise ValueError("initial_snake segments must not overlap.")
        if self.food_strategy not in STRATEGIES:
            raise ValueError(f"Unknown food_strategy {self.food_strategy!r}.")

    @property
    def direction(self) -> Direction:
        return Direction.from_name(self.initial_direction)

    @property
    def snake_points(self) -> tuple[Point, ...]:
        if self.initial_snake is not None:
            return tuple(Point(x, y) for x, y in self.initial_snake)
        return default_snake(self.grid_size, self.direction)

    @property
    def tick_interval(self) -> float:
        """Tick cadence in seconds."""
        return self.tick_interval_ms / 1000.0

    def to_dict(self) -> dict:
        """Serialize to a plain dict (tuples become lists)."""
        d = asdict(self)
        if self.initial_snake is not None:
            d["initial_snake"] = [list(seg) for seg in self.initial_snake]
        return d

    def replace(self, **overrides) -> GameConfig:
        """Return a copy with *overrides* applied and re-validated."""
        d = asdict(self)
        d.update(overrides)
        return GameConfig.from_dict(d)

    @classmethod
    def from_dict(cls, raw: dict) -> GameConfig:
        raw = dict(raw)
        if raw.get("initial_snake") is not None:
            raw["initial_snake"] = tuple(
                tuple(seg) for seg in raw["initial_snake"]
            )
        return cls(**raw)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file."""
        return cls.from_dict(json.loads(Path(path).read_text()))
