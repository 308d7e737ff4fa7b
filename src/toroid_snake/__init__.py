"""Toroid Snake: grid snake movement engine."""

from toroid_snake.config import GameConfig
from toroid_snake.engine import Command, GameState, GameStatus, TickEngine
from toroid_snake.food import FoodPlacer, GridFullError
from toroid_snake.grid import GRID_SIZE, Grid, Point, wrap_step
from toroid_snake.scheduler import TickScheduler
from toroid_snake.session import GameSession, Snapshot
from toroid_snake.snake import Direction, gate_direction

__all__ = [
    "GRID_SIZE",
    "Command",
    "Direction",
    "FoodPlacer",
    "GameConfig",
    "GameSession",
    "GameState",
    "GameStatus",
    "Grid",
    "GridFullError",
    "Point",
    "Snapshot",
    "TickEngine",
    "TickScheduler",
    "gate_direction",
    "wrap_step",
]
