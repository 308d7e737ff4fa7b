"""Tick engine and game status state machine."""

from __future__ import annotations

import dataclasses
import enum
import logging
from typing import TYPE_CHECKING

from toroid_snake.food import GridFullError
from toroid_snake.grid import Point
from toroid_snake.snake import Direction, gate_direction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from toroid_snake.food import FoodPlacer
    from toroid_snake.grid import Grid

logger = logging.getLogger(__name__)

INITIAL_SNAKE: tuple[Point, ...] = (Point(5, 10), Point(4, 10), Point(3, 10))
INITIAL_DIRECTION = Direction.RIGHT


class GameStatus(str, enum.Enum):
    """Lifecycle states for a game."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Command(str, enum.Enum):
    """Lifecycle commands accepted from the outside."""

    START = "start"
    PAUSE = "pause"
    RESET = "reset"


_TRANSITIONS: dict[tuple[Command, GameStatus], GameStatus] = {
    (Command.START, GameStatus.IDLE): GameStatus.RUNNING,
    (Command.START, GameStatus.PAUSED): GameStatus.RUNNING,
    (Command.PAUSE, GameStatus.RUNNING): GameStatus.PAUSED,
    (Command.RESET, GameStatus.GAME_OVER): GameStatus.IDLE,
}


def next_status(status: GameStatus, command: Command) -> GameStatus | None:
    """Return the status *command* leads to, or ``None`` if not allowed."""
    return _TRANSITIONS.get((command, status))


@dataclasses.dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the whole game.

    ``snake`` is ordered head first. ``pending_direction`` holds the latest
    accepted steering request that the next tick has not consumed yet.
    """

    snake: tuple[Point, ...]
    direction: Direction
    food: Point
    pending_direction: Direction | None = None
    score: int = 0
    status: GameStatus = GameStatus.IDLE
    tick: int = 0

    @property
    def head(self) -> Point:
        return self.snake[0]

    @property
    def heading(self) -> Direction:
        """Direction the next tick will move in."""
        if self.pending_direction is not None:
            return self.pending_direction
        return self.direction


class TickEngine:
    """Pure state-transition functions for a single snake.

    The engine never holds game state itself. Every method takes a
    :class:`GameState` and returns a new one.
    """

    def __init__(
        self,
        grid: Grid,
        food_placer: FoodPlacer,
        initial_snake: Sequence[Point] = INITIAL_SNAKE,
        initial_direction: Direction = INITIAL_DIRECTION,
    ) -> None:
        if not initial_snake:
            raise ValueError("Snake length must be at least 1.")
        snake = tuple(Point(*p) for p in initial_snake)
        if not all(grid.contains(p) for p in snake):
            raise ValueError("Initial snake must lie within the grid.")
        if len(set(snake)) != len(snake):
            raise ValueError("Initial snake segments must not overlap.")
        self.grid = grid
        self.food_placer = food_placer
        self.initial_snake = snake
        self.initial_direction = initial_direction

    def initial_state(self) -> GameState:
        """Build a fresh idle state with newly placed food."""
        return GameState(
            snake=self.initial_snake,
            direction=self.initial_direction,
            food=self.food_placer.place(self.initial_snake),
        )

    def steer(self, state: GameState, requested: Direction) -> GameState:
        """Record a steering request, ignoring 180° reversals."""
        if state.status is GameStatus.GAME_OVER:
            return state
        accepted = gate_direction(state.direction, requested)
        if accepted is requested:
            return dataclasses.replace(state, pending_direction=accepted)
        logger.debug(
            "Ignored reversal from %s to %s.",
            state.direction.name, requested.name,
        )
        return state

    def apply(self, state: GameState, command: Command) -> GameState:
        """Apply a lifecycle command; disallowed commands are no-ops."""
        status = next_status(state.status, command)
        if status is None:
            logger.debug(
                "Ignored %s while %s.", command.value, state.status.value,
            )
            return state
        if command is Command.RESET:
            return self.initial_state()
        return dataclasses.replace(state, status=status)

    def step(self, state: GameState) -> GameState:
        """Advance the game by one tick.

        Only a running game moves. A new head landing on any current body
        cell ends the game, including the tail cell that a plain move would
        vacate. The body is left untouched in that case.
        """
        if state.status is not GameStatus.RUNNING:
            return state

        direction = state.heading
        new_head = self.grid.step(state.head, direction)

        if new_head in state.snake:
            logger.info(
                "Snake died at tick %d with score %d.",
                state.tick + 1, state.score,
            )
            return dataclasses.replace(
                state,
                direction=direction,
                pending_direction=None,
                status=GameStatus.GAME_OVER,
                tick=state.tick + 1,
            )

        if new_head == state.food:
            snake = (new_head, *state.snake)
            grown = dataclasses.replace(
                state,
                snake=snake,
                direction=direction,
                pending_direction=None,
                score=state.score + 1,
                tick=state.tick + 1,
            )
            try:
                food = self.food_placer.place(snake)
            except GridFullError:
                # Nowhere left to move; the eaten food stays under the head.
                logger.info(
                    "Grid filled at tick %d with score %d.",
                    grown.tick, grown.score,
                )
                return dataclasses.replace(
                    grown, status=GameStatus.GAME_OVER,
                )
            return dataclasses.replace(grown, food=food)

        return dataclasses.replace(
            state,
            snake=(new_head, *state.snake[:-1]),
            direction=direction,
            pending_direction=None,
            tick=state.tick + 1,
        )
