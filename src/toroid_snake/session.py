"""Game session façade bridging external input and output."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from toroid_snake.config import GameConfig
from toroid_snake.engine import Command, GameState, GameStatus, TickEngine
from toroid_snake.food import FoodPlacer
from toroid_snake.grid import Grid, Point
from toroid_snake.scheduler import TickScheduler
from toroid_snake.snake import Direction

logger = logging.getLogger(__name__)

SnapshotListener = Callable[["Snapshot"], object]


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the game handed to renderers."""

    snake_segments: tuple[Point, ...]
    food: Point
    score: int
    status: GameStatus

    @classmethod
    def of(cls, state: GameState) -> Snapshot:
        return cls(
            snake_segments=state.snake,
            food=state.food,
            score=state.score,
            status=state.status,
        )

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "snake": [list(seg) for seg in self.snake_segments],
            "food": list(self.food),
            "score": self.score,
            "status": self.status.value,
        }


class GameSession:
    """Owns the authoritative :class:`GameState` of one game.

    Every command replaces the state with a new immutable value in one
    synchronous call, so a tick always sees a consistent direction and body.
    When a tick interval is given, a :class:`TickScheduler` runs exactly
    while the status is ``RUNNING``; otherwise the caller drives
    :meth:`tick`.

    Commands must be issued from the thread running the event loop. Input
    produced on other threads goes through :meth:`post`.
    """

    def __init__(
        self,
        engine: TickEngine,
        tick_interval: float | None = None,
    ) -> None:
        self.engine = engine
        self._state = engine.initial_state()
        self._listeners: list[SnapshotListener] = []
        self.scheduler = (
            TickScheduler(
                self.tick, tick_interval, on_error=self._on_scheduler_error,
            )
            if tick_interval is not None else None
        )

    @classmethod
    def from_config(
        cls, config: GameConfig, auto_tick: bool = True,
    ) -> GameSession:
        """Build a session, its engine and food placer from *config*."""
        grid = Grid(config.grid_size)
        placer = FoodPlacer(
            grid,
            strategy=config.food_strategy,
            rng=np.random.default_rng(config.seed),
        )
        engine = TickEngine(
            grid,
            placer,
            initial_snake=config.snake_points,
            initial_direction=config.direction,
        )
        return cls(
            engine,
            tick_interval=config.tick_interval if auto_tick else None,
        )

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def status(self) -> GameStatus:
        return self._state.status

    def snapshot(self) -> Snapshot:
        return Snapshot.of(self._state)

    # --- commands ---

    def start(self) -> None:
        self._update(lambda s: self.engine.apply(s, Command.START))

    def pause(self) -> None:
        self._update(lambda s: self.engine.apply(s, Command.PAUSE))

    def reset(self) -> None:
        self._update(lambda s: self.engine.apply(s, Command.RESET))

    def command(self, command: Command) -> None:
        """Dispatch a lifecycle command by value."""
        self._update(lambda s: self.engine.apply(s, command))

    def set_direction(self, direction: Direction) -> None:
        self._update(lambda s: self.engine.steer(s, direction))

    def tick(self) -> None:
        """Advance the game by one step if it is running."""
        self._update(self.engine.step)

    def post(
        self,
        loop: asyncio.AbstractEventLoop,
        item: Command | Direction,
    ) -> None:
        """Hand a command or steering request over from another thread."""
        loop.call_soon_threadsafe(self._dispatch, item)

    def close(self) -> None:
        """Stop ticking and drop all listeners."""
        if self.scheduler is not None:
            self.scheduler.stop()
        self._listeners.clear()

    # --- observers ---

    def subscribe(self, listener: SnapshotListener) -> None:
        """Call *listener* with a fresh snapshot after every state change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- internals ---

    def _update(self, transition: Callable[[GameState], GameState]) -> None:
        old = self._state
        new = transition(old)
        if new is old:
            return
        # Start ticking before committing, so a failed start leaves the old
        # state in place.
        if self.scheduler is not None and new.status is GameStatus.RUNNING:
            self.scheduler.start()
        self._state = new
        if self.scheduler is not None and new.status is not GameStatus.RUNNING:
            self.scheduler.stop()
        if new.status is not old.status:
            logger.info(
                "Game %s -> %s (score %d).",
                old.status.value, new.status.value, new.score,
            )
        self._notify(Snapshot.of(new))

    def _dispatch(self, item: Command | Direction) -> None:
        if isinstance(item, Direction):
            self.set_direction(item)
        else:
            self.command(item)

    def _on_scheduler_error(self, exc: BaseException) -> None:
        logger.error("Ticking stopped after an error; pausing game: %s", exc)
        self.pause()

    def _notify(self, snapshot: Snapshot) -> None:
        # Iterate over a copy so listeners may unsubscribe themselves.
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener %r failed.", listener)
