"""Tests for the game session façade."""

from __future__ import annotations

import asyncio
import dataclasses

import numpy as np
import pytest

from toroid_snake.config import GameConfig
from toroid_snake.engine import Command, GameStatus, TickEngine
from toroid_snake.food import FoodPlacer
from toroid_snake.grid import Grid, Point
from toroid_snake.session import GameSession, Snapshot
from toroid_snake.snake import Direction


@pytest.fixture()
def session():
    return GameSession.from_config(GameConfig(seed=0), auto_tick=False)


def _force(session: GameSession, **fields) -> None:
    session._state = dataclasses.replace(session._state, **fields)


class TestSessionCommands:
    def test_starts_idle(self, session):
        assert session.status is GameStatus.IDLE
        assert session.scheduler is None

    def test_start_pause_resume(self, session):
        session.start()
        assert session.status is GameStatus.RUNNING
        session.pause()
        assert session.status is GameStatus.PAUSED
        session.start()
        assert session.status is GameStatus.RUNNING

    def test_tick_ignored_unless_running(self, session):
        before = session.state
        session.tick()
        assert session.state is before

    def test_direction_applied_on_next_tick(self, session):
        _force(session, food=Point(0, 0))
        session.start()
        session.set_direction(Direction.DOWN)
        session.tick()
        assert session.state.snake[0] == (5, 11)

    def test_reset_only_after_game_over(self, session):
        session.start()
        session.reset()
        assert session.status is GameStatus.RUNNING

    def test_game_over_then_reset(self, session):
        _force(
            session,
            snake=(Point(0, 10), Point(19, 10), Point(18, 10)),
            direction=Direction.LEFT,
            score=4,
        )
        session.start()
        session.tick()
        assert session.status is GameStatus.GAME_OVER
        session.reset()
        state = session.state
        assert state.snake == ((5, 10), (4, 10), (3, 10))
        assert state.direction is Direction.RIGHT
        assert state.score == 0
        assert state.status is GameStatus.IDLE
        assert state.food not in state.snake

    def test_command_dispatch(self, session):
        session.command(Command.START)
        assert session.status is GameStatus.RUNNING


class TestSnapshots:
    def test_snapshot_fields(self, session):
        snap = session.snapshot()
        assert isinstance(snap, Snapshot)
        assert snap.snake_segments == ((5, 10), (4, 10), (3, 10))
        assert snap.score == 0
        assert snap.status is GameStatus.IDLE

    def test_snapshot_is_immutable(self, session):
        snap = session.snapshot()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.score = 10

    def test_snapshot_unaffected_by_later_ticks(self, session):
        session.start()
        snap = session.snapshot()
        session.tick()
        assert snap.snake_segments[0] == (5, 10)

    def test_to_dict(self, session):
        _force(session, food=Point(1, 2))
        d = session.snapshot().to_dict()
        assert d == {
            "snake": [[5, 10], [4, 10], [3, 10]],
            "food": [1, 2],
            "score": 0,
            "status": "idle",
        }

    def test_listener_receives_each_change(self, session):
        received: list[Snapshot] = []
        session.subscribe(received.append)
        session.start()
        session.tick()
        session.pause()
        assert [s.status for s in received] == [
            GameStatus.RUNNING, GameStatus.RUNNING, GameStatus.PAUSED,
        ]

    def test_no_notification_for_ignored_command(self, session):
        received: list[Snapshot] = []
        session.subscribe(received.append)
        session.pause()
        session.set_direction(Direction.LEFT)
        assert received == []

    def test_unsubscribe(self, session):
        received: list[Snapshot] = []
        session.subscribe(received.append)
        session.unsubscribe(received.append)
        session.start()
        assert received == []

    def test_failing_listener_does_not_block_others(self, session):
        received: list[Snapshot] = []

        def broken(_snapshot):
            raise RuntimeError("renderer crashed")

        session.subscribe(broken)
        session.subscribe(received.append)
        session.start()
        assert len(received) == 1


class TestScheduledSession:
    @pytest.mark.asyncio
    async def test_ticks_while_running(self):
        session = GameSession.from_config(
            GameConfig(seed=0, tick_interval_ms=10),
        )
        _force(session, food=Point(0, 0))
        session.start()
        await asyncio.sleep(0.055)
        session.pause()
        ticks = session.state.tick
        assert ticks >= 2
        assert not session.scheduler.running
        await asyncio.sleep(0.04)
        assert session.state.tick == ticks
        session.close()
        await session.scheduler.wait_closed()

    @pytest.mark.asyncio
    async def test_scheduler_stops_on_game_over(self):
        session = GameSession.from_config(
            GameConfig(seed=0, tick_interval_ms=10),
        )
        _force(
            session,
            snake=(Point(0, 10), Point(19, 10), Point(18, 10)),
            direction=Direction.LEFT,
        )
        session.start()
        await asyncio.sleep(0.04)
        assert session.status is GameStatus.GAME_OVER
        assert session.state.tick == 1
        assert not session.scheduler.running
        await session.scheduler.wait_closed()

    @pytest.mark.asyncio
    async def test_idle_session_does_not_tick(self):
        session = GameSession.from_config(
            GameConfig(seed=0, tick_interval_ms=10),
        )
        session.set_direction(Direction.UP)
        await asyncio.sleep(0.03)
        assert session.state.tick == 0
        assert not session.scheduler.running

    @pytest.mark.asyncio
    async def test_filling_the_grid_ends_game(self):
        body = (
            Point(1, 0), Point(0, 0), Point(0, 1), Point(1, 1), Point(2, 1),
            Point(3, 1), Point(3, 0), Point(3, 3), Point(3, 2), Point(2, 2),
            Point(1, 2), Point(0, 2), Point(0, 3), Point(1, 3), Point(2, 3),
        )
        grid = Grid(4)
        placer = FoodPlacer(
            grid, strategy="free_cells", rng=np.random.default_rng(0),
        )
        session = GameSession(
            TickEngine(grid, placer, initial_snake=body), tick_interval=0.01,
        )
        session.start()
        await asyncio.sleep(0.05)
        assert session.status is GameStatus.GAME_OVER
        assert len(session.state.snake) == 16
        assert not session.scheduler.running
        session.reset()
        assert session.status is GameStatus.IDLE
        await session.scheduler.wait_closed()

    @pytest.mark.asyncio
    async def test_tick_error_pauses_game(self, monkeypatch):
        session = GameSession.from_config(
            GameConfig(seed=0, tick_interval_ms=10),
        )
        received: list[Snapshot] = []
        session.subscribe(received.append)

        def broken_step(state):
            raise RuntimeError("engine failure")

        monkeypatch.setattr(session.engine, "step", broken_step)
        session.start()
        await asyncio.sleep(0.04)
        assert session.status is GameStatus.PAUSED
        assert not session.scheduler.running
        assert received[-1].status is GameStatus.PAUSED
        await session.scheduler.wait_closed()


class TestSchedulerStartFailure:
    def test_start_without_loop_leaves_state_untouched(self):
        session = GameSession.from_config(GameConfig(seed=0))
        received: list[Snapshot] = []
        session.subscribe(received.append)
        with pytest.raises(RuntimeError):
            session.start()
        assert session.status is GameStatus.IDLE
        assert not session.scheduler.running
        assert received == []

    @pytest.mark.asyncio
    async def test_start_succeeds_once_loop_runs(self):
        session = GameSession.from_config(
            GameConfig(seed=0, tick_interval_ms=1000),
        )
        session.start()
        assert session.status is GameStatus.RUNNING
        assert session.scheduler.running
        session.close()
        await session.scheduler.wait_closed()


class TestCrossThreadInput:
    @pytest.mark.asyncio
    async def test_post_from_worker_thread(self, session):
        loop = asyncio.get_running_loop()
        await asyncio.to_thread(session.post, loop, Command.START)
        await asyncio.to_thread(session.post, loop, Direction.DOWN)
        await asyncio.sleep(0)
        assert session.status is GameStatus.RUNNING
        assert session.state.pending_direction is Direction.DOWN

    @pytest.mark.asyncio
    async def test_post_reversal_is_ignored(self, session):
        loop = asyncio.get_running_loop()
        await asyncio.to_thread(session.post, loop, Direction.LEFT)
        await asyncio.sleep(0)
        assert session.state.pending_direction is None
