"""Command-line entry point for toroid-snake."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import numpy as np

from toroid_snake.config import GameConfig
from toroid_snake.engine import GameStatus
from toroid_snake.food import STRATEGIES
from toroid_snake.snake import Direction

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON config file (flags override its values).",
    )
    common.add_argument("--grid-size", type=int, default=None)
    common.add_argument("--tick-ms", type=int, default=None)
    common.add_argument("--seed", type=int, default=None)
    common.add_argument(
        "--food-strategy", type=str, default=None, choices=STRATEGIES,
    )
    common.add_argument(
        "--log-level", type=str, default="info",
        choices=["debug", "info", "warning", "error"],
    )

    parser = argparse.ArgumentParser(
        prog="toroid-snake",
        description="Toroidal snake engine driven over JSON lines.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- play ---
    play_p = sub.add_parser(
        "play", parents=[common],
        help="Read commands from stdin, write snapshots to stdout.",
    )
    play_p.add_argument(
        "--auto-start", action="store_true",
        help="Start the game without waiting for a start command.",
    )

    # --- simulate ---
    sim_p = sub.add_parser(
        "simulate", parents=[common],
        help="Run a headless game with random steering.",
    )
    sim_p.add_argument("--max-ticks", type=int, default=1_000)
    sim_p.add_argument(
        "--turn-prob", type=float, default=0.2,
        help="Chance of requesting a random direction before each tick.",
    )

    # --- config ---
    sub.add_parser(
        "config", parents=[common],
        help="Print the effective configuration as JSON.",
    )

    return parser


def _load_config(args: argparse.Namespace) -> GameConfig:
    config = GameConfig.load(args.config) if args.config else GameConfig()

    overrides: dict = {}
    flag_map = {
        "grid_size": "grid_size",
        "tick_ms": "tick_interval_ms",
        "seed": "seed",
        "food_strategy": "food_strategy",
    }
    for cli_name, cfg_name in flag_map.items():
        val = getattr(args, cli_name, None)
        if val is not None:
            overrides[cfg_name] = val

    if overrides:
        config = config.replace(**overrides)
    return config


async def _play(config: GameConfig, auto_start: bool) -> int:
    from toroid_snake.protocol import ProtocolError, SnapshotMessage, parse_command
    from toroid_snake.session import GameSession

    session = GameSession.from_config(config)

    def emit(snapshot) -> None:
        line = SnapshotMessage.from_snapshot(snapshot).model_dump_json()
        sys.stdout.write(line + "\n")
        sys.stdout.flush()

    session.subscribe(emit)
    emit(session.snapshot())
    if auto_start:
        session.start()

    loop = asyncio.get_running_loop()
    try:
        while True:
            raw = await loop.run_in_executor(None, sys.stdin.readline)
            if not raw:
                break
            if not raw.strip():
                continue
            try:
                message = parse_command(raw)
            except ProtocolError as exc:
                logger.warning("%s", exc)
                continue
            message.dispatch(session)
    finally:
        scheduler = session.scheduler
        session.close()
        if scheduler is not None:
            await scheduler.wait_closed()
    return 0


def _run_play(args: argparse.Namespace, config: GameConfig) -> int:
    logger.info(
        "Playing on a %dx%d grid every %d ms.",
        config.grid_size, config.grid_size, config.tick_interval_ms,
    )
    return asyncio.run(_play(config, args.auto_start))


def _run_simulate(args: argparse.Namespace, config: GameConfig) -> int:
    from toroid_snake.session import GameSession

    session = GameSession.from_config(config, auto_tick=False)
    rng = np.random.default_rng(config.seed)
    directions = list(Direction)

    session.start()
    for _ in range(args.max_ticks):
        if rng.random() < args.turn_prob:
            session.set_direction(directions[int(rng.integers(len(directions)))])
        session.tick()
        if session.status is GameStatus.GAME_OVER:
            break

    state = session.state
    print(  # noqa: T201
        f"ticks={state.tick} score={state.score} "
        f"length={len(state.snake)} status={state.status.value}",
    )
    return 0


def _run_config(args: argparse.Namespace, config: GameConfig) -> int:
    print(json.dumps(config.to_dict(), indent=2))  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``toroid-snake`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    handlers = {
        "play": _run_play,
        "simulate": _run_simulate,
        "config": _run_config,
    }
    try:
        config = _load_config(args)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    return handlers[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
