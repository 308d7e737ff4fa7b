"""Pydantic models for the JSON-lines command and snapshot stream."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field, ValidationError, model_validator

from toroid_snake.engine import Command, GameStatus
from toroid_snake.snake import Direction

if TYPE_CHECKING:
    from toroid_snake.session import GameSession, Snapshot


class ProtocolError(ValueError):
    """Raised for a command line that cannot be understood."""


class CommandMessage(BaseModel):
    """One inbound command, e.g. ``{"command": "direction", "direction": "up"}``."""

    command: Literal["start", "pause", "reset", "direction"]
    direction: Literal["up", "down", "left", "right"] | None = None

    @model_validator(mode="after")
    def check_direction(self) -> CommandMessage:
        if self.command == "direction" and self.direction is None:
            raise ValueError("A direction command needs a 'direction'.")
        return self

    def dispatch(self, session: GameSession) -> None:
        """Forward this command to *session*."""
        if self.command == "direction":
            session.set_direction(Direction.from_name(self.direction))
        else:
            session.command(Command(self.command))


class SnapshotMessage(BaseModel):
    """One outbound state frame."""

    snake: list[tuple[int, int]] = Field(min_length=1)
    food: tuple[int, int]
    score: int = Field(ge=0)
    status: GameStatus

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> SnapshotMessage:
        return cls(**snapshot.to_dict())


def parse_command(line: str) -> CommandMessage:
    """Validate a single JSON line into a :class:`CommandMessage`."""
    try:
        return CommandMessage.model_validate_json(line)
    except ValidationError as exc:
        raise ProtocolError(f"Invalid command: {line.strip()!r}") from exc
