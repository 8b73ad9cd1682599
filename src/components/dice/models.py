"""
Dice component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.domain.entities import Checkpoint, DiceRoll, QuestionAssignment, User


@dataclass(frozen=True)
class RollDiceInput:
    team_id: UUID
    actor: User | None = None


@dataclass
class RollDiceOutput:
    dice_value: int | None = None
    position_before: int | None = None
    position_after: int | None = None
    moved: bool = False
    room_number: str | None = None
    room_type: str | None = None
    is_snake_position: bool = False
    question_type: str | None = None
    checkpoint: Checkpoint | None = None
    assignment: QuestionAssignment | None = None
    dice_roll: DiceRoll | None = None
    has_won: bool = False
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class DiceHistoryOutput:
    rolls: list[DiceRoll] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None
