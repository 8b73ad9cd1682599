"""
Checkpoints component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.domain.entities import Checkpoint, Question, QuestionAssignment, Team, User


@dataclass(frozen=True)
class CheckpointActionInput:
    checkpoint_id: UUID
    actor: User | None = None


@dataclass(frozen=True)
class MarkAnswerInput:
    assignment_id: UUID
    is_correct: bool
    actor: User | None = None


@dataclass
class CheckpointView:
    """A checkpoint with its assignment and question, and optionally its team."""

    checkpoint: Checkpoint
    assignment: QuestionAssignment | None = None
    question: Question | None = None
    team: Team | None = None


@dataclass
class CheckpointOutput:
    checkpoint: Checkpoint | None = None
    assignment: QuestionAssignment | None = None
    question: Question | None = None
    team: Team | None = None
    points_delta: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class CheckpointListOutput:
    items: list[CheckpointView] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None
