"""
Participant component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.components.board import BoardOutput
from src.components.checkpoints import CheckpointView
from src.domain.entities import QuestionAssignment, Team, User


@dataclass(frozen=True)
class SubmitAnswerInput:
    team_id: UUID
    assignment_id: UUID
    answer: str
    actor: User | None = None


@dataclass(frozen=True)
class UseHintInput:
    team_id: UUID
    assignment_id: UUID
    actor: User | None = None


@dataclass
class TeamStateOutput:
    team: Team | None = None
    total_time_sec: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class CanRollOutput:
    can_roll: bool = False
    reason: str | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class ParticipantCheckpointsOutput:
    items: list[CheckpointView] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class PendingCheckpointOutput:
    item: CheckpointView | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class DashboardOutput:
    team: Team | None = None
    total_time_sec: int = 0
    can_roll: bool = False
    can_roll_reason: str | None = None
    recent_checkpoints: list[CheckpointView] = field(default_factory=list)
    pending: CheckpointView | None = None
    board: BoardOutput | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class SubmitAnswerOutput:
    assignment: QuestionAssignment | None = None
    team: Team | None = None
    auto_marked: bool = False
    is_correct: bool | None = None
    points_delta: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class HintOutput:
    hint: str | None = None
    penalty_seconds: int = 0
    already_used: bool = False
    success: bool = False
    error: str | None = None
    error_code: str | None = None
