"""
Teams component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.domain.entities import Checkpoint, DiceRoll, Team, TimeLog, User


@dataclass(frozen=True)
class CreateTeamInput:
    team_name: str
    members: list[str] = field(default_factory=list)
    password: str | None = None
    map_id: UUID | None = None
    actor: User | None = None


@dataclass(frozen=True)
class UpdatePasswordInput:
    team_id: UUID
    password: str
    actor: User | None = None


@dataclass(frozen=True)
class TeamActionInput:
    team_id: UUID
    actor: User | None = None


@dataclass(frozen=True)
class ChangeRoomInput:
    team_id: UUID
    room_number: str
    actor: User | None = None


@dataclass(frozen=True)
class UpdateTeamInput:
    team_id: UUID
    team_name: str | None = None
    current_position: int | None = None
    points: int | None = None
    total_time_sec: int | None = None
    actor: User | None = None


@dataclass(frozen=True)
class AssignMapInput:
    team_id: UUID
    map_id: UUID
    actor: User | None = None


@dataclass(frozen=True)
class AdjustTimerInput:
    team_id: UUID
    seconds: int
    reason: str = "Manual adjustment"
    actor: User | None = None


@dataclass(frozen=True)
class SetTimerInput:
    team_id: UUID
    total_seconds: int
    reason: str = "Timer set by admin"
    actor: User | None = None


@dataclass
class TeamOutput:
    team: Team | None = None
    user: User | None = None
    password: str | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class TeamSummary:
    team: Team
    username: str | None = None
    checkpoint_count: int = 0
    approved_count: int = 0
    live_time_sec: int = 0


@dataclass
class TeamListOutput:
    teams: list[TeamSummary] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class TeamDetailOutput:
    summary: TeamSummary | None = None
    checkpoints: list[Checkpoint] = field(default_factory=list)
    dice_rolls: list[DiceRoll] = field(default_factory=list)
    time_logs: list[TimeLog] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class TeamProgressOutput:
    team: Team | None = None
    board_size: int = 0
    progress_percent: float = 0.0
    approved_checkpoints: int = 0
    pending_checkpoints: int = 0
    correct_answers: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None
