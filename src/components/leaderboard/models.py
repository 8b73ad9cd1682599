"""
Leaderboard component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass
class LeaderboardEntry:
    rank: int
    team_id: UUID
    team_code: str
    team_name: str
    current_position: int
    points: int
    total_time_sec: int


@dataclass
class RoomLeaderboardEntry:
    rank: int
    team_id: UUID
    team_code: str
    team_name: str
    current_position: int
    total_time_sec: int
    members_count: int
    checkpoints_completed: int
    progress_percent: int


@dataclass
class FinishedEntry:
    rank: int
    team_id: UUID
    team_name: str
    total_time_sec: int
    current_room: str | None
    members_count: int
    finished_at: datetime


@dataclass
class RoomStat:
    room_number: str | None
    team_count: int
    avg_position: int


@dataclass
class LeaderboardOutput:
    entries: list[LeaderboardEntry] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class RoomLeaderboardOutput:
    room_number: str = ""
    entries: list[RoomLeaderboardEntry] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class TeamRankOutput:
    entry: LeaderboardEntry | None = None
    total_teams: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class FinishedOutput:
    entries: list[FinishedEntry] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class StatsOutput:
    total_teams: int = 0
    finished_teams: int = 0
    disqualified_teams: int = 0
    active_teams: int = 0
    average_position: int = 0
    average_time_sec: int = 0
    completion_rate: int = 0
    teams_by_room: list[RoomStat] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None
