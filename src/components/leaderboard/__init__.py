"""
Leaderboard component - global, per-room and finished standings.
"""

from .component import (
    run_finished,
    run_global,
    run_room,
    run_stats,
    run_team_rank,
    run_top,
)
from .models import (
    FinishedEntry,
    FinishedOutput,
    LeaderboardEntry,
    LeaderboardOutput,
    RoomLeaderboardEntry,
    RoomLeaderboardOutput,
    RoomStat,
    StatsOutput,
    TeamRankOutput,
)

__all__ = [
    # Entry points
    "run_global",
    "run_room",
    "run_team_rank",
    "run_top",
    "run_finished",
    "run_stats",
    # Models
    "LeaderboardEntry",
    "RoomLeaderboardEntry",
    "FinishedEntry",
    "RoomStat",
    "LeaderboardOutput",
    "RoomLeaderboardOutput",
    "TeamRankOutput",
    "FinishedOutput",
    "StatsOutput",
]
