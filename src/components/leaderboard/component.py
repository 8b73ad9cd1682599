"""
Leaderboard component - standings of the event.

Teams are ranked by board position (higher first), then by total time
(lower first). Disqualified teams are never ranked.
"""

from __future__ import annotations

from collections import defaultdict
from uuid import UUID

from src.domain.entities import Team
from src.ports.repo import GameStorePort
from src.rules.models import GameRules

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

DEFAULT_TOP = 10


def _ranked(teams: list[Team]) -> list[Team]:
    eligible = [t for t in teams if t.status != "DISQUALIFIED"]
    return sorted(eligible, key=lambda t: (-t.current_position, t.total_time_sec, t.created_at))


def _entry(rank: int, team: Team) -> LeaderboardEntry:
    return LeaderboardEntry(
        rank=rank,
        team_id=team.id,
        team_code=team.team_code,
        team_name=team.team_name,
        current_position=team.current_position,
        points=team.points,
        total_time_sec=team.total_time_sec,
    )


def _percent(part: float, whole: float) -> int:
    return round(part / whole * 100) if whole else 0


def run_global(store: GameStorePort) -> LeaderboardOutput:
    ranked = _ranked(store.teams.list_all())
    return LeaderboardOutput(
        entries=[_entry(i, t) for i, t in enumerate(ranked, start=1)], success=True
    )


def run_room(room_number: str, store: GameStorePort, rules: GameRules) -> RoomLeaderboardOutput:
    room_number = room_number.strip()
    if not store.rooms.get_by_number(room_number):
        return RoomLeaderboardOutput(success=False, error="Room not found", error_code="not_found")

    ranked = [t for t in _ranked(store.teams.list_all()) if t.current_room == room_number]
    entries = [
        RoomLeaderboardEntry(
            rank=i,
            team_id=t.id,
            team_code=t.team_code,
            team_name=t.team_name,
            current_position=t.current_position,
            total_time_sec=t.total_time_sec,
            members_count=len(t.members),
            checkpoints_completed=store.checkpoints.count_for_team(t.id, status="APPROVED"),
            progress_percent=_percent(t.current_position, rules.board_size),
        )
        for i, t in enumerate(ranked, start=1)
    ]
    return RoomLeaderboardOutput(room_number=room_number, entries=entries, success=True)


def run_team_rank(team_id: UUID, store: GameStorePort) -> TeamRankOutput:
    board = run_global(store).entries
    for entry in board:
        if entry.team_id == team_id:
            return TeamRankOutput(entry=entry, total_teams=len(board), success=True)
    return TeamRankOutput(success=False, error="Team not ranked", error_code="not_found")


def run_top(store: GameStorePort, limit: int = DEFAULT_TOP) -> LeaderboardOutput:
    if limit < 1:
        return LeaderboardOutput(success=False, error="limit must be >= 1", error_code="invalid")
    return LeaderboardOutput(entries=run_global(store).entries[:limit], success=True)


def run_finished(store: GameStorePort, rules: GameRules) -> FinishedOutput:
    finished = sorted(
        (
            t
            for t in store.teams.list_all()
            if t.status != "DISQUALIFIED" and t.current_position >= rules.board_size
        ),
        key=lambda t: t.total_time_sec,
    )
    entries = [
        FinishedEntry(
            rank=i,
            team_id=t.id,
            team_name=t.team_name,
            total_time_sec=t.total_time_sec,
            current_room=t.current_room,
            members_count=len(t.members),
            finished_at=t.updated_at,
        )
        for i, t in enumerate(finished, start=1)
    ]
    return FinishedOutput(entries=entries, success=True)


def run_stats(store: GameStorePort, rules: GameRules) -> StatsOutput:
    teams = store.teams.list_all()
    playing = [t for t in teams if t.status != "DISQUALIFIED"]
    finished = [t for t in playing if t.current_position >= rules.board_size]

    by_room: dict[str | None, list[Team]] = defaultdict(list)
    for team in playing:
        by_room[team.current_room].append(team)

    total = len(playing)
    return StatsOutput(
        total_teams=total,
        finished_teams=len(finished),
        disqualified_teams=len(teams) - total,
        active_teams=total - len(finished),
        average_position=round(sum(t.current_position for t in playing) / total) if total else 0,
        average_time_sec=round(sum(t.total_time_sec for t in playing) / total) if total else 0,
        completion_rate=_percent(len(finished), total),
        teams_by_room=[
            RoomStat(
                room_number=room,
                team_count=len(members),
                avg_position=round(sum(t.current_position for t in members) / len(members)),
            )
            for room, members in sorted(by_room.items(), key=lambda kv: kv[0] or "")
        ],
        success=True,
    )
