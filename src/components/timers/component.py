"""
Timers component - team clocks and the periodic sync passes.

A team's time is `total_time_sec` plus the running segment since
`timer_started_at`. Syncing folds the segment into the total so the stored
value stays close to the live one.
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.components.audit import AuditAction, AuditService
from src.domain import state
from src.domain.entities import Team, User
from src.domain.game import has_reached_goal
from src.ports.clock import ClockPort
from src.ports.repo import GameStorePort
from src.rules.models import GameRules

from .models import SyncPositionsOutput, SyncTimersOutput, TimerOutput

logger = logging.getLogger(__name__)


def _output(team: Team, time: ClockPort) -> TimerOutput:
    return TimerOutput(
        team=team, total_time_sec=state.live_total_time(team, time.now_utc()), success=True
    )


def run_start_timer(team_id: UUID, store: GameStorePort, time: ClockPort) -> TimerOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return TimerOutput(success=False, error="Team not found", error_code="not_found")
    if team.status != "ACTIVE":
        return TimerOutput(
            success=False, error=f"Team is {team.status.lower()}", error_code="conflict"
        )
    if not team.timer_running:
        team = state.start_timer(team, time.now_utc())
        store.teams.save(team)
    return _output(team, time)


def run_pause_timer(
    team_id: UUID, store: GameStorePort, time: ClockPort, actor: User | None = None
) -> TimerOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return TimerOutput(success=False, error="Team not found", error_code="not_found")
    if not team.timer_running:
        return TimerOutput(success=False, error="Timer is not running", error_code="conflict")

    team = state.pause_timer(team, time.now_utc())
    store.teams.save(team)
    AuditService(store.audit, time).log(
        AuditAction.TIMER_PAUSED,
        actor=actor,
        target=team.team_code,
        details={"total_time_sec": team.total_time_sec},
    )
    return _output(team, time)


def run_resume_timer(
    team_id: UUID, store: GameStorePort, time: ClockPort, actor: User | None = None
) -> TimerOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return TimerOutput(success=False, error="Team not found", error_code="not_found")
    if team.status != "ACTIVE":
        return TimerOutput(
            success=False, error=f"Team is {team.status.lower()}", error_code="conflict"
        )
    if team.timer_running:
        return TimerOutput(success=False, error="Timer is already running", error_code="conflict")

    team = state.start_timer(team, time.now_utc())
    store.teams.save(team)
    AuditService(store.audit, time).log(
        AuditAction.TIMER_RESUMED, actor=actor, target=team.team_code
    )
    return _output(team, time)


def run_sync_team_timer(team_id: UUID, store: GameStorePort, time: ClockPort) -> TimerOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return TimerOutput(success=False, error="Team not found", error_code="not_found")
    if team.timer_running:
        team = state.sync_timer(team, time.now_utc())
        store.teams.save(team)
    return _output(team, time)


def run_sync_timers(store: GameStorePort, time: ClockPort, rules: GameRules) -> SyncTimersOutput:
    now = time.now_utc()
    updated = completed = 0
    for team in store.teams.list_all():
        if not team.timer_running or team.status == "COMPLETED":
            continue
        if state.elapsed_seconds(team, now) <= 0:
            continue
        if has_reached_goal(team.current_position, rules.board_size):
            team = state.complete(team, now)
            completed += 1
        else:
            team = state.sync_timer(team, now)
        store.teams.save(team)
        updated += 1

    logger.info("timers synced updated=%d completed=%d", updated, completed)
    return SyncTimersOutput(updated=updated, completed=completed, success=True)


def run_sync_positions(store: GameStorePort, time: ClockPort) -> SyncPositionsOutput:
    """Align each team with its latest checkpoint once that checkpoint is approved."""
    now = time.now_utc()
    updated = 0
    for team in store.teams.list_all():
        latest = store.checkpoints.latest_for_team(team.id)
        if latest is None or latest.status != "APPROVED":
            continue
        current = (team.current_position, team.current_room)
        if current == (latest.position_after, latest.room_number):
            continue
        store.teams.save(
            team.model_copy(
                update={
                    "current_position": latest.position_after,
                    "current_room": latest.room_number,
                    "updated_at": now,
                }
            )
        )
        updated += 1

    logger.info("positions synced updated=%d", updated)
    return SyncPositionsOutput(updated=updated, success=True)
