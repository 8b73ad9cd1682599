"""
Teams component - team administration.

Creating a team also creates its participant login (username = team code).
Everything else here is an override an event organiser needs on the day:
passwords, disqualification, moving a team to another room, correcting its
numbers, assigning a map and fixing its clock.

Invariants:
- Team codes are unique
- Every timer correction leaves a TimeLog with the signed difference
- Disqualifying a team ends its session
"""

from __future__ import annotations

import logging
import string
from typing import Any
from uuid import UUID

from src.components.audit import AuditAction, AuditService
from src.domain import state
from src.domain.entities import Team, TeamMember, TimeLog, User
from src.domain.game import generate_team_code, get_floor_from_room
from src.ports.auth import AuthPort
from src.ports.clock import ClockPort
from src.ports.randomness import RandomPort
from src.ports.repo import GameStorePort
from src.rules.models import GameRules

from .models import (
    AdjustTimerInput,
    AssignMapInput,
    ChangeRoomInput,
    CreateTeamInput,
    SetTimerInput,
    TeamActionInput,
    TeamDetailOutput,
    TeamListOutput,
    TeamOutput,
    TeamProgressOutput,
    TeamSummary,
    UpdatePasswordInput,
    UpdateTeamInput,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
GENERATED_PASSWORD_LENGTH = 8
TEAM_CODE_ATTEMPTS = 50
PASSWORD_ALPHABET = string.ascii_letters + string.digits


def _generate_password(rng: RandomPort) -> str:
    return "".join(rng.choice(PASSWORD_ALPHABET) for _ in range(GENERATED_PASSWORD_LENGTH))


def _unique_team_code(store: GameStorePort, rng: RandomPort) -> str | None:
    for _ in range(TEAM_CODE_ATTEMPTS):
        code = generate_team_code(rng)
        if not store.teams.get_by_code(code) and not store.users.get_by_username(code):
            return code
    return None


def _summary(store: GameStorePort, team: Team, time: ClockPort) -> TeamSummary:
    user = store.users.get_by_team(team.id)
    return TeamSummary(
        team=team,
        username=user.username if user else None,
        checkpoint_count=store.checkpoints.count_for_team(team.id),
        approved_count=store.checkpoints.count_for_team(team.id, status="APPROVED"),
        live_time_sec=state.live_total_time(team, time.now_utc()),
    )


# --- Creation & credentials ---


def run_create_team(
    inp: CreateTeamInput,
    store: GameStorePort,
    auth_adapter: AuthPort,
    rng: RandomPort,
    time: ClockPort,
    rules: GameRules,
) -> TeamOutput:
    team_name = inp.team_name.strip()
    if not team_name:
        return TeamOutput(success=False, error="Team name is required", error_code="invalid")

    password = inp.password or _generate_password(rng)
    if len(password) < MIN_PASSWORD_LENGTH:
        return TeamOutput(
            success=False,
            error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            error_code="invalid",
        )
    if inp.map_id and not store.maps.get_by_id(inp.map_id):
        return TeamOutput(success=False, error="Map not found", error_code="not_found")

    code = _unique_team_code(store, rng)
    if code is None:
        return TeamOutput(
            success=False, error="Could not generate a unique team code", error_code="conflict"
        )

    rooms = store.rooms.list_all()
    start_room = rng.choice(rooms).room_number if rooms else None

    now = time.now_utc()
    team = Team(
        team_code=code,
        team_name=team_name,
        current_position=rules.starting_position,
        current_room=start_room,
        map_id=inp.map_id,
        created_at=now,
        updated_at=now,
    )
    team.members = [
        TeamMember(team_id=team.id, name=name.strip()) for name in inp.members if name.strip()
    ]
    store.teams.save(team)

    user = User(
        username=code,
        password_hash=auth_adapter.hash_password(password),
        role="participant",
        team_id=team.id,
        created_at=now,
        updated_at=now,
    )
    store.users.save(user)

    AuditService(store.audit, time).log(
        AuditAction.TEAM_CREATED,
        actor=inp.actor,
        target=team.team_code,
        details={"team_name": team_name, "members": len(team.members), "room": start_room},
    )
    logger.info("team_created code=%s room=%s", code, start_room)
    return TeamOutput(team=team, user=user, password=password, success=True)


def run_update_password(
    inp: UpdatePasswordInput, store: GameStorePort, auth_adapter: AuthPort, time: ClockPort
) -> TeamOutput:
    if len(inp.password) < MIN_PASSWORD_LENGTH:
        return TeamOutput(
            success=False,
            error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            error_code="invalid",
        )
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return TeamOutput(success=False, error="Team not found", error_code="not_found")
    user = store.users.get_by_team(team.id)
    if not user:
        return TeamOutput(
            success=False, error="No user found for this team", error_code="not_found"
        )

    user = user.model_copy(
        update={
            "password_hash": auth_adapter.hash_password(inp.password),
            "updated_at": time.now_utc(),
        }
    )
    store.users.save(user)
    store.tokens.clear(user.id)
    AuditService(store.audit, time).log(
        AuditAction.PASSWORD_CHANGED, actor=inp.actor, target=team.team_code
    )
    return TeamOutput(team=team, user=user, success=True)


# --- Status ---


def run_disqualify(inp: TeamActionInput, store: GameStorePort, time: ClockPort) -> TeamOutput:
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return TeamOutput(success=False, error="Team not found", error_code="not_found")
    if team.status == "DISQUALIFIED":
        return TeamOutput(
            success=False, error="Team is already disqualified", error_code="conflict"
        )

    now = time.now_utc()
    team = state.pause_timer(team, now).model_copy(
        update={"status": "DISQUALIFIED", "updated_at": now}
    )
    store.teams.save(team)

    user = store.users.get_by_team(team.id)
    if user:
        store.tokens.clear(user.id)

    AuditService(store.audit, time).log(
        AuditAction.TEAM_DISQUALIFIED, actor=inp.actor, target=team.team_code
    )
    logger.warning("team_disqualified code=%s", team.team_code)
    return TeamOutput(team=team, success=True)


def run_reinstate(
    inp: TeamActionInput, store: GameStorePort, time: ClockPort, rules: GameRules
) -> TeamOutput:
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return TeamOutput(success=False, error="Team not found", error_code="not_found")
    if team.status != "DISQUALIFIED":
        return TeamOutput(success=False, error="Team is not disqualified", error_code="conflict")

    finished = team.current_position >= rules.board_size
    team = team.model_copy(
        update={"status": "COMPLETED" if finished else "ACTIVE", "updated_at": time.now_utc()}
    )
    store.teams.save(team)
    AuditService(store.audit, time).log(
        AuditAction.TEAM_REINSTATED, actor=inp.actor, target=team.team_code
    )
    return TeamOutput(team=team, success=True)


# --- Overrides ---


def run_change_room(inp: ChangeRoomInput, store: GameStorePort, time: ClockPort) -> TeamOutput:
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return TeamOutput(success=False, error="Team not found", error_code="not_found")
    room = store.rooms.get_by_number(inp.room_number.strip())
    if not room:
        return TeamOutput(success=False, error="Invalid room number", error_code="invalid")

    previous = team.current_room
    team = team.model_copy(update={"current_room": room.room_number, "updated_at": time.now_utc()})
    store.teams.save(team)
    AuditService(store.audit, time).log(
        AuditAction.TEAM_ROOM_CHANGED,
        actor=inp.actor,
        target=team.team_code,
        details={
            "from": previous,
            "to": room.room_number,
            "floor": get_floor_from_room(room.room_number),
        },
    )
    return TeamOutput(team=team, success=True)


def run_update_details(inp: UpdateTeamInput, store: GameStorePort, time: ClockPort) -> TeamOutput:
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return TeamOutput(success=False, error="Team not found", error_code="not_found")

    updates: dict[str, Any] = {}
    if inp.team_name is not None:
        if not inp.team_name.strip():
            return TeamOutput(success=False, error="Team name is required", error_code="invalid")
        updates["team_name"] = inp.team_name.strip()
    if inp.current_position is not None:
        if inp.current_position < 1:
            return TeamOutput(
                success=False, error="Position must be positive", error_code="invalid"
            )
        updates["current_position"] = inp.current_position
    if inp.points is not None:
        updates["points"] = inp.points
    if inp.total_time_sec is not None:
        if inp.total_time_sec < 0:
            return TeamOutput(
                success=False, error="Time cannot be negative", error_code="invalid"
            )
        updates["total_time_sec"] = inp.total_time_sec
    if not updates:
        return TeamOutput(success=False, error="No valid fields to update", error_code="invalid")

    updates["updated_at"] = time.now_utc()
    team = team.model_copy(update=updates)
    store.teams.save(team)

    changed = {k: v for k, v in updates.items() if k != "updated_at"}
    AuditService(store.audit, time).log(
        AuditAction.TEAM_UPDATED, actor=inp.actor, target=team.team_code, details=changed
    )
    return TeamOutput(team=team, success=True)


def run_assign_map(inp: AssignMapInput, store: GameStorePort, time: ClockPort) -> TeamOutput:
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return TeamOutput(success=False, error="Team not found", error_code="not_found")
    board_map = store.maps.get_by_id(inp.map_id)
    if not board_map:
        return TeamOutput(success=False, error="Map not found", error_code="not_found")

    team = team.model_copy(update={"map_id": board_map.id, "updated_at": time.now_utc()})
    store.teams.save(team)
    AuditService(store.audit, time).log(
        AuditAction.MAP_ASSIGNED,
        actor=inp.actor,
        target=team.team_code,
        details={"map": board_map.name},
    )
    return TeamOutput(team=team, success=True)


# --- Timer corrections ---


def _log_time(
    store: GameStorePort,
    time: ClockPort,
    team: Team,
    seconds: int,
    reason: str,
    action: AuditAction,
    actor: User | None,
) -> None:
    now = time.now_utc()
    store.time_logs.save(TimeLog(team_id=team.id, seconds=seconds, reason=reason, created_at=now))
    AuditService(store.audit, time).log(
        action,
        actor=actor,
        target=team.team_code,
        details={"seconds": seconds, "reason": reason, "total_time_sec": team.total_time_sec},
    )


def run_adjust_timer(inp: AdjustTimerInput, store: GameStorePort, time: ClockPort) -> TeamOutput:
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return TeamOutput(success=False, error="Team not found", error_code="not_found")
    if inp.seconds == 0:
        return TeamOutput(success=False, error="Adjustment must not be zero", error_code="invalid")

    total = team.total_time_sec + inp.seconds
    if total < 0:
        return TeamOutput(
            success=False, error="Adjustment would make the time negative", error_code="invalid"
        )
    team = team.model_copy(update={"total_time_sec": total, "updated_at": time.now_utc()})
    store.teams.save(team)
    _log_time(
        store, time, team, inp.seconds, inp.reason, AuditAction.TIMER_ADJUSTED, inp.actor
    )
    return TeamOutput(team=team, success=True)


def run_set_timer(inp: SetTimerInput, store: GameStorePort, time: ClockPort) -> TeamOutput:
    if inp.total_seconds < 0:
        return TeamOutput(success=False, error="Time cannot be negative", error_code="invalid")
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return TeamOutput(success=False, error="Team not found", error_code="not_found")

    now = time.now_utc()
    # Fold any running segment first so the set value is exact from now on.
    team = state.sync_timer(team, now)
    difference = inp.total_seconds - team.total_time_sec
    team = team.model_copy(update={"total_time_sec": inp.total_seconds, "updated_at": now})
    store.teams.save(team)
    _log_time(store, time, team, difference, inp.reason, AuditAction.TIMER_SET, inp.actor)
    return TeamOutput(team=team, success=True)


# --- Queries ---


def run_list_teams(store: GameStorePort, time: ClockPort) -> TeamListOutput:
    """All teams, furthest along first, ties broken by less time."""
    return TeamListOutput(
        teams=[_summary(store, t, time) for t in store.teams.list_all()], success=True
    )


def run_team_detail(team_id: UUID, store: GameStorePort, time: ClockPort) -> TeamDetailOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return TeamDetailOutput(success=False, error="Team not found", error_code="not_found")
    return TeamDetailOutput(
        summary=_summary(store, team, time),
        checkpoints=store.checkpoints.list_for_team(team.id),
        dice_rolls=store.dice_rolls.list_for_team(team.id, limit=20),
        time_logs=store.time_logs.list_for_team(team.id),
        success=True,
    )


def run_team_progress(
    team_id: UUID, store: GameStorePort, rules: GameRules
) -> TeamProgressOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return TeamProgressOutput(success=False, error="Team not found", error_code="not_found")

    correct = 0
    for checkpoint in store.checkpoints.list_for_team(team.id):
        assignment = store.assignments.get_by_checkpoint(checkpoint.id)
        if assignment and assignment.status == "CORRECT":
            correct += 1

    return TeamProgressOutput(
        team=team,
        board_size=rules.board_size,
        progress_percent=round(team.current_position / rules.board_size * 100, 1),
        approved_checkpoints=store.checkpoints.count_for_team(team.id, status="APPROVED"),
        pending_checkpoints=store.checkpoints.count_for_team(team.id, status="PENDING"),
        correct_answers=correct,
        success=True,
    )
