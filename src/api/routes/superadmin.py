from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.randomness import SystemRandom
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.deps import (
    get_auth_adapter,
    get_cache,
    get_clock,
    get_rng,
    get_rules,
    get_store,
    require_permission,
)
from src.api.responses import ok, raise_for_result
from src.api.schemas import (
    MapAssignRequest,
    MapCreateRequest,
    PasswordRequest,
    RoomChangeRequest,
    RoomCreateRequest,
    RoomUpdateRequest,
    SnakeCreateRequest,
    StaffCreateRequest,
    TeamCreateRequest,
    TeamResponse,
    TeamUpdateRequest,
    TimerAdjustRequest,
    TimerSetRequest,
    checkpoint_plain,
    user_out,
)
from src.app_shell.cache import BOARD_PREFIX, LEADERBOARD_PREFIX, TTLCache, board_key
from src.components.audit import AuditAction, QueryAuditInput, run_query
from src.components.auth import (
    CreateStaffInput,
    DeleteAdminInput,
    run_create_staff,
    run_delete_admin,
    run_list_admins,
)
from src.components.board import (
    AddRuleInput,
    CreateMapInput,
    CreateRoomInput,
    MapView,
    RoomView,
    UpdateRoomInput,
    run_add_snake,
    run_create_map,
    run_create_room,
    run_delete_map,
    run_delete_room,
    run_delete_rule,
    run_get_map,
    run_list_maps,
    run_list_rooms,
    run_update_room,
)
from src.components.checkpoints import CheckpointActionInput, run_undo_checkpoint
from src.components.teams import (
    AdjustTimerInput,
    AssignMapInput,
    ChangeRoomInput,
    CreateTeamInput,
    SetTimerInput,
    TeamActionInput,
    TeamOutput,
    UpdatePasswordInput,
    UpdateTeamInput,
    run_adjust_timer,
    run_assign_map,
    run_change_room,
    run_create_team,
    run_disqualify,
    run_reinstate,
    run_set_timer,
    run_update_details,
    run_update_password,
)
from src.domain.entities import User
from src.domain.game import parse_time
from src.rules.models import Rules

router = APIRouter()

# Every route here is superadmin-only; "*" is the only grant that passes.
Superadmin = Depends(require_permission("superadmin:manage"))


def _team_result(
    result: TeamOutput, store: SQLiteUnitOfWork, cache: TTLCache, message: str
) -> dict[str, Any]:
    raise_for_result(result)
    if result.team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    store.after_commit(cache.invalidate, f"{LEADERBOARD_PREFIX}:*")
    return ok(TeamResponse.from_team(result.team), message=message)


def _room_out(view: RoomView) -> dict[str, Any]:
    return {**view.room.model_dump(mode="json"), "occupancy": view.occupancy}


def _map_out(view: MapView) -> dict[str, Any]:
    return {
        **view.board_map.model_dump(mode="json"),
        "snakes": [r.model_dump(mode="json") for r in view.snakes],
        "team_count": view.team_count,
    }


# --- Teams ---


@router.post("/teams", status_code=status.HTTP_201_CREATED)
def create_team(
    req: TeamCreateRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    rng: SystemRandom = Depends(get_rng),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_create_team(
        CreateTeamInput(
            team_name=req.team_name,
            members=req.members,
            password=req.password,
            map_id=req.map_id,
            actor=user,
        ),
        store,
        auth_adapter,
        rng,
        clock,
        rules.game,
    )
    raise_for_result(result)
    if result.team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    store.after_commit(cache.invalidate, f"{LEADERBOARD_PREFIX}:*")
    return ok(
        {
            "team": TeamResponse.from_team(result.team),
            "login_username": result.team.team_code,
            "generated_password": result.password,
        },
        message="Team created",
    )


@router.put("/teams/{team_id}/password")
def update_password(
    team_id: UUID,
    req: PasswordRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_update_password(
        UpdatePasswordInput(team_id=team_id, password=req.password, actor=user),
        store,
        auth_adapter,
        clock,
    )
    raise_for_result(result)
    return ok(message="Password updated")


@router.post("/teams/{team_id}/disqualify")
def disqualify(
    team_id: UUID,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_disqualify(TeamActionInput(team_id=team_id, actor=user), store, clock)
    return _team_result(result, store, cache, "Team disqualified")


@router.post("/teams/{team_id}/reinstate")
def reinstate(
    team_id: UUID,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_reinstate(TeamActionInput(team_id=team_id, actor=user), store, clock, rules.game)
    return _team_result(result, store, cache, "Team reinstated")


@router.put("/teams/{team_id}/room")
def change_room(
    team_id: UUID,
    req: RoomChangeRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_change_room(
        ChangeRoomInput(team_id=team_id, room_number=req.room_number, actor=user), store, clock
    )
    return _team_result(result, store, cache, "Room changed")


@router.put("/teams/{team_id}")
def update_team(
    team_id: UUID,
    req: TeamUpdateRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_update_details(
        UpdateTeamInput(team_id=team_id, actor=user, **req.model_dump()), store, clock
    )
    return _team_result(result, store, cache, "Team updated")


@router.put("/teams/{team_id}/map")
def assign_map(
    team_id: UUID,
    req: MapAssignRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_assign_map(
        AssignMapInput(team_id=team_id, map_id=req.map_id, actor=user), store, clock
    )
    store.after_commit(cache.invalidate, board_key(team_id))
    return _team_result(result, store, cache, "Map assigned")


@router.post("/teams/{team_id}/timer/adjust")
def adjust_timer(
    team_id: UUID,
    req: TimerAdjustRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    inp = AdjustTimerInput(team_id=team_id, seconds=req.seconds, reason=req.reason, actor=user)
    return _team_result(run_adjust_timer(inp, store, clock), store, cache, "Timer adjusted")


@router.put("/teams/{team_id}/timer")
def set_timer(
    team_id: UUID,
    req: TimerSetRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    total = req.total_seconds
    if total is None and req.time:
        try:
            total = parse_time(req.time)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    if total is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="total_seconds or time is required"
        )

    inp = SetTimerInput(team_id=team_id, total_seconds=total, reason=req.reason, actor=user)
    return _team_result(run_set_timer(inp, store, clock), store, cache, "Timer set")


# --- Checkpoints ---


@router.post("/checkpoints/{checkpoint_id}/undo")
def undo_checkpoint(
    checkpoint_id: UUID,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_undo_checkpoint(
        CheckpointActionInput(checkpoint_id=checkpoint_id, actor=user), store, clock, rules.game
    )
    raise_for_result(result)
    if result.team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    store.after_commit(cache.invalidate, f"{LEADERBOARD_PREFIX}:*")
    return ok(
        {
            "checkpoint": checkpoint_plain(result.checkpoint),
            "team": TeamResponse.from_team(result.team),
            "new_position": result.team.current_position,
            "points_delta": result.points_delta,
        },
        message="Checkpoint undone",
    )


# --- Admins ---


@router.get("/admins")
def list_admins(
    _: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    return ok([user_out(u) for u in run_list_admins(store).users])


@router.post("/admins", status_code=status.HTTP_201_CREATED)
def create_admin(
    req: StaffCreateRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_create_staff(
        CreateStaffInput(username=req.username, password=req.password, role="admin", actor=user),
        store,
        auth_adapter,
        clock,
    )
    raise_for_result(result)
    return ok(user_out(result.user), message="Admin created")


@router.delete("/admins/{admin_id}")
def delete_admin(
    admin_id: str,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_delete_admin(DeleteAdminInput(actor=user, admin_id=admin_id), store, clock)
    raise_for_result(result)
    return ok(message="Admin deleted")


# --- Rooms ---


@router.get("/rooms")
def list_rooms(
    _: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    return ok([_room_out(v) for v in run_list_rooms(store).rooms])


@router.post("/rooms", status_code=status.HTTP_201_CREATED)
def create_room(
    req: RoomCreateRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_create_room(CreateRoomInput(actor=user, **req.model_dump()), store)
    raise_for_result(result)
    return ok(result.room, message="Room created")


@router.put("/rooms/{room_id}")
def update_room(
    room_id: UUID,
    req: RoomUpdateRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_update_room(
        UpdateRoomInput(room_id=room_id, actor=user, **req.model_dump()), store
    )
    raise_for_result(result)
    return ok(result.room, message="Room updated")


@router.delete("/rooms/{room_id}")
def delete_room(
    room_id: UUID,
    _: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_delete_room(room_id, store)
    raise_for_result(result)
    return ok(message="Room deleted")


# --- Maps & snakes ---


@router.get("/maps")
def list_maps(
    include_inactive: bool = Query(False),
    _: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_list_maps(store, active_only=not include_inactive)
    return ok([_map_out(v) for v in result.maps])


@router.get("/maps/{map_id}")
def get_map(
    map_id: UUID,
    _: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_get_map(map_id, store)
    raise_for_result(result)
    if result.view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Map not found")
    return ok(_map_out(result.view))


@router.post("/maps", status_code=status.HTTP_201_CREATED)
def create_map(
    req: MapCreateRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    result = run_create_map(
        CreateMapInput(name=req.name, snake_positions=req.snake_positions, actor=user),
        store,
        rules.game,
    )
    raise_for_result(result)
    if result.view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Map not found")
    return ok(_map_out(result.view), message="Map created")


@router.delete("/maps/{map_id}")
def delete_map(
    map_id: UUID,
    _: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_delete_map(map_id, store)
    raise_for_result(result)
    store.after_commit(cache.invalidate, f"{BOARD_PREFIX}:*")
    return ok(message="Map deleted")


@router.post("/maps/{map_id}/snakes", status_code=status.HTTP_201_CREATED)
def add_snake(
    map_id: UUID,
    req: SnakeCreateRequest,
    user: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_add_snake(
        AddRuleInput(map_id=map_id, start_pos=req.start_pos, actor=user), store, rules.game
    )
    raise_for_result(result)
    store.after_commit(cache.invalidate, f"{BOARD_PREFIX}:*")
    return ok(result.rule, message="Snake added")


@router.delete("/rules/{rule_id}")
def delete_rule(
    rule_id: UUID,
    _: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_delete_rule(rule_id, store)
    raise_for_result(result)
    store.after_commit(cache.invalidate, f"{BOARD_PREFIX}:*")
    return ok(message="Snake removed")


# --- Audit ---


@router.get("/audit")
def audit_log(
    action: str | None = Query(None),
    actor: str | None = Query(None),
    target: str | None = Query(None),
    limit: int = Query(100),
    offset: int = Query(0),
    _: User = Superadmin,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    try:
        audit_action = AuditAction(action.upper()) if action else None
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown action: {action}"
        ) from e

    result = run_query(
        QueryAuditInput(
            action=audit_action, actor=actor, target=target, limit=limit, offset=offset
        ),
        store.audit,
    )
    raise_for_result(result)
    return ok({"events": result.events, "total": result.total})
