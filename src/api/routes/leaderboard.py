from collections.abc import Callable
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.deps import (
    get_cache,
    get_current_participant,
    get_rules,
    get_store,
    require_permission,
)
from src.api.responses import ok, raise_for_result
from src.app_shell.cache import TTLCache, leaderboard_key
from src.components.leaderboard import (
    run_finished,
    run_global,
    run_room,
    run_stats,
    run_team_rank,
    run_top,
)
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter(dependencies=[Depends(require_permission("leaderboard:view"))])


def _cached(cache: TTLCache, rules: Rules, key: str, build: Callable[[], Any]) -> Any:
    data = cache.get(key)
    if data is None:
        data = build()
        cache.set(key, data, ttl=rules.cache.leaderboard_ttl_seconds)
    return data


def _checked(result: Any) -> Any:
    raise_for_result(result)
    return result


@router.get("")
def global_leaderboard(
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    entries = _cached(cache, rules, leaderboard_key("global"), lambda: run_global(store).entries)
    return ok(entries)


@router.get("/top")
def top_teams(
    limit: int = Query(10, ge=1, le=100),
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    entries = _cached(
        cache, rules, leaderboard_key("top", limit), lambda: run_top(store, limit).entries
    )
    return ok(entries)


@router.get("/room/{room_number}")
def room_leaderboard(
    room_number: str,
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    entries = _cached(
        cache,
        rules,
        leaderboard_key("room", room_number),
        lambda: _checked(run_room(room_number, store, rules.game)).entries,
    )
    return ok({"room_number": room_number, "entries": entries})


@router.get("/finished")
def finished_teams(
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    entries = _cached(
        cache,
        rules,
        leaderboard_key("finished"),
        lambda: run_finished(store, rules.game).entries,
    )
    return ok(entries)


@router.get("/stats")
def stats(
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    def build() -> dict[str, Any]:
        result = run_stats(store, rules.game)
        return {
            "total_teams": result.total_teams,
            "finished_teams": result.finished_teams,
            "disqualified_teams": result.disqualified_teams,
            "active_teams": result.active_teams,
            "average_position": result.average_position,
            "average_time_sec": result.average_time_sec,
            "completion_rate": result.completion_rate,
            "teams_by_room": result.teams_by_room,
        }

    return ok(_cached(cache, rules, leaderboard_key("stats"), build))


@router.get("/rank/{team_id}")
def team_rank(
    team_id: UUID,
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_team_rank(team_id, store)
    raise_for_result(result)
    return ok({"entry": result.entry, "total_teams": result.total_teams})


@router.get("/me")
def my_rank(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    if user.team_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="User is not assigned to a team"
        )
    return team_rank(user.team_id, store)
