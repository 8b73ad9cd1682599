from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.adapters.clock import SystemClock
from src.adapters.randomness import SystemRandom
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.deps import (
    get_cache,
    get_clock,
    get_current_participant,
    get_rng,
    get_rules,
    get_store,
)
from src.api.responses import ok, raise_for_result
from src.api.schemas import (
    HintRequest,
    SubmitAnswerRequest,
    TeamResponse,
    assignment_out,
    board_out,
    checkpoint_out,
    checkpoint_plain,
)
from src.app_shell.cache import LEADERBOARD_PREFIX, TTLCache, board_key, leaderboard_key
from src.components.board import run_board_for_team
from src.components.dice import RollDiceInput, run_dice_history, run_roll_dice
from src.components.leaderboard import run_global
from src.components.participant import (
    SubmitAnswerInput,
    UseHintInput,
    run_can_roll,
    run_checkpoints,
    run_dashboard,
    run_pending_checkpoint,
    run_submit_answer,
    run_team_state,
    run_use_hint,
)
from src.components.timers import run_sync_team_timer
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()


def _team_id(user: User) -> UUID:
    if user.team_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="User is not assigned to a team"
        )
    return user.team_id


@router.get("/dashboard")
def dashboard(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    result = run_dashboard(_team_id(user), store, clock, rules.game)
    raise_for_result(result)
    if result.team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return ok(
        {
            "team": TeamResponse.from_team(result.team, result.total_time_sec),
            "can_roll": result.can_roll,
            "can_roll_reason": result.can_roll_reason,
            "recent_checkpoints": [
                checkpoint_out(v, for_participant=True) for v in result.recent_checkpoints
            ],
            "pending": checkpoint_out(result.pending, for_participant=True)
            if result.pending
            else None,
            "board": board_out(result.board),
        }
    )


@router.get("/state")
def team_state(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_team_state(_team_id(user), store, clock)
    raise_for_result(result)
    if result.team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return ok(TeamResponse.from_team(result.team, result.total_time_sec))


@router.post("/dice/roll")
def roll_dice(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
    rng: SystemRandom = Depends(get_rng),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_roll_dice(
        RollDiceInput(team_id=_team_id(user), actor=user), store, rng, clock, rules.game
    )
    raise_for_result(result)
    store.after_commit(cache.invalidate, f"{LEADERBOARD_PREFIX}:*")

    if not result.moved:
        message = f"Rolled {result.dice_value}; need an exact roll to finish"
    else:
        message = f"Rolled {result.dice_value}; head to room {result.room_number}"
    return ok(
        {
            "dice_value": result.dice_value,
            "position_before": result.position_before,
            "position_after": result.position_after,
            "moved": result.moved,
            "room_number": result.room_number,
            "room_type": result.room_type,
            "is_snake_position": result.is_snake_position,
            "question_type": result.question_type,
            "has_won": result.has_won,
            "checkpoint": checkpoint_plain(result.checkpoint),
            "assignment_id": result.assignment.id if result.assignment else None,
        },
        message=message,
    )


@router.get("/dice/can-roll")
def can_roll(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_can_roll(_team_id(user), store)
    return ok({"can_roll": result.can_roll, "reason": result.reason})


@router.get("/dice/history")
def dice_history(
    limit: int = Query(20, ge=1, le=200),
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_dice_history(_team_id(user), store, limit)
    raise_for_result(result)
    return ok(result.rolls)


@router.get("/checkpoints")
def checkpoints(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_checkpoints(_team_id(user), store)
    raise_for_result(result)
    return ok([checkpoint_out(v, for_participant=True) for v in result.items])


@router.get("/checkpoints/pending")
def pending_checkpoint(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_pending_checkpoint(_team_id(user), store)
    raise_for_result(result)
    if result.item is None:
        return ok(None, message="No pending checkpoint")
    return ok(checkpoint_out(result.item, for_participant=True))


@router.post("/answer/submit")
def submit_answer(
    req: SubmitAnswerRequest,
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_submit_answer(
        SubmitAnswerInput(
            team_id=_team_id(user), assignment_id=req.assignment_id, answer=req.answer, actor=user
        ),
        store,
        clock,
        rules.game,
    )
    raise_for_result(result)
    store.after_commit(cache.invalidate, f"{LEADERBOARD_PREFIX}:*")

    if not result.auto_marked:
        message = "Answer submitted for review"
    elif result.is_correct:
        message = "Correct answer"
    else:
        message = "Incorrect answer"
    return ok(
        {
            "auto_marked": result.auto_marked,
            "is_correct": result.is_correct,
            "points_delta": result.points_delta,
            "assignment": assignment_out(result.assignment),
            "team": TeamResponse.from_team(result.team) if result.team else None,
        },
        message=message,
    )


@router.post("/hint/use")
def use_hint(
    req: HintRequest,
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_use_hint(
        UseHintInput(team_id=_team_id(user), assignment_id=req.assignment_id, actor=user),
        store,
        clock,
        rules.game,
    )
    raise_for_result(result)
    if not result.already_used:
        store.after_commit(cache.invalidate, f"{LEADERBOARD_PREFIX}:*")
    return ok(
        {
            "hint": result.hint,
            "penalty_seconds": result.penalty_seconds,
            "already_used": result.already_used,
        }
    )


@router.post("/timer/sync")
def sync_timer(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_sync_team_timer(_team_id(user), store, clock)
    raise_for_result(result)
    if result.team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return ok(
        {
            "total_time_sec": result.total_time_sec,
            "timer_running": result.team.timer_running,
        }
    )


@router.get("/board")
def board(
    user: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    key = board_key(_team_id(user))
    cached = cache.get(key)
    if cached is not None:
        return ok(cached)

    result = run_board_for_team(_team_id(user), store, rules.game)
    raise_for_result(result)
    data = board_out(result)
    cache.set(key, data, ttl=rules.cache.board_ttl_seconds)
    return ok(data)


@router.get("/leaderboard")
def leaderboard(
    _: User = Depends(get_current_participant),
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    key = leaderboard_key("global")
    entries = cache.get(key)
    if entries is None:
        entries = run_global(store).entries
        cache.set(key, entries, ttl=rules.cache.leaderboard_ttl_seconds)
    return ok(entries)
