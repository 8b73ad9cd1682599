from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.deps import get_cache, get_clock, get_rules, get_store, require_permission
from src.api.responses import ok, raise_for_result
from src.api.schemas import (
    MarkAnswerRequest,
    TeamResponse,
    assignment_out,
    checkpoint_out,
    checkpoint_plain,
    team_summary_out,
)
from src.app_shell.cache import LEADERBOARD_PREFIX, TTLCache
from src.components.checkpoints import (
    CheckpointActionInput,
    CheckpointOutput,
    CheckpointView,
    MarkAnswerInput,
    run_approve_checkpoint,
    run_delete_checkpoint,
    run_get_checkpoint,
    run_list_pending,
    run_mark_answer,
    run_team_checkpoints,
)
from src.components.questions import ListQuestionsInput, run_available
from src.components.teams import run_list_teams, run_team_detail, run_team_progress
from src.components.timers import run_pause_timer, run_resume_timer
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()


def _checkpoint_result(result: CheckpointOutput) -> dict[str, Any]:
    if result.checkpoint is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Checkpoint not found")
    view = CheckpointView(
        checkpoint=result.checkpoint,
        assignment=result.assignment,
        question=result.question,
        team=result.team,
    )
    return {**checkpoint_out(view), "points_delta": result.points_delta}


# --- Teams ---


@router.get("/teams")
def list_teams(
    _: User = Depends(require_permission("teams:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_list_teams(store, clock)
    return ok([team_summary_out(s) for s in result.teams])


@router.get("/teams/{team_id}")
def team_detail(
    team_id: UUID,
    _: User = Depends(require_permission("teams:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_team_detail(team_id, store, clock)
    raise_for_result(result)
    if result.summary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return ok(
        {
            **team_summary_out(result.summary),
            "checkpoints": [checkpoint_plain(cp) for cp in result.checkpoints],
            "dice_rolls": result.dice_rolls,
            "time_logs": result.time_logs,
        }
    )


@router.get("/teams/{team_id}/checkpoints")
def team_checkpoints(
    team_id: UUID,
    _: User = Depends(require_permission("teams:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_team_checkpoints(team_id, store)
    raise_for_result(result)
    return ok([checkpoint_out(v) for v in result.items])


@router.get("/teams/{team_id}/progress")
def team_progress(
    team_id: UUID,
    _: User = Depends(require_permission("teams:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    result = run_team_progress(team_id, store, rules.game)
    raise_for_result(result)
    if result.team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return ok(
        {
            "team": TeamResponse.from_team(result.team),
            "board_size": result.board_size,
            "progress_percent": result.progress_percent,
            "approved_checkpoints": result.approved_checkpoints,
            "pending_checkpoints": result.pending_checkpoints,
            "correct_answers": result.correct_answers,
        }
    )


@router.post("/teams/{team_id}/timer/pause")
def pause_timer(
    team_id: UUID,
    user: User = Depends(require_permission("timers:manage")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_pause_timer(team_id, store, clock, actor=user)
    raise_for_result(result)
    return ok({"total_time_sec": result.total_time_sec}, message="Timer paused")


@router.post("/teams/{team_id}/timer/resume")
def resume_timer(
    team_id: UUID,
    user: User = Depends(require_permission("timers:manage")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_resume_timer(team_id, store, clock, actor=user)
    raise_for_result(result)
    return ok({"total_time_sec": result.total_time_sec}, message="Timer resumed")


# --- Checkpoints ---


@router.get("/checkpoints/pending")
def pending_checkpoints(
    _: User = Depends(require_permission("checkpoints:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_list_pending(store)
    return ok([checkpoint_out(v) for v in result.items])


@router.get("/checkpoints/{checkpoint_id}")
def get_checkpoint(
    checkpoint_id: UUID,
    _: User = Depends(require_permission("checkpoints:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_get_checkpoint(CheckpointActionInput(checkpoint_id=checkpoint_id), store)
    raise_for_result(result)
    return ok(_checkpoint_result(result))


@router.post("/checkpoints/{checkpoint_id}/approve")
def approve_checkpoint(
    checkpoint_id: UUID,
    user: User = Depends(require_permission("checkpoints:approve")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_approve_checkpoint(
        CheckpointActionInput(checkpoint_id=checkpoint_id, actor=user), store, clock
    )
    raise_for_result(result)
    return ok(_checkpoint_result(result), message="Checkpoint approved")


@router.post("/assignments/{assignment_id}/mark")
def mark_answer(
    assignment_id: UUID,
    req: MarkAnswerRequest,
    user: User = Depends(require_permission("checkpoints:mark")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_mark_answer(
        MarkAnswerInput(assignment_id=assignment_id, is_correct=req.is_correct, actor=user),
        store,
        clock,
        rules.game,
    )
    raise_for_result(result)
    store.after_commit(cache.invalidate, f"{LEADERBOARD_PREFIX}:*")
    return ok(
        {
            "assignment": assignment_out(result.assignment),
            "points_delta": result.points_delta,
            "team": TeamResponse.from_team(result.team) if result.team else None,
        },
        message="Answer marked correct" if req.is_correct else "Answer marked incorrect",
    )


@router.delete("/checkpoints/{checkpoint_id}")
def delete_checkpoint(
    checkpoint_id: UUID,
    user: User = Depends(require_permission("checkpoints:delete")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    cache: TTLCache = Depends(get_cache),
) -> dict[str, Any]:
    result = run_delete_checkpoint(
        CheckpointActionInput(checkpoint_id=checkpoint_id, actor=user), store, clock, rules.game
    )
    raise_for_result(result)
    store.after_commit(cache.invalidate, f"{LEADERBOARD_PREFIX}:*")
    return ok(
        {"team": TeamResponse.from_team(result.team) if result.team else None},
        message="Checkpoint deleted",
    )


# --- Questions ---


@router.get("/questions/available")
def available_questions(
    question_type: str | None = Query(None, alias="type"),
    _: User = Depends(require_permission("questions:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_available(ListQuestionsInput(active=True, question_type=question_type), store)
    raise_for_result(result)
    return ok(result.questions)
