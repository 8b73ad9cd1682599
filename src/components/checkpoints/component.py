"""
Checkpoints component - admin side of the checkpoint lifecycle.

A checkpoint is created PENDING by a roll. An admin approves it once the
team has reached the room, which reveals the question to the team. The
assignment is then marked, either automatically on submission or by an
admin, which scores it and unlocks the dice.

Invariants:
- Only the latest PENDING checkpoint of a team can be approved
- Approval is one-way
- Delete and undo only touch the team's latest checkpoint
- Deleting is for PENDING checkpoints only and returns the team to where
  the roll started; undo works in any status and returns it to the
  previous checkpoint
- Removing a checkpoint reverses the points its assignment earned
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from src.components.audit import AuditAction, AuditService
from src.domain import state
from src.domain.entities import Checkpoint, Team
from src.domain.game import has_reached_goal, is_auto_marked
from src.ports.clock import ClockPort
from src.ports.repo import GameStorePort
from src.rules.models import GameRules

from ._impl import resolve_assignment, score_delta
from .models import (
    CheckpointActionInput,
    CheckpointListOutput,
    CheckpointOutput,
    CheckpointView,
    MarkAnswerInput,
)

logger = logging.getLogger(__name__)


def _view(store: GameStorePort, checkpoint: Checkpoint, with_team: bool = False) -> CheckpointView:
    assignment = store.assignments.get_by_checkpoint(checkpoint.id)
    question = store.questions.get_by_id(assignment.question_id) if assignment else None
    team = store.teams.get_by_id(checkpoint.team_id) if with_team else None
    return CheckpointView(
        checkpoint=checkpoint, assignment=assignment, question=question, team=team
    )


def run_list_pending(store: GameStorePort) -> CheckpointListOutput:
    """PENDING checkpoints, oldest first, with team, assignment and question."""
    items = [_view(store, cp, with_team=True) for cp in store.checkpoints.list_by_status("PENDING")]
    return CheckpointListOutput(items=items, success=True)


def run_team_checkpoints(team_id: UUID, store: GameStorePort) -> CheckpointListOutput:
    if not store.teams.get_by_id(team_id):
        return CheckpointListOutput(success=False, error="Team not found", error_code="not_found")
    items = [_view(store, cp) for cp in store.checkpoints.list_for_team(team_id)]
    return CheckpointListOutput(items=items, success=True)


def run_get_checkpoint(inp: CheckpointActionInput, store: GameStorePort) -> CheckpointOutput:
    checkpoint = store.checkpoints.get_by_id(inp.checkpoint_id)
    if not checkpoint:
        return CheckpointOutput(success=False, error="Checkpoint not found", error_code="not_found")
    view = _view(store, checkpoint, with_team=True)
    return CheckpointOutput(
        checkpoint=checkpoint,
        assignment=view.assignment,
        question=view.question,
        team=view.team,
        success=True,
    )


def run_approve_checkpoint(
    inp: CheckpointActionInput, store: GameStorePort, time: ClockPort
) -> CheckpointOutput:
    checkpoint = store.checkpoints.get_by_id(inp.checkpoint_id)
    if not checkpoint:
        return CheckpointOutput(success=False, error="Checkpoint not found", error_code="not_found")

    if checkpoint.status != "PENDING":
        return CheckpointOutput(
            success=False, error="Checkpoint already processed", error_code="conflict"
        )

    latest_pending = store.checkpoints.latest_for_team_with_status(checkpoint.team_id, "PENDING")
    if latest_pending is None or latest_pending.id != checkpoint.id:
        return CheckpointOutput(
            success=False,
            error="Only the latest pending checkpoint can be approved",
            error_code="conflict",
        )

    approved = state.approve(checkpoint)
    store.checkpoints.save(approved)

    # The dice stays locked until the question is answered.
    AuditService(store.audit, time).log(
        AuditAction.CHECKPOINT_APPROVED,
        actor=inp.actor,
        target=str(approved.id),
        details={"team_id": str(approved.team_id), "number": approved.checkpoint_number},
    )
    logger.info("checkpoint_approved id=%s number=%s", approved.id, approved.checkpoint_number)

    view = _view(store, approved, with_team=True)
    return CheckpointOutput(
        checkpoint=approved,
        assignment=view.assignment,
        question=view.question,
        team=view.team,
        success=True,
    )


def run_mark_answer(
    inp: MarkAnswerInput, store: GameStorePort, time: ClockPort, rules: GameRules
) -> CheckpointOutput:
    assignment = store.assignments.get_by_id(inp.assignment_id)
    if not assignment:
        return CheckpointOutput(success=False, error="Assignment not found", error_code="not_found")

    checkpoint = store.checkpoints.get_by_id(assignment.checkpoint_id)
    question = store.questions.get_by_id(assignment.question_id)
    if not checkpoint or not question:
        return CheckpointOutput(success=False, error="Checkpoint not found", error_code="not_found")

    team = store.teams.get_by_id(checkpoint.team_id)
    if not team:
        return CheckpointOutput(success=False, error="Team not found", error_code="not_found")

    if not is_auto_marked(question.type, rules) and assignment.participant_answer is None:
        return CheckpointOutput(
            success=False,
            error="Team has not submitted an answer yet",
            error_code="invalid",
        )

    now = time.now_utc()
    team, checkpoint, assignment, delta = resolve_assignment(
        store, team, checkpoint, assignment, inp.is_correct, now
    )

    action = (
        AuditAction.ANSWER_MARKED_CORRECT if inp.is_correct else AuditAction.ANSWER_MARKED_INCORRECT
    )
    AuditService(store.audit, time).log(
        action,
        actor=inp.actor,
        target=str(assignment.id),
        details={"team": team.team_code, "points_delta": delta, "points": team.points},
    )
    logger.info(
        "answer_marked team=%s assignment=%s correct=%s delta=%s",
        team.team_code, assignment.id, inp.is_correct, delta,
    )
    return CheckpointOutput(
        checkpoint=checkpoint,
        assignment=assignment,
        question=question,
        team=team,
        points_delta=delta,
        success=True,
    )


def _rewind(
    store: GameStorePort,
    team: Team,
    checkpoint: Checkpoint,
    position: int,
    room: str | None,
    now: datetime,
    rules: GameRules,
) -> tuple[Team, int]:
    """Remove a checkpoint and its assignment and put the team at `position`."""
    assignment = store.assignments.get_by_checkpoint(checkpoint.id)
    delta = 0
    if assignment is not None:
        delta = score_delta(assignment.status, "PENDING", checkpoint.is_snake_position)
        store.assignments.delete(assignment.id)
    store.checkpoints.delete(checkpoint.id)

    updated = team.model_copy(
        update={
            "current_position": position,
            "current_room": room,
            "points": team.points + delta,
            "can_roll_dice": True,
            "updated_at": now,
        }
    )
    if updated.status == "COMPLETED" and not has_reached_goal(position, rules.board_size):
        updated = state.start_timer(updated.model_copy(update={"status": "ACTIVE"}), now)
    store.teams.save(updated)
    return updated, delta


def run_delete_checkpoint(
    inp: CheckpointActionInput, store: GameStorePort, time: ClockPort, rules: GameRules
) -> CheckpointOutput:
    checkpoint = store.checkpoints.get_by_id(inp.checkpoint_id)
    if not checkpoint:
        return CheckpointOutput(success=False, error="Checkpoint not found", error_code="not_found")

    if checkpoint.status != "PENDING":
        return CheckpointOutput(
            success=False, error="Only pending checkpoints can be deleted", error_code="conflict"
        )

    team = store.teams.get_by_id(checkpoint.team_id)
    if not team:
        return CheckpointOutput(success=False, error="Team not found", error_code="not_found")

    latest = store.checkpoints.latest_for_team(team.id)
    if latest is None or latest.id != checkpoint.id:
        return CheckpointOutput(
            success=False, error="Only the latest checkpoint can be deleted", error_code="conflict"
        )

    # Back to where the roll started, including any override made before it.
    previous = store.checkpoints.previous(team.id, checkpoint.checkpoint_number)
    room = checkpoint.room_before or (previous.room_number if previous else team.current_room)
    team, delta = _rewind(
        store, team, checkpoint, checkpoint.position_before, room, time.now_utc(), rules
    )
    AuditService(store.audit, time).log(
        AuditAction.CHECKPOINT_DELETED,
        actor=inp.actor,
        target=str(checkpoint.id),
        details={"team": team.team_code, "number": checkpoint.checkpoint_number},
    )
    logger.info(
        "checkpoint_deleted team=%s number=%s", team.team_code, checkpoint.checkpoint_number
    )
    return CheckpointOutput(checkpoint=checkpoint, team=team, points_delta=delta, success=True)


def run_undo_checkpoint(
    inp: CheckpointActionInput, store: GameStorePort, time: ClockPort, rules: GameRules
) -> CheckpointOutput:
    checkpoint = store.checkpoints.get_by_id(inp.checkpoint_id)
    if not checkpoint:
        return CheckpointOutput(success=False, error="Checkpoint not found", error_code="not_found")

    team = store.teams.get_by_id(checkpoint.team_id)
    if not team:
        return CheckpointOutput(success=False, error="Team not found", error_code="not_found")

    latest = store.checkpoints.latest_for_team(team.id)
    if latest is None or latest.id != checkpoint.id:
        return CheckpointOutput(
            success=False, error="Only the latest checkpoint can be undone", error_code="conflict"
        )

    previous = store.checkpoints.previous(team.id, checkpoint.checkpoint_number)
    if previous is not None:
        position, room = previous.position_after, previous.room_number
    else:
        position = rules.starting_position
        room = checkpoint.room_before or team.current_room
    team, delta = _rewind(store, team, checkpoint, position, room, time.now_utc(), rules)
    AuditService(store.audit, time).log(
        AuditAction.CHECKPOINT_UNDONE,
        actor=inp.actor,
        target=str(checkpoint.id),
        details={
            "team": team.team_code,
            "number": checkpoint.checkpoint_number,
            "status": checkpoint.status,
            "restored_position": team.current_position,
            "points_delta": delta,
        },
    )
    logger.info(
        "checkpoint_undone team=%s number=%s position=%s",
        team.team_code, checkpoint.checkpoint_number, team.current_position,
    )
    return CheckpointOutput(checkpoint=checkpoint, team=team, points_delta=delta, success=True)
