"""
Participant component - what a team sees and the two actions it can take
besides rolling: answering its question and asking for a hint.

Questions stay hidden while their checkpoint is PENDING; the team learns the
question only once an admin has approved its arrival in the room.
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.components.audit import AuditAction, AuditService
from src.components.board import run_board_for_team
from src.components.checkpoints import CheckpointView, resolve_assignment, unlock_if_latest
from src.domain import state
from src.domain.entities import Checkpoint, TimeLog
from src.domain.game import answers_match, is_auto_marked
from src.ports.clock import ClockPort
from src.ports.repo import GameStorePort
from src.rules.models import GameRules

from .models import (
    CanRollOutput,
    DashboardOutput,
    HintOutput,
    ParticipantCheckpointsOutput,
    PendingCheckpointOutput,
    SubmitAnswerInput,
    SubmitAnswerOutput,
    TeamStateOutput,
    UseHintInput,
)

logger = logging.getLogger(__name__)

RECENT_CHECKPOINTS = 5


def _participant_view(store: GameStorePort, checkpoint: Checkpoint) -> CheckpointView:
    assignment = store.assignments.get_by_checkpoint(checkpoint.id)
    question = None
    if assignment and checkpoint.status == "APPROVED":
        question = store.questions.get_by_id(assignment.question_id)
    return CheckpointView(checkpoint=checkpoint, assignment=assignment, question=question)


def _pending_view(store: GameStorePort, team_id: UUID) -> CheckpointView | None:
    """Latest checkpoint whose question is still waiting for a mark."""
    checkpoint = store.checkpoints.latest_with_pending_assignment(team_id)
    if checkpoint is None:
        return None
    return _participant_view(store, checkpoint)


def run_team_state(team_id: UUID, store: GameStorePort, time: ClockPort) -> TeamStateOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return TeamStateOutput(success=False, error="Team not found", error_code="not_found")
    return TeamStateOutput(
        team=team, total_time_sec=state.live_total_time(team, time.now_utc()), success=True
    )


def run_can_roll(team_id: UUID, store: GameStorePort) -> CanRollOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return CanRollOutput(can_roll=False, reason="Team not found", success=True)
    allowed, reason = state.can_roll(team)
    return CanRollOutput(can_roll=allowed, reason=reason, success=True)


def run_checkpoints(team_id: UUID, store: GameStorePort) -> ParticipantCheckpointsOutput:
    if not store.teams.get_by_id(team_id):
        return ParticipantCheckpointsOutput(
            success=False, error="Team not found", error_code="not_found"
        )
    items = [_participant_view(store, cp) for cp in store.checkpoints.list_for_team(team_id)]
    return ParticipantCheckpointsOutput(items=items, success=True)


def run_pending_checkpoint(team_id: UUID, store: GameStorePort) -> PendingCheckpointOutput:
    if not store.teams.get_by_id(team_id):
        return PendingCheckpointOutput(
            success=False, error="Team not found", error_code="not_found"
        )
    return PendingCheckpointOutput(item=_pending_view(store, team_id), success=True)


def run_dashboard(
    team_id: UUID, store: GameStorePort, time: ClockPort, rules: GameRules
) -> DashboardOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return DashboardOutput(success=False, error="Team not found", error_code="not_found")

    checkpoints = store.checkpoints.list_for_team(team_id)
    recent = [_participant_view(store, cp) for cp in reversed(checkpoints[-RECENT_CHECKPOINTS:])]
    allowed, reason = state.can_roll(team)
    return DashboardOutput(
        team=team,
        total_time_sec=state.live_total_time(team, time.now_utc()),
        can_roll=allowed,
        can_roll_reason=reason,
        recent_checkpoints=recent,
        pending=_pending_view(store, team_id),
        board=run_board_for_team(team_id, store, rules),
        success=True,
    )


def run_submit_answer(
    inp: SubmitAnswerInput, store: GameStorePort, time: ClockPort, rules: GameRules
) -> SubmitAnswerOutput:
    assignment = store.assignments.get_by_id(inp.assignment_id)
    checkpoint = store.checkpoints.get_by_id(assignment.checkpoint_id) if assignment else None
    if not assignment or not checkpoint:
        return SubmitAnswerOutput(
            success=False, error="Assignment not found", error_code="not_found"
        )

    if checkpoint.team_id != inp.team_id:
        return SubmitAnswerOutput(
            success=False,
            error="This question is not assigned to your team",
            error_code="forbidden",
        )
    if checkpoint.status != "APPROVED":
        return SubmitAnswerOutput(
            success=False, error="Checkpoint has not been approved yet", error_code="conflict"
        )
    if assignment.participant_answer is not None or assignment.status != "PENDING":
        return SubmitAnswerOutput(
            success=False, error="Answer already submitted", error_code="conflict"
        )

    answer = inp.answer.strip()
    if not answer:
        return SubmitAnswerOutput(success=False, error="Answer is required", error_code="invalid")

    team = store.teams.get_by_id(inp.team_id)
    question = store.questions.get_by_id(assignment.question_id)
    if not team or not question:
        return SubmitAnswerOutput(success=False, error="Team not found", error_code="not_found")

    now = time.now_utc()
    assignment = assignment.model_copy(update={"participant_answer": answer, "submitted_at": now})
    store.assignments.save(assignment)

    auto = is_auto_marked(question.type, rules)
    is_correct: bool | None = None
    delta = 0
    if auto:
        is_correct = answers_match(answer, question.correct_answer)
        team, checkpoint, assignment, delta = resolve_assignment(
            store, team, checkpoint, assignment, is_correct, now
        )
    else:
        # Marked later by an admin; the team keeps playing meanwhile.
        team = unlock_if_latest(store, team, checkpoint, now)
        store.teams.save(team)

    AuditService(store.audit, time).log(
        AuditAction.QUESTION_ANSWERED,
        actor=inp.actor,
        target=str(assignment.id),
        details={
            "team": team.team_code,
            "auto_marked": auto,
            "is_correct": is_correct,
            "points_delta": delta,
        },
    )
    logger.info(
        "answer_submitted team=%s assignment=%s auto=%s correct=%s",
        team.team_code, assignment.id, auto, is_correct,
    )
    return SubmitAnswerOutput(
        assignment=assignment,
        team=team,
        auto_marked=auto,
        is_correct=is_correct,
        points_delta=delta,
        success=True,
    )


def run_use_hint(
    inp: UseHintInput, store: GameStorePort, time: ClockPort, rules: GameRules
) -> HintOutput:
    assignment = store.assignments.get_by_id(inp.assignment_id)
    checkpoint = store.checkpoints.get_by_id(assignment.checkpoint_id) if assignment else None
    if not assignment or not checkpoint:
        return HintOutput(success=False, error="Assignment not found", error_code="not_found")
    if checkpoint.team_id != inp.team_id:
        return HintOutput(
            success=False,
            error="This question is not assigned to your team",
            error_code="forbidden",
        )
    if checkpoint.status != "APPROVED":
        return HintOutput(
            success=False, error="Checkpoint has not been approved yet", error_code="conflict"
        )
    if assignment.status != "PENDING":
        return HintOutput(success=False, error="Question already answered", error_code="conflict")

    question = store.questions.get_by_id(assignment.question_id)
    if not question or not question.hint:
        return HintOutput(success=False, error="No hint available", error_code="not_found")

    if assignment.hint_used:
        return HintOutput(hint=question.hint, already_used=True, success=True)

    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return HintOutput(success=False, error="Team not found", error_code="not_found")

    now = time.now_utc()
    penalty = rules.hint_penalty_seconds
    store.assignments.save(assignment.model_copy(update={"hint_used": True}))
    store.teams.save(
        team.model_copy(update={"total_time_sec": team.total_time_sec + penalty, "updated_at": now})
    )
    store.time_logs.save(
        TimeLog(team_id=team.id, seconds=penalty, reason="Hint penalty", created_at=now)
    )
    AuditService(store.audit, time).log(
        AuditAction.HINT_REQUESTED,
        actor=inp.actor,
        target=str(assignment.id),
        details={"team": team.team_code, "penalty_seconds": penalty},
    )
    return HintOutput(hint=question.hint, penalty_seconds=penalty, success=True)
