"""
Resolution of a question assignment: marking, scoring and unlocking the dice.

Shared by admin marking and participant auto-marking so both paths score
and unlock the same way.
"""

from __future__ import annotations

from datetime import datetime

from src.domain import state
from src.domain.entities import AssignmentStatus, Checkpoint, QuestionAssignment, Team
from src.domain.game import points_for_answer
from src.ports.repo import GameStorePort


def score_delta(previous: AssignmentStatus, new: AssignmentStatus, is_snake: bool) -> int:
    """Points change for moving an assignment from `previous` to `new`.

    An earlier mark is reversed first, so re-marking never double counts.
    """
    delta = 0
    if previous != "PENDING":
        delta -= points_for_answer(is_snake, previous == "CORRECT")
    if new != "PENDING":
        delta += points_for_answer(is_snake, new == "CORRECT")
    return delta


def resolve_assignment(
    store: GameStorePort,
    team: Team,
    checkpoint: Checkpoint,
    assignment: QuestionAssignment,
    is_correct: bool,
    now: datetime,
) -> tuple[Team, Checkpoint, QuestionAssignment, int]:
    new_status: AssignmentStatus = "CORRECT" if is_correct else "INCORRECT"
    delta = score_delta(assignment.status, new_status, checkpoint.is_snake_position)

    assignment = state.mark(assignment, new_status, now)
    store.assignments.save(assignment)

    if checkpoint.status == "PENDING":
        checkpoint = state.approve(checkpoint)
        store.checkpoints.save(checkpoint)

    team = team.model_copy(update={"points": team.points + delta, "updated_at": now})
    team = unlock_if_latest(store, team, checkpoint, now)
    store.teams.save(team)
    return team, checkpoint, assignment, delta


def unlock_if_latest(
    store: GameStorePort, team: Team, checkpoint: Checkpoint, now: datetime
) -> Team:
    """Older checkpoints never move the team back; only the latest one unlocks."""
    latest = store.checkpoints.latest_for_team(team.id)
    if latest is None or latest.id != checkpoint.id:
        return team
    return state.unlock_at(team, checkpoint, now)
