from datetime import datetime
from typing import Any

from src.domain.entities import (
    AssignmentStatus,
    Checkpoint,
    CheckpointStatus,
    QuestionAssignment,
    Team,
)

COMPLETED_REASON = "Team has completed the game"
DISQUALIFIED_REASON = "Team is disqualified"
PENDING_REASON = "Pending checkpoint approval"


def can_roll(team: Team) -> tuple[bool, str | None]:
    """
    Decide whether a team may roll.
    Returns (allowed, reason) where reason explains a refusal.
    """
    if team.status == "COMPLETED":
        return False, COMPLETED_REASON
    if team.status == "DISQUALIFIED":
        return False, DISQUALIFIED_REASON
    if not team.can_roll_dice:
        return False, PENDING_REASON
    return True, None


def can_transition_checkpoint(current: CheckpointStatus, new: CheckpointStatus) -> bool:
    # Approval is one-way; an approved checkpoint is only removed by undo.
    return current == "PENDING" and new == "APPROVED"


def approve(checkpoint: Checkpoint) -> Checkpoint:
    """
    Return a NEW Checkpoint in APPROVED status.
    Raises ValueError if the checkpoint was already processed.
    """
    if not can_transition_checkpoint(checkpoint.status, "APPROVED"):
        raise ValueError(f"Invalid transition from {checkpoint.status} to APPROVED")
    return checkpoint.model_copy(update={"status": "APPROVED"})


def mark(
    assignment: QuestionAssignment, status: AssignmentStatus, now: datetime
) -> QuestionAssignment:
    """Return a NEW assignment with the mark applied. Marks may be overridden."""
    if status == "PENDING":
        raise ValueError("Cannot mark an assignment as PENDING")
    return assignment.model_copy(update={"status": status, "answered_at": now})


def unlock_at(team: Team, checkpoint: Checkpoint, now: datetime) -> Team:
    """Place the team on the checkpoint's tile and room and let it roll again."""
    return team.model_copy(
        update={
            "current_position": checkpoint.position_after,
            "current_room": checkpoint.room_number,
            "can_roll_dice": True,
            "updated_at": now,
        }
    )


# --- Timer ---


def elapsed_seconds(team: Team, now: datetime) -> int:
    if not team.timer_running or team.timer_started_at is None:
        return 0
    return max(0, int((now - team.timer_started_at).total_seconds()))


def live_total_time(team: Team, now: datetime) -> int:
    return team.total_time_sec + elapsed_seconds(team, now)


def start_timer(team: Team, now: datetime) -> Team:
    if team.timer_running:
        return team.model_copy()
    return team.model_copy(
        update={
            "timer_started_at": now,
            "timer_paused": False,
            "timer_paused_at": None,
            "updated_at": now,
        }
    )


def pause_timer(team: Team, now: datetime) -> Team:
    """Fold the running segment into total_time_sec and stop the clock."""
    if not team.timer_running:
        return team.model_copy()
    updates: dict[str, Any] = {
        "total_time_sec": live_total_time(team, now),
        "timer_paused": True,
        "timer_paused_at": now,
        "updated_at": now,
    }
    return team.model_copy(update=updates)


def sync_timer(team: Team, now: datetime) -> Team:
    """Fold the running segment into total_time_sec and restart it at `now`."""
    if not team.timer_running:
        return team.model_copy()
    return team.model_copy(
        update={
            "total_time_sec": live_total_time(team, now),
            "timer_started_at": now,
            "updated_at": now,
        }
    )


def complete(team: Team, now: datetime) -> Team:
    paused = pause_timer(team, now)
    return paused.model_copy(update={"status": "COMPLETED", "updated_at": now})
