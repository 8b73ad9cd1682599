"""
Audit component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from src.domain.entities import AuditEvent


class AuditAction(str, Enum):
    """Audit action types."""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    LOGIN_FAILED = "LOGIN_FAILED"
    PASSWORD_CHANGED = "PASSWORD_CHANGED"
    TEAM_CREATED = "TEAM_CREATED"
    TEAM_UPDATED = "TEAM_UPDATED"
    TEAM_DISQUALIFIED = "TEAM_DISQUALIFIED"
    TEAM_REINSTATED = "TEAM_REINSTATED"
    TEAM_ROOM_CHANGED = "TEAM_ROOM_CHANGED"
    MAP_ASSIGNED = "MAP_ASSIGNED"
    DICE_ROLLED = "DICE_ROLLED"
    CHECKPOINT_REACHED = "CHECKPOINT_REACHED"
    CHECKPOINT_APPROVED = "CHECKPOINT_APPROVED"
    CHECKPOINT_DELETED = "CHECKPOINT_DELETED"
    CHECKPOINT_UNDONE = "CHECKPOINT_UNDONE"
    QUESTION_ANSWERED = "QUESTION_ANSWERED"
    ANSWER_MARKED_CORRECT = "ANSWER_MARKED_CORRECT"
    ANSWER_MARKED_INCORRECT = "ANSWER_MARKED_INCORRECT"
    HINT_REQUESTED = "HINT_REQUESTED"
    TIMER_ADJUSTED = "TIMER_ADJUSTED"
    TIMER_SET = "TIMER_SET"
    TIMER_PAUSED = "TIMER_PAUSED"
    TIMER_RESUMED = "TIMER_RESUMED"
    QUESTION_CREATED = "QUESTION_CREATED"
    QUESTION_UPDATED = "QUESTION_UPDATED"
    QUESTION_DELETED = "QUESTION_DELETED"
    ADMIN_CREATED = "ADMIN_CREATED"
    ADMIN_DELETED = "ADMIN_DELETED"


@dataclass(frozen=True)
class QueryAuditInput:
    """Filters for the audit trail. Results are newest first."""

    action: AuditAction | None = None
    actor: str | None = None
    target: str | None = None
    limit: int = 100
    offset: int = 0


@dataclass
class AuditListOutput:
    events: list[AuditEvent] = field(default_factory=list)
    total: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None
