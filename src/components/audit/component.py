"""
Audit component - Audit logging and querying.

Every state change of the game is written to the audit trail by the
component that performs it, inside the same transaction.

Invariants:
- Audit entries are immutable
- Actor identity (username and role) is captured when known
"""

from __future__ import annotations

import logging
from typing import Any

from src.adapters.clock import SystemClock
from src.domain.entities import AuditEvent, User

from .models import AuditAction, AuditListOutput, QueryAuditInput
from .ports import AuditRepoPort, TimePort

logger = logging.getLogger(__name__)


class AuditService:
    """Records audit events and mirrors them to the application log."""

    def __init__(self, repo: AuditRepoPort, time_port: TimePort | None = None) -> None:
        self._repo = repo
        self._time = time_port or SystemClock()

    def log(
        self,
        action: AuditAction,
        actor: User | None = None,
        target: str | None = None,
        details: dict[str, Any] | None = None,
        actor_name: str | None = None,
    ) -> AuditEvent:
        event = AuditEvent(
            actor=actor.username if actor else actor_name,
            actor_role=actor.role if actor else None,
            action=action.value,
            target=target,
            details=details or {},
            created_at=self._time.now_utc(),
        )
        self._repo.save(event)
        logger.info("audit action=%s actor=%s target=%s", event.action, event.actor, target)
        return event


def run_query(inp: QueryAuditInput, repo: AuditRepoPort) -> AuditListOutput:
    if inp.limit <= 0 or inp.limit > 500:
        return AuditListOutput(
            success=False, error="limit must be between 1 and 500", error_code="invalid"
        )
    if inp.offset < 0:
        return AuditListOutput(success=False, error="offset must be >= 0", error_code="invalid")

    action = inp.action.value if inp.action else None
    events = repo.query(
        action=action, actor=inp.actor, target=inp.target, limit=inp.limit, offset=inp.offset
    )
    total = repo.count(action=action, actor=inp.actor, target=inp.target)
    return AuditListOutput(events=events, total=total, success=True)
