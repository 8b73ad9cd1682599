"""
Participant component - team-facing views, answer submission and hints.
"""

from .component import (
    run_can_roll,
    run_checkpoints,
    run_dashboard,
    run_pending_checkpoint,
    run_submit_answer,
    run_team_state,
    run_use_hint,
)
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

__all__ = [
    # Entry points
    "run_dashboard",
    "run_team_state",
    "run_can_roll",
    "run_checkpoints",
    "run_pending_checkpoint",
    "run_submit_answer",
    "run_use_hint",
    # Models
    "SubmitAnswerInput",
    "UseHintInput",
    "TeamStateOutput",
    "CanRollOutput",
    "ParticipantCheckpointsOutput",
    "PendingCheckpointOutput",
    "DashboardOutput",
    "SubmitAnswerOutput",
    "HintOutput",
]
