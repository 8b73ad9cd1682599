"""
Checkpoints component - approval, marking, deletion and undo of checkpoints.
"""

from ._impl import resolve_assignment, score_delta, unlock_if_latest
from .component import (
    run_approve_checkpoint,
    run_delete_checkpoint,
    run_get_checkpoint,
    run_list_pending,
    run_mark_answer,
    run_team_checkpoints,
    run_undo_checkpoint,
)
from .models import (
    CheckpointActionInput,
    CheckpointListOutput,
    CheckpointOutput,
    CheckpointView,
    MarkAnswerInput,
)

__all__ = [
    # Entry points
    "run_list_pending",
    "run_team_checkpoints",
    "run_get_checkpoint",
    "run_approve_checkpoint",
    "run_mark_answer",
    "run_delete_checkpoint",
    "run_undo_checkpoint",
    # Shared resolution
    "resolve_assignment",
    "score_delta",
    "unlock_if_latest",
    # Models
    "CheckpointActionInput",
    "MarkAnswerInput",
    "CheckpointView",
    "CheckpointOutput",
    "CheckpointListOutput",
]
