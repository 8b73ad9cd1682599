"""
Timers component - team clocks and periodic timer/position sync.
"""

from .component import (
    run_pause_timer,
    run_resume_timer,
    run_start_timer,
    run_sync_positions,
    run_sync_team_timer,
    run_sync_timers,
)
from .models import SyncPositionsOutput, SyncTimersOutput, TimerOutput

__all__ = [
    "run_start_timer",
    "run_pause_timer",
    "run_resume_timer",
    "run_sync_team_timer",
    "run_sync_timers",
    "run_sync_positions",
    "TimerOutput",
    "SyncTimersOutput",
    "SyncPositionsOutput",
]
