"""
Timers component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.domain.entities import Team


@dataclass
class TimerOutput:
    team: Team | None = None
    total_time_sec: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class SyncTimersOutput:
    updated: int = 0
    completed: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class SyncPositionsOutput:
    updated: int = 0
    success: bool = False
    error: str | None = None
    error_code: str | None = None
