"""
Teams component - team creation, credentials and organiser overrides.
"""

from .component import (
    run_adjust_timer,
    run_assign_map,
    run_change_room,
    run_create_team,
    run_disqualify,
    run_list_teams,
    run_reinstate,
    run_set_timer,
    run_team_detail,
    run_team_progress,
    run_update_details,
    run_update_password,
)
from .models import (
    AdjustTimerInput,
    AssignMapInput,
    ChangeRoomInput,
    CreateTeamInput,
    SetTimerInput,
    TeamActionInput,
    TeamDetailOutput,
    TeamListOutput,
    TeamOutput,
    TeamProgressOutput,
    TeamSummary,
    UpdatePasswordInput,
    UpdateTeamInput,
)

__all__ = [
    # Entry points
    "run_create_team",
    "run_update_password",
    "run_disqualify",
    "run_reinstate",
    "run_change_room",
    "run_update_details",
    "run_assign_map",
    "run_adjust_timer",
    "run_set_timer",
    "run_list_teams",
    "run_team_detail",
    "run_team_progress",
    # Models
    "CreateTeamInput",
    "UpdatePasswordInput",
    "TeamActionInput",
    "ChangeRoomInput",
    "UpdateTeamInput",
    "AssignMapInput",
    "AdjustTimerInput",
    "SetTimerInput",
    "TeamOutput",
    "TeamSummary",
    "TeamListOutput",
    "TeamDetailOutput",
    "TeamProgressOutput",
]
