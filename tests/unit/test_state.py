from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from src.domain import state
from src.domain.entities import Checkpoint, QuestionAssignment, Team

NOW = datetime(2025, 3, 14, 9, 0, tzinfo=UTC)


def _team(**fields) -> Team:
    return Team(team_code="TEAM1234", team_name="Alpha", **fields)


def _checkpoint(**fields) -> Checkpoint:
    defaults = {
        "team_id": uuid4(),
        "checkpoint_number": 1,
        "position_before": 1,
        "position_after": 5,
        "room_number": "AB1 204",
    }
    defaults.update(fields)
    return Checkpoint(**defaults)


# --- can_roll ---


def test_fresh_team_can_roll():
    assert state.can_roll(_team()) == (True, None)


@pytest.mark.parametrize(
    "fields,reason",
    [
        ({"status": "COMPLETED"}, state.COMPLETED_REASON),
        ({"status": "DISQUALIFIED"}, state.DISQUALIFIED_REASON),
        ({"can_roll_dice": False}, state.PENDING_REASON),
    ],
)
def test_roll_refusals(fields, reason):
    allowed, why = state.can_roll(_team(**fields))
    assert allowed is False
    assert why == reason


# --- Checkpoint transitions ---


def test_approve_is_one_way():
    approved = state.approve(_checkpoint())
    assert approved.status == "APPROVED"
    with pytest.raises(ValueError):
        state.approve(approved)


def test_approve_returns_copy():
    original = _checkpoint()
    state.approve(original)
    assert original.status == "PENDING"


def test_mark_sets_answered_at():
    assignment = QuestionAssignment(checkpoint_id=uuid4(), question_id=uuid4())
    marked = state.mark(assignment, "CORRECT", NOW)
    assert marked.status == "CORRECT"
    assert marked.answered_at == NOW
    # Overriding a mark is allowed.
    assert state.mark(marked, "INCORRECT", NOW).status == "INCORRECT"


def test_mark_rejects_pending():
    assignment = QuestionAssignment(checkpoint_id=uuid4(), question_id=uuid4())
    with pytest.raises(ValueError):
        state.mark(assignment, "PENDING", NOW)


def test_unlock_at_moves_team_to_checkpoint():
    team = _team(can_roll_dice=False)
    unlocked = state.unlock_at(team, _checkpoint(position_after=9, room_number="AB1 203"), NOW)
    assert unlocked.can_roll_dice is True
    assert unlocked.current_position == 9
    assert unlocked.current_room == "AB1 203"


# --- Timer ---


def test_timer_starts_paused():
    team = _team()
    assert team.timer_running is False
    assert state.live_total_time(team, NOW) == 0


def test_start_then_pause_accumulates():
    team = state.start_timer(_team(), NOW)
    assert team.timer_running
    paused = state.pause_timer(team, NOW + timedelta(seconds=90))
    assert paused.total_time_sec == 90
    assert paused.timer_running is False
    assert paused.timer_paused_at == NOW + timedelta(seconds=90)


def test_live_total_includes_running_segment():
    team = state.start_timer(_team(total_time_sec=100), NOW)
    assert state.live_total_time(team, NOW + timedelta(seconds=30)) == 130


def test_sync_folds_segment_and_restarts():
    team = state.start_timer(_team(), NOW)
    later = NOW + timedelta(seconds=45)
    synced = state.sync_timer(team, later)
    assert synced.total_time_sec == 45
    assert synced.timer_started_at == later
    assert state.live_total_time(synced, later) == 45


def test_sync_on_paused_timer_is_noop():
    team = _team(total_time_sec=12)
    assert state.sync_timer(team, NOW).total_time_sec == 12


def test_complete_pauses_and_finishes():
    team = state.start_timer(_team(), NOW)
    done = state.complete(team, NOW + timedelta(seconds=600))
    assert done.status == "COMPLETED"
    assert done.total_time_sec == 600
    assert done.timer_running is False
