"""Team creation and the organiser overrides."""

from datetime import timedelta

import pytest

from src.adapters.auth.crypto import JWTAuthAdapter
from src.components.board import CreateMapInput, run_create_map
from src.components.teams import (
    AdjustTimerInput,
    AssignMapInput,
    ChangeRoomInput,
    CreateTeamInput,
    SetTimerInput,
    TeamActionInput,
    UpdatePasswordInput,
    UpdateTeamInput,
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
from src.domain import state
from tests.helpers import make_team


@pytest.fixture
def auth_adapter():
    return JWTAuthAdapter()


def _login_session(store, clock, team):
    user = store.users.get_by_team(team.id)
    store.tokens.set(user.id, "token-hash", clock.now_utc() + timedelta(hours=1))
    return user


class TestCreate:
    def test_creates_team_and_login(self, store, auth_adapter, rng, clock, rules, rooms):
        result = run_create_team(
            CreateTeamInput(team_name="  Ladder Climbers ", members=["Ana", " ", "Ben"]),
            store,
            auth_adapter,
            rng,
            clock,
            rules.game,
        )
        assert result.success
        team = result.team
        assert team.team_code.startswith("TEAM") and len(team.team_code) == 8
        assert team.team_name == "Ladder Climbers"
        assert team.current_position == 1
        assert team.current_room in {r.room_number for r in rooms}
        assert [m.name for m in store.teams.get_by_id(team.id).members] == ["Ana", "Ben"]

        assert len(result.password) == 8
        user = store.users.get_by_username(team.team_code)
        assert user.role == "participant"
        assert user.team_id == team.id
        assert auth_adapter.verify_password(result.password, user.password_hash)

    def test_explicit_password(self, store, auth_adapter, rng, clock, rules, rooms):
        result = run_create_team(
            CreateTeamInput(team_name="Snakes", password="hunter22"),
            store, auth_adapter, rng, clock, rules.game,
        )
        assert result.password == "hunter22"

    @pytest.mark.parametrize(
        "inp",
        [CreateTeamInput(team_name="   "), CreateTeamInput(team_name="Short", password="abc")],
    )
    def test_rejects_bad_input(self, store, auth_adapter, rng, clock, rules, inp):
        result = run_create_team(inp, store, auth_adapter, rng, clock, rules.game)
        assert result.error_code == "invalid"
        assert store.teams.list_all() == []

    def test_unknown_map(self, store, auth_adapter, rng, clock, rules):
        from uuid import uuid4

        result = run_create_team(
            CreateTeamInput(team_name="Lost", map_id=uuid4()),
            store, auth_adapter, rng, clock, rules.game,
        )
        assert result.error_code == "not_found"


class TestCredentialsAndStatus:
    def test_password_change_ends_session(self, store, auth_adapter, clock, team):
        user = _login_session(store, clock, team)
        result = run_update_password(
            UpdatePasswordInput(team_id=team.id, password="newpass1"), store, auth_adapter, clock
        )
        assert result.success
        assert store.tokens.get(user.id) is None
        saved = store.users.get_by_id(user.id)
        assert auth_adapter.verify_password("newpass1", saved.password_hash)

    def test_short_password(self, store, auth_adapter, clock, team):
        result = run_update_password(
            UpdatePasswordInput(team_id=team.id, password="123"), store, auth_adapter, clock
        )
        assert result.error_code == "invalid"

    def test_disqualify_pauses_timer_and_ends_session(self, store, clock, team):
        store.teams.save(state.start_timer(team, clock.now_utc()))
        user = _login_session(store, clock, team)
        clock.advance(120)

        result = run_disqualify(TeamActionInput(team_id=team.id), store, clock)
        assert result.team.status == "DISQUALIFIED"
        assert result.team.timer_running is False
        assert result.team.total_time_sec == 120
        assert store.tokens.get(user.id) is None

        again = run_disqualify(TeamActionInput(team_id=team.id), store, clock)
        assert again.error_code == "conflict"

    def test_reinstate(self, store, clock, rules, team):
        active = run_reinstate(TeamActionInput(team_id=team.id), store, clock, rules.game)
        assert active.error_code == "conflict"
        run_disqualify(TeamActionInput(team_id=team.id), store, clock)
        result = run_reinstate(TeamActionInput(team_id=team.id), store, clock, rules.game)
        assert result.team.status == "ACTIVE"

    def test_reinstate_finished_team(self, store, clock, rules, rooms):
        team = make_team(store, current_position=150)
        run_disqualify(TeamActionInput(team_id=team.id), store, clock)
        result = run_reinstate(TeamActionInput(team_id=team.id), store, clock, rules.game)
        assert result.team.status == "COMPLETED"


class TestOverrides:
    def test_change_room(self, store, clock, team):
        result = run_change_room(
            ChangeRoomInput(team_id=team.id, room_number=" AB1 201 "), store, clock
        )
        assert result.team.current_room == "AB1 201"
        event = store.audit.query(action="TEAM_ROOM_CHANGED")[0]
        assert event.details == {"from": "AB1 104", "to": "AB1 201", "floor": 2}

    def test_change_room_unknown(self, store, clock, team):
        inp = ChangeRoomInput(team_id=team.id, room_number="LAB 9")
        result = run_change_room(inp, store, clock)
        assert result.error_code == "invalid"

    def test_update_details(self, store, clock, team):
        result = run_update_details(
            UpdateTeamInput(team_id=team.id, team_name="Renamed", points=7, current_position=20),
            store,
            clock,
        )
        saved = store.teams.get_by_id(team.id)
        assert result.success
        assert (saved.team_name, saved.points, saved.current_position) == ("Renamed", 7, 20)

    @pytest.mark.parametrize(
        "fields",
        [{}, {"team_name": " "}, {"current_position": 0}, {"total_time_sec": -5}],
    )
    def test_update_details_rejects(self, store, clock, team, fields):
        result = run_update_details(UpdateTeamInput(team_id=team.id, **fields), store, clock)
        assert result.error_code == "invalid"

    def test_assign_map(self, store, clock, rules, team):
        board_map = run_create_map(CreateMapInput(name="Map-9"), store, rules.game).view.board_map
        result = run_assign_map(AssignMapInput(team_id=team.id, map_id=board_map.id), store, clock)
        assert result.team.map_id == board_map.id


class TestTimerCorrections:
    def test_adjust_logs_signed_difference(self, store, clock, team):
        run_adjust_timer(AdjustTimerInput(team_id=team.id, seconds=300), store, clock)
        result = run_adjust_timer(
            AdjustTimerInput(team_id=team.id, seconds=-100, reason="Judge credit"), store, clock
        )
        assert result.team.total_time_sec == 200
        logs = store.time_logs.list_for_team(team.id)
        assert {(log.seconds, log.reason) for log in logs} == {
            (300, "Manual adjustment"),
            (-100, "Judge credit"),
        }

    @pytest.mark.parametrize("seconds", [0, -1])
    def test_adjust_rejects(self, store, clock, team, seconds):
        result = run_adjust_timer(AdjustTimerInput(team_id=team.id, seconds=seconds), store, clock)
        assert result.error_code == "invalid"

    def test_set_folds_running_segment(self, store, clock, team):
        store.teams.save(state.start_timer(team, clock.now_utc()))
        clock.advance(600)

        result = run_set_timer(SetTimerInput(team_id=team.id, total_seconds=900), store, clock)
        assert result.team.total_time_sec == 900
        assert result.team.timer_started_at == clock.now_utc()
        log = store.time_logs.list_for_team(team.id)[0]
        assert (log.seconds, log.reason) == (300, "Timer set by admin")

    def test_set_negative(self, store, clock, team):
        result = run_set_timer(SetTimerInput(team_id=team.id, total_seconds=-1), store, clock)
        assert result.error_code == "invalid"


class TestQueries:
    def test_list_orders_by_position(self, store, clock, rooms):
        make_team(store, code="TEAM1111", current_position=10)
        make_team(store, code="TEAM2222", current_position=40)
        listing = run_list_teams(store, clock)
        assert [s.team.team_code for s in listing.teams] == ["TEAM2222", "TEAM1111"]
        assert listing.teams[0].username == "TEAM2222"

    def test_detail_and_progress(self, store, clock, rules, rooms):
        team = make_team(store, current_position=75)
        detail = run_team_detail(team.id, store, clock)
        assert detail.summary.checkpoint_count == 0
        assert detail.dice_rolls == []

        progress = run_team_progress(team.id, store, rules.game)
        assert progress.progress_percent == 50.0
        assert progress.board_size == 150
