import pytest

from src.adapters.auth.crypto import JWTAuthAdapter
from src.domain.entities import User
from tests.helpers import PASSWORD


@pytest.fixture
def rolled(client, rng, team_headers):
    rng.rolls.append(3)
    response = client.post("/api/participant/dice/roll", headers=team_headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_participant_routes_need_a_team_login(client, admin_headers):
    assert client.get("/api/participant/state").status_code == 401
    response = client.get("/api/participant/state", headers=admin_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Access denied"


def test_participant_without_team_is_refused(client, db, login):
    with db() as store:
        store.users.save(
            User(
                username="drifter",
                password_hash=JWTAuthAdapter().hash_password(PASSWORD),
                role="participant",
            )
        )
    headers = login("drifter")

    for path in ("/api/participant/state", "/api/leaderboard/me"):
        response = client.get(path, headers=headers)
        assert response.status_code == 403
        assert response.json()["message"] == "User is not assigned to a team"


def test_state_and_dashboard(client, team_headers):
    state = client.get("/api/participant/state", headers=team_headers).json()["data"]
    assert state["team_code"] == "TEAM1001"
    assert state["current_position"] == 1
    assert state["can_roll_dice"] is True

    dashboard = client.get("/api/participant/dashboard", headers=team_headers).json()["data"]
    assert dashboard["can_roll"] is True
    assert dashboard["pending"] is None
    assert dashboard["recent_checkpoints"] == []


class TestRoll:
    def test_roll_moves_and_assigns_room(self, rolled):
        data = rolled["data"]
        assert data["dice_value"] == 3
        assert (data["position_before"], data["position_after"]) == (1, 4)
        assert data["moved"] is True
        assert data["room_number"].startswith("AB1 2")
        assert data["checkpoint"]["status"] == "PENDING"
        assert data["assignment_id"]
        assert rolled["message"] == f"Rolled 3; head to room {data['room_number']}"

    def test_second_roll_is_refused(self, client, team_headers, rolled):
        response = client.post("/api/participant/dice/roll", headers=team_headers)
        assert response.status_code == 403
        assert response.json()["success"] is False

        can_roll = client.get("/api/participant/dice/can-roll", headers=team_headers).json()
        assert can_roll["data"]["can_roll"] is False
        assert can_roll["data"]["reason"]

    def test_history(self, client, team_headers, rolled):
        history = client.get(
            "/api/participant/dice/history", params={"limit": 5}, headers=team_headers
        ).json()["data"]
        assert [r["value"] for r in history] == [3]

    def test_history_limit_is_validated(self, client, team_headers):
        response = client.get(
            "/api/participant/dice/history", params={"limit": 0}, headers=team_headers
        )
        assert response.status_code == 422
        assert response.json()["data"][0]["field"] == "limit"


class TestCheckpointFlow:
    def test_question_hidden_until_approved(self, client, team_headers, admin_headers, rolled):
        pending = client.get("/api/participant/checkpoints/pending", headers=team_headers)
        assert pending.json()["data"]["question"] is None

        checkpoint_id = rolled["data"]["checkpoint"]["id"]
        approve = client.post(
            f"/api/admin/checkpoints/{checkpoint_id}/approve", headers=admin_headers
        )
        assert approve.json()["message"] == "Checkpoint approved"

        listed = client.get("/api/participant/checkpoints", headers=team_headers).json()["data"]
        question = listed[0]["question"]
        assert question["text"]
        assert "correct_answer" not in question

    def test_submit_before_approval_conflicts(self, client, team_headers, rolled):
        response = client.post(
            "/api/participant/answer/submit",
            json={"assignment_id": rolled["data"]["assignment_id"], "answer": "42"},
            headers=team_headers,
        )
        assert response.status_code == 409

    def test_correct_answer_is_auto_marked(self, client, team_headers, admin_headers, rolled):
        client.post(
            f"/api/admin/checkpoints/{rolled['data']['checkpoint']['id']}/approve",
            headers=admin_headers,
        )
        response = client.post(
            "/api/participant/answer/submit",
            json={"assignment_id": rolled["data"]["assignment_id"], "answer": " 42 "},
            headers=team_headers,
        )
        body = response.json()
        assert body["message"] == "Correct answer"
        assert body["data"]["auto_marked"] is True
        assert body["data"]["is_correct"] is True
        assert body["data"]["assignment"]["status"] == "CORRECT"

        again = client.post(
            "/api/participant/answer/submit",
            json={"assignment_id": rolled["data"]["assignment_id"], "answer": "42"},
            headers=team_headers,
        )
        assert again.status_code == 409

    def test_bad_assignment_id(self, client, team_headers):
        response = client.post(
            "/api/participant/answer/submit",
            json={"assignment_id": "not-a-uuid", "answer": "42"},
            headers=team_headers,
        )
        assert response.status_code == 422


def test_timer_sync_after_first_roll(client, team_headers, rolled):
    data = client.post("/api/participant/timer/sync", headers=team_headers).json()["data"]
    assert data["timer_running"] is True
    assert data["total_time_sec"] >= 0


def test_board_without_map(client, team_headers):
    data = client.get("/api/participant/board", headers=team_headers).json()["data"]
    assert data["board_size"] == 150
    assert data["snake_positions"] == []


def test_participant_leaderboard(client, team_headers):
    entries = client.get("/api/participant/leaderboard", headers=team_headers).json()["data"]
    assert [e["team_code"] for e in entries] == ["TEAM1001"]
    assert entries[0]["rank"] == 1
