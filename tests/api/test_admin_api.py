from uuid import uuid4

import pytest


@pytest.fixture
def checkpoint(client, rng, team_headers) -> dict:
    rng.rolls.append(5)
    data = client.post("/api/participant/dice/roll", headers=team_headers).json()["data"]
    return data


def test_admin_routes_reject_participants(client, team_headers):
    assert client.get("/api/admin/teams", headers=team_headers).status_code == 403
    assert client.get("/api/admin/checkpoints/pending", headers=team_headers).status_code == 403


def test_admin_routes_need_a_login(client):
    response = client.get("/api/admin/teams")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


class TestTeams:
    def test_list_and_detail(self, client, admin_headers, api_team, checkpoint):
        teams = client.get("/api/admin/teams", headers=admin_headers).json()["data"]
        assert [t["team_code"] for t in teams] == ["TEAM1001"]
        assert teams[0]["username"] == "TEAM1001"
        assert teams[0]["checkpoint_count"] == 1
        assert teams[0]["approved_count"] == 0

        detail = client.get(f"/api/admin/teams/{api_team.id}", headers=admin_headers).json()
        assert detail["data"]["current_position"] == 6
        assert len(detail["data"]["checkpoints"]) == 1
        assert len(detail["data"]["dice_rolls"]) == 1

    def test_unknown_team(self, client, admin_headers):
        response = client.get(f"/api/admin/teams/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_bad_team_id(self, client, admin_headers):
        assert client.get("/api/admin/teams/nope", headers=admin_headers).status_code == 422

    def test_progress(self, client, admin_headers, api_team, checkpoint):
        data = client.get(
            f"/api/admin/teams/{api_team.id}/progress", headers=admin_headers
        ).json()["data"]
        assert data["board_size"] == 150
        assert data["pending_checkpoints"] == 1
        assert data["approved_checkpoints"] == 0

    def test_pause_and_resume(self, client, admin_headers, api_team, checkpoint):
        pause = client.post(f"/api/admin/teams/{api_team.id}/timer/pause", headers=admin_headers)
        assert pause.json()["message"] == "Timer paused"
        again = client.post(f"/api/admin/teams/{api_team.id}/timer/pause", headers=admin_headers)
        assert again.status_code == 409
        resume = client.post(
            f"/api/admin/teams/{api_team.id}/timer/resume", headers=admin_headers
        )
        assert resume.json()["message"] == "Timer resumed"


class TestCheckpoints:
    def test_pending_queue_shows_answers_to_staff(self, client, admin_headers, checkpoint):
        pending = client.get("/api/admin/checkpoints/pending", headers=admin_headers).json()
        item = pending["data"][0]
        assert item["id"] == checkpoint["checkpoint"]["id"]
        assert item["question"]["correct_answer"] == "42"
        assert item["team"]["team_code"] == "TEAM1001"

    def test_approve_then_queue_is_empty(self, client, admin_headers, checkpoint):
        checkpoint_id = checkpoint["checkpoint"]["id"]
        approved = client.post(
            f"/api/admin/checkpoints/{checkpoint_id}/approve", headers=admin_headers
        ).json()["data"]
        assert approved["status"] == "APPROVED"

        assert client.get("/api/admin/checkpoints/pending", headers=admin_headers).json()[
            "data"
        ] == []
        twice = client.post(
            f"/api/admin/checkpoints/{checkpoint_id}/approve", headers=admin_headers
        )
        assert twice.status_code == 409

    def test_mark_answer(self, client, admin_headers, checkpoint):
        client.post(
            f"/api/admin/checkpoints/{checkpoint['checkpoint']['id']}/approve",
            headers=admin_headers,
        )
        response = client.post(
            f"/api/admin/assignments/{checkpoint['assignment_id']}/mark",
            json={"is_correct": True},
            headers=admin_headers,
        )
        body = response.json()
        assert body["message"] == "Answer marked correct"
        assert body["data"]["assignment"]["status"] == "CORRECT"

    def test_mark_requires_boolean(self, client, admin_headers, checkpoint):
        response = client.post(
            f"/api/admin/assignments/{checkpoint['assignment_id']}/mark",
            json={},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_delete_pending_checkpoint_rewinds_team(
        self, client, admin_headers, team_headers, checkpoint
    ):
        response = client.delete(
            f"/api/admin/checkpoints/{checkpoint['checkpoint']['id']}", headers=admin_headers
        )
        assert response.json()["message"] == "Checkpoint deleted"
        team = response.json()["data"]["team"]
        assert team["current_position"] == 1
        assert team["can_roll_dice"] is True

        state = client.get("/api/participant/state", headers=team_headers).json()["data"]
        assert state["current_position"] == 1

    def test_unknown_checkpoint(self, client, admin_headers):
        response = client.get(f"/api/admin/checkpoints/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404


def test_available_questions_hide_assigned(client, admin_headers, checkpoint):
    available = client.get("/api/admin/questions/available", headers=admin_headers).json()
    assert len(available["data"]) == 1

    numerical = client.get(
        "/api/admin/questions/available", params={"type": "numerical"}, headers=admin_headers
    ).json()["data"]
    assert all(q["type"] == "NUMERICAL" for q in numerical)
