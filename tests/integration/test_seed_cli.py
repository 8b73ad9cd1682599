import pytest

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.app_shell import cli
from src.app_shell.seed import BOARD_MAPS, ROOMS, seed_maps, seed_rooms, seed_superadmin
from tests.helpers import MIGRATIONS_DIR, RULES_PATH


def test_seed_is_idempotent(store, rules):
    assert seed_rooms(store) == 14
    assert seed_maps(store, rules) == 5
    assert seed_rooms(store) == 0
    assert seed_maps(store, rules) == 0

    rooms = store.rooms.list_all()
    assert len(rooms) == len(ROOMS)
    for floor in (1, 2):
        on_floor = [r for r in rooms if r.floor == floor]
        assert sum(r.room_type == "TECH" for r in on_floor) == 3
        assert sum(r.room_type == "NON_TECH" for r in on_floor) == 4

    map_one = store.maps.get_by_name("Map-1")
    assert store.maps.snake_positions(map_one.id) == set(BOARD_MAPS["Map-1"])


def test_superadmin_from_environment(store, monkeypatch):
    assert seed_superadmin(store, JWTAuthAdapter()) is False

    monkeypatch.setenv("SNL_SUPERADMIN_USERNAME", "root")
    monkeypatch.setenv("SNL_SUPERADMIN_PASSWORD", "correct-horse")
    assert seed_superadmin(store, JWTAuthAdapter()) is True
    assert store.users.get_by_username("root").role == "superadmin"
    assert seed_superadmin(store, JWTAuthAdapter()) is False


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(cli, "RULES_PATH", str(RULES_PATH))
    monkeypatch.setattr(cli, "MIGRATIONS_DIR", MIGRATIONS_DIR)
    monkeypatch.delenv("SNL_SUPERADMIN_USERNAME", raising=False)
    return tmp_path


def test_cli_seed_and_create_team(cli_env, capsys):
    cli.main(["seed"])
    cli.main(["create-team", "Ladder Climbers", "--member", "Ana", "--password", "secret1"])
    out = capsys.readouterr().out

    assert "Seed complete." in out
    assert "Password: secret1" in out
    with SQLiteUnitOfWork(cli.db_path()) as store:
        assert len(store.rooms.list_all()) == 14
        team = store.teams.list_all()[0]
        assert team.team_name == "Ladder Climbers"
        assert f"Login: {team.team_code}" in out


def test_cli_create_admin_twice_fails(cli_env, capsys):
    cli.main(["migrate"])
    cli.main(["create-admin", "marshal", "s3cret-pass"])
    with pytest.raises(SystemExit):
        cli.main(["create-admin", "marshal", "s3cret-pass"])


def test_cli_single_sync_pass(cli_env, capsys):
    cli.main(["migrate"])
    cli.main(["sync", "--once"])
    assert "Applied 1 migration(s)." in capsys.readouterr().out


def test_cli_requires_rules_file(cli_env, monkeypatch):
    monkeypatch.setattr(cli, "RULES_PATH", str(cli_env / "missing.yaml"))
    cli.main(["migrate"])
    with pytest.raises(SystemExit):
        cli.main(["sync", "--once"])
