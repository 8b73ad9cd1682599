from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.deps import (
    Settings,
    get_cache,
    get_rate_limiter,
    get_rng,
    get_rules,
    get_settings,
)
from src.api.main import app
from src.app_shell.cache import TTLCache
from src.app_shell.rate_limit import RateLimiter
from src.app_shell.seed import seed_rooms
from src.domain.entities import Team, User
from src.rules.models import RateLimitRules, RateLimitWindow
from tests.helpers import MIGRATIONS_DIR, PASSWORD, RULES_PATH, add_question, make_team

# Roomy enough that ordinary tests never trip the limiter.
GENEROUS_LIMITS = RateLimitRules(
    auth=RateLimitWindow(window_seconds=60, max_requests=1000),
    api=RateLimitWindow(window_seconds=60, max_requests=1000),
)


@pytest.fixture
def api_db(tmp_path, monkeypatch) -> str:
    monkeypatch.setenv("SNL_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SNL_RULES_PATH", str(RULES_PATH))
    path = str(tmp_path / "snl.db")
    SQLiteMigrator(path, MIGRATIONS_DIR).run_migrations()
    with SQLiteUnitOfWork(path) as store:
        seed_rooms(store)
        add_question(store)
        add_question(store, text="Pick the answer", type="MCQ", options=["42", "7"])
    return path


@pytest.fixture
def limits() -> RateLimitRules:
    return GENEROUS_LIMITS


@pytest.fixture
def client(api_db, rules, rng, limits) -> Iterator[TestClient]:
    settings = Settings()
    cache = TTLCache(default_ttl=rules.cache.leaderboard_ttl_seconds)
    limiter = RateLimiter(limits)

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_rng] = lambda: rng
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    # No context manager: the lifespan hook would reload settings from scratch.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db(api_db) -> Callable[[], SQLiteUnitOfWork]:
    """Open a fresh unit of work on the API database."""
    return lambda: SQLiteUnitOfWork(api_db)


def _save_staff(api_db: str, username: str, role: str) -> User:
    user = User(
        username=username, password_hash=JWTAuthAdapter().hash_password(PASSWORD), role=role
    )
    with SQLiteUnitOfWork(api_db) as store:
        store.users.save(user)
    return user


@pytest.fixture
def staff(api_db) -> dict[str, User]:
    return {
        "admin": _save_staff(api_db, "marshal", "admin"),
        "superadmin": _save_staff(api_db, "root", "superadmin"),
    }


@pytest.fixture
def api_team(api_db) -> Team:
    with SQLiteUnitOfWork(api_db) as store:
        team = make_team(store, code="TEAM1001")
        user = store.users.get_by_team(team.id)
        store.users.save(
            user.model_copy(update={"password_hash": JWTAuthAdapter().hash_password(PASSWORD)})
        )
    return team


@pytest.fixture
def login(client) -> Callable[[str], dict[str, str]]:
    def _login(username: str) -> dict[str, str]:
        response = client.post(
            "/api/auth/login", json={"username": username, "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}

    return _login


@pytest.fixture
def team_headers(login, api_team) -> dict[str, str]:
    return login("TEAM1001")


@pytest.fixture
def admin_headers(login, staff) -> dict[str, str]:
    return login("marshal")


@pytest.fixture
def superadmin_headers(login, staff) -> dict[str, str]:
    return login("root")
