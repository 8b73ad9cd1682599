from collections.abc import Iterator

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.app_shell.seed import seed_rooms
from src.domain.entities import Question, Team, User
from src.rules.loader import load_rules
from src.rules.models import Rules
from tests.helpers import (
    MIGRATIONS_DIR,
    RULES_PATH,
    FixedClock,
    ScriptedRandom,
    add_question,
    make_team,
)


@pytest.fixture
def rules() -> Rules:
    return load_rules(RULES_PATH)


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "snl.db")
    SQLiteMigrator(path, MIGRATIONS_DIR).run_migrations()
    return path


@pytest.fixture
def store(db_path) -> Iterator[SQLiteUnitOfWork]:
    with SQLiteUnitOfWork(db_path) as uow:
        yield uow


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def rooms(store):
    seed_rooms(store)
    return store.rooms.list_all()


@pytest.fixture
def questions(store) -> dict[str, Question]:
    """One question of every kind the game draws from."""
    return {
        "numerical": add_question(store, hint="Think of Douglas Adams"),
        "mcq": add_question(
            store,
            text="Capital of France?",
            type="MCQ",
            options=["Paris", "Rome"],
            correct_answer="Paris",
        ),
        "physical": add_question(
            store, text="Build a paper tower", type="PHYSICAL", correct_answer=None
        ),
        "coding": add_question(
            store, text="Reverse a string", type="CODING", correct_answer=None
        ),
        "snake": add_question(
            store,
            text="Fix the off-by-one",
            type="CODING",
            correct_answer=None,
            is_snake_question=True,
        ),
    }


@pytest.fixture
def team(store, rooms) -> Team:
    return make_team(store)


@pytest.fixture
def admin(store) -> User:
    return store.users.save(User(username="marshal", password_hash="x", role="admin"))
