"""Test doubles and builders shared across the suite."""

import random
from datetime import UTC, datetime, timedelta
from pathlib import Path

from src.domain.entities import Question, Team, User

ROOT = Path(__file__).parent.parent
RULES_PATH = ROOT / "rules.yaml"
MIGRATIONS_DIR = str(ROOT / "migrations")


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2025, 3, 14, 9, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, seconds: int) -> None:
        self._now += timedelta(seconds=seconds)


class ScriptedRandom(random.Random):
    """Seeded random whose dice (randint from 1) results can be queued up front."""

    def __init__(self, seed: int = 1234) -> None:
        super().__init__(seed)
        self.rolls: list[int] = []

    def randint(self, a: int, b: int) -> int:
        if self.rolls and a == 1:
            return self.rolls.pop(0)
        return super().randint(a, b)


def add_question(store, **fields) -> Question:
    defaults = {"text": "What is 6 x 7?", "type": "NUMERICAL", "correct_answer": "42"}
    defaults.update(fields)
    return store.questions.save(Question(**defaults))


def make_team(store, code: str = "TEAM1001", **fields) -> Team:
    defaults = {
        "team_code": code,
        "team_name": f"Team {code[-4:]}",
        "current_room": "AB1 104",
    }
    defaults.update(fields)
    team = store.teams.save(Team(**defaults))
    store.users.save(
        User(username=code, password_hash="not-a-real-hash", role="participant", team_id=team.id)
    )
    return team

PASSWORD = "correct-horse"
