"""
Question selection rules.

Snake tiles draw only snake (coding) questions. Normal tiles draw from the
non-snake pool, leaning towards non-coding questions: a coding question is
picked with the configured probability when one is left, and coding is the
fallback once the non-coding pool is exhausted.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.domain.entities import Question
from src.ports.randomness import RandomPort


def eligible_pool(questions: Iterable[Question], used_ids: set) -> list[Question]:
    return [q for q in questions if q.is_active and q.id not in used_ids]


def pick_question(
    pool: list[Question],
    is_snake: bool,
    rng: RandomPort,
    coding_probability: float,
) -> Question | None:
    if is_snake:
        snake_pool = [q for q in pool if q.type == "CODING" and q.is_snake_question]
        return rng.choice(snake_pool) if snake_pool else None

    normal = [q for q in pool if not q.is_snake_question]
    coding = [q for q in normal if q.type == "CODING"]
    other = [q for q in normal if q.type != "CODING"]

    if coding and (not other or rng.random() < coding_probability):
        return rng.choice(coding)
    if other:
        return rng.choice(other)
    return None
