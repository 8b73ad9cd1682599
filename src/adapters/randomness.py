import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


class SystemRandom:
    """RandomPort backed by the OS entropy source."""

    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def random(self) -> float:
        return self._rng.random()

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)
