from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomPort(Protocol):
    """Source of randomness for dice, room and question draws.

    `random.Random` satisfies this protocol, so tests can pass a seeded instance.
    """

    def randint(self, a: int, b: int) -> int: ...

    def random(self) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...
