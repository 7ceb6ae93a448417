"""
Random source for draw generation.

Every random choice the engine makes (coin flips, shuffles) goes through a
RandomSource so callers can replace it with a scripted one.
"""

import random
from typing import List, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a shuffled copy of items. The input is never mutated."""
        ...

    def coin_flip(self) -> bool:
        ...


class SystemRandomSource:
    """RandomSource backed by a private random.Random instance."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def shuffle(self, items: Sequence[T]) -> List[T]:
        shuffled = list(items)
        self._rng.shuffle(shuffled)
        return shuffled

    def coin_flip(self) -> bool:
        return self._rng.random() < 0.5


class IdentityRandomSource:
    """Deterministic source: shuffles are no-ops, coin flips always come up heads."""

    def shuffle(self, items: Sequence[T]) -> List[T]:
        return list(items)

    def coin_flip(self) -> bool:
        return True
