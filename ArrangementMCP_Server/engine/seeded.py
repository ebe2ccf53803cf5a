"""Deterministic random numbers for reproducible transforms.

Mulberry32: a tiny 32-bit generator whose output depends only on the seed,
so a seed reported back to the caller reproduces the same transform on any
platform.
"""

import math
import time
from typing import List, MutableSequence, Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def seed_from_clock() -> int:
    """Seed derived from wall-clock milliseconds, kept in 32-bit range."""
    return int(time.time() * 1000) & _MASK32


class SeededRandom:
    """Mulberry32 generator.

    All draws go through :meth:`uniform`; the helpers only reshape its
    output, so the number of draws per call is fixed and documented.
    """

    def __init__(self, seed: int):
        self.seed = seed
        self._state = seed & _MASK32

    def _next_uint32(self) -> int:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t = ((t + _imul(t ^ (t >> 7), t | 61)) & _MASK32) ^ t
        return (t ^ (t >> 14)) & _MASK32

    def uniform(self) -> float:
        """One draw in [0, 1)."""
        return self._next_uint32() / 4294967296.0

    def range(self, low: float, high: float) -> float:
        """One draw in [low, high)."""
        return low + self.uniform() * (high - low)

    def pick(self, items: Sequence[T]) -> T:
        """One draw; returns an element of ``items``."""
        if not items:
            raise ValueError("cannot pick from an empty sequence")
        return items[math.floor(self.uniform() * len(items))]

    def shuffle(self, items: MutableSequence[T]) -> List[T]:
        """Fisher-Yates from the end, ``len(items) - 1`` draws.

        Returns a new list; ``items`` is left untouched.
        """
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = math.floor(self.uniform() * (i + 1))
            result[i], result[j] = result[j], result[i]
        return result
