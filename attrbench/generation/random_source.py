"""
Thread-safe pseudo-random source shared by generation and attribute selection.

`random.Random` keeps mutable internal state; batches are generated from
several worker threads at once, so every draw is serialized behind a lock.
"""

from __future__ import annotations

import random
import threading
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """
    Lock-guarded wrapper around a single `random.Random` instance.

    Parameters
    ----------
    seed : int | None
        Optional seed for reproducible runs.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def below(self, upper: int) -> int:
        """Uniform integer in [0, upper)."""
        with self._lock:
            return self._rng.randrange(upper)

    def bits(self, k: int) -> int:
        """Uniform non-negative integer with `k` random bits."""
        with self._lock:
            return self._rng.getrandbits(k)

    def unit(self) -> float:
        """Uniform float in [0, 1)."""
        with self._lock:
            return self._rng.random()

    def coin(self) -> bool:
        with self._lock:
            return self._rng.random() < 0.5

    def choice(self, items: Sequence[T]) -> T:
        with self._lock:
            return self._rng.choice(items)


__all__ = ["RandomSource"]
