"""
Pool utilities for session builders.

Small primitives for combining candidate pools without enforcing a
scheduling policy.
"""

from __future__ import annotations
import random
from typing import Sequence, TypeVar

from zi.srs.memory_state import LearningItem


T = TypeVar("T")


def fill_in_order(
    pools: dict[str, Sequence[LearningItem]],
    order: list[str],
    target_size: int
) -> list[LearningItem]:
    """
    Fill a session by walking pools in order until target_size is reached.

    Items already taken from an earlier pool are skipped.
    """
    session: list[LearningItem] = []
    taken: set[int] = set()
    for name in order:
        for item in pools.get(name, []):
            if len(session) >= target_size:
                return session
            if item.id in taken:
                continue
            taken.add(item.id)
            session.append(item)
    return session


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    """Shuffled copy using the injected random source."""
    result = list(items)
    rng.shuffle(result)
    return result
