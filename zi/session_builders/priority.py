"""
Priority ranking for free-tier sessions.

Lower score = higher priority. The score only penalizes correct answers
and very recent exposure; it does not reward new or low-accuracy items.
"""

from __future__ import annotations
import random
from datetime import datetime
from typing import Optional, Sequence

from zi.srs.constants import (
    CORRECT_ANSWER_WEIGHT,
    RECENTLY_SEEN_PENALTY,
    RECENT_WINDOW_DAYS,
    PRIORITY_JITTER,
)
from zi.srs.memory_state import LearningItem


def days_since_last_seen(item: LearningItem, now: datetime) -> Optional[float]:
    """
    Days since the item was last reviewed, or None if never seen.
    """
    if item.last_seen_at is None:
        return None
    return (now - item.last_seen_at).total_seconds() / 86400.0


def priority_score(item: LearningItem, now: datetime) -> int:
    """
    score = times_correct * 20 + (50 if seen within the last day else 0)
    """
    score = item.times_correct * CORRECT_ANSWER_WEIGHT
    days = days_since_last_seen(item, now)
    if days is not None and days < RECENT_WINDOW_DAYS:
        score += RECENTLY_SEEN_PENALTY
    return score


def rank_items(
    items: Sequence[LearningItem],
    now: datetime,
    rng: random.Random,
    jitter: int = PRIORITY_JITTER
) -> list[LearningItem]:
    """
    Sort items by priority, best first.

    A random integer in [-jitter, jitter] is added to each score so
    orderings vary between sessions. jitter=0 gives a deterministic,
    stable sort.
    """
    if jitter > 0:
        scored = [(priority_score(i, now) + rng.randint(-jitter, jitter), i) for i in items]
    else:
        scored = [(priority_score(i, now), i) for i in items]
    scored.sort(key=lambda pair: pair[0])
    return [item for _, item in scored]
