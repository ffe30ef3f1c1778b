"""
Session Selector - Two-branch session creation

Premium sessions are driven by spaced repetition:
1. Due pool: items whose next review is due, earliest first
2. New pool: never-seen items, in insertion order, to fill the remainder

Free sessions are driven by priority scoring:
1. Rank every eligible item (see priority.py)
2. Over-fetch the top 2 * limit candidates
3. Shuffle and keep limit of them

Both branches shuffle the final batch with the injected RNG. An empty
result means no session can start; it is not an error.
"""

from __future__ import annotations
import logging
import random
from datetime import datetime
from typing import Sequence

from zi.session_builders.pool_utils import fill_in_order, shuffled
from zi.session_builders.priority import rank_items
from zi.srs.constants import AccessTier, FREE_OVERFETCH_FACTOR, PRIORITY_JITTER
from zi.srs.memory_state import LearningItem
from zi.srs.repository import ItemRepository

logger = logging.getLogger(__name__)


def select_session(
    tier: AccessTier,
    eligible_levels: Sequence[int],
    limit: int,
    now: datetime,
    repository: ItemRepository,
    rng: random.Random,
    jitter: int = PRIORITY_JITTER
) -> list[LearningItem]:
    """
    Pick the items for one learning session.

    Args:
        tier: Access tier deciding the branch
        eligible_levels: Levels the items may come from
        limit: Maximum number of items (<= 0 gives an empty session)
        now: Current time
        repository: Item store snapshot to select from
        rng: Random source for shuffles and jitter
        jitter: Free-tier score jitter

    Returns:
        Up to `limit` items in presentation order
    """
    levels = sorted(set(eligible_levels))
    if limit <= 0 or not levels:
        return []

    if AccessTier(tier) == AccessTier.PREMIUM:
        items = _select_premium(levels, limit, now, repository, rng)
    else:
        items = _select_free(levels, limit, now, repository, rng, jitter)

    logger.debug(
        "Selected %d/%d items for %s session (levels %s)",
        len(items), limit, AccessTier(tier).value, levels
    )
    return items


def _select_premium(
    levels: list[int],
    limit: int,
    now: datetime,
    repository: ItemRepository,
    rng: random.Random
) -> list[LearningItem]:
    due = repository.fetch_by_levels_and_due(levels, now)[:limit]

    new: list[LearningItem] = []
    if len(due) < limit:
        new = repository.fetch_by_levels_unseen(levels, limit - len(due))

    session = fill_in_order({"due": due, "new": new}, ["due", "new"], limit)
    return shuffled(session, rng)


def _select_free(
    levels: list[int],
    limit: int,
    now: datetime,
    repository: ItemRepository,
    rng: random.Random,
    jitter: int
) -> list[LearningItem]:
    pool = repository.fetch_by_levels(levels)
    if not pool:
        return []

    candidates = rank_items(pool, now, rng, jitter=jitter)[:limit * FREE_OVERFETCH_FACTOR]
    return shuffled(candidates, rng)[:limit]
