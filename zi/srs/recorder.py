"""
Review Recorder - applies one review outcome

Main workflow:
1. Derive quality from the outcome (policy chosen per tier)
2. Update bookkeeping counters (all tiers)
3. Premium only: run the SRS calculator and overwrite scheduling state
4. Build the review event
5. Update the open session, closing it once its goal is reached
6. Persist everything, then hand back the updated copies

Inputs are never mutated. If the write fails, RepositoryUnavailable
propagates and the caller still holds the unmodified item and session.
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from zi.srs import calculator
from zi.srs.constants import AccessTier, QualityPolicy, DEFAULT_QUALITY_POLICY
from zi.srs.memory_state import (
    LearningItem,
    ReviewEvent,
    SessionState,
    review_type_for,
)
from zi.srs.repository import ItemRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOutcome:
    """Persisted result of one review."""
    item: LearningItem
    event: ReviewEvent
    session: Optional[SessionState]


def mark_seen(item: LearningItem, was_correct: bool, now: datetime) -> LearningItem:
    """
    Bookkeeping update applied on every review regardless of tier.
    """
    return replace(
        item,
        times_seen=item.times_seen + 1,
        times_correct=item.times_correct + (1 if was_correct else 0),
        times_incorrect=item.times_incorrect + (0 if was_correct else 1),
        last_seen_at=now,
        first_seen_at=item.first_seen_at or now
    )


def apply_srs(
    item: LearningItem,
    quality: int,
    now: datetime,
    rng: random.Random
) -> LearningItem:
    """
    Overwrite scheduling state with the calculator's output.
    """
    result = calculator.advance(
        quality=quality,
        repetitions=item.repetitions,
        ease_factor=item.ease_factor,
        interval=item.interval,
        now=now,
        rng=rng
    )
    return replace(
        item,
        ease_factor=result.ease_factor,
        interval=result.interval,
        repetitions=result.repetitions,
        next_review_due=result.next_review_due,
        last_review_quality=calculator.clamp_quality(quality)
    )


def update_session(
    session: SessionState,
    was_correct: bool,
    response_time_ms: Optional[int],
    now: datetime
) -> SessionState:
    """
    Count one review against an open session; close it at its goal.

    Closed sessions are returned unchanged.
    """
    if not session.is_open:
        return session

    reviewed = session.words_reviewed + 1
    average = session.average_response_ms
    if response_time_ms is not None:
        average = (average * (reviewed - 1) + response_time_ms) / reviewed

    updated = replace(
        session,
        words_reviewed=reviewed,
        correct_count=session.correct_count + (1 if was_correct else 0),
        incorrect_count=session.incorrect_count + (0 if was_correct else 1),
        average_response_ms=average
    )
    if updated.words_reviewed >= updated.goal:
        updated = replace(updated, ended_at=now)
        logger.info(
            "Session %s completed: %d correct, %d incorrect",
            updated.id, updated.correct_count, updated.incorrect_count
        )
    return updated


def close_session(
    session: SessionState,
    now: datetime,
    abandoned: bool = False
) -> SessionState:
    """
    End a session explicitly. Already-closed sessions are returned unchanged.
    """
    if not session.is_open:
        return session
    return replace(
        session,
        ended_at=now,
        notes="Session abandoned" if abandoned else session.notes
    )


def record_review(
    item: LearningItem,
    was_correct: bool,
    response_time_ms: Optional[int],
    tier: AccessTier,
    now: datetime,
    rng: random.Random,
    repository: ItemRepository,
    session: Optional[SessionState] = None,
    policy: Optional[QualityPolicy] = None
) -> ReviewOutcome:
    """
    Apply a review outcome and persist it.

    Free-tier reviews only update bookkeeping counters; premium reviews
    also reschedule the item with the SRS calculator.

    Args:
        item: Item as currently stored
        was_correct: Whether the user knew the item
        response_time_ms: Response time, if measured
        tier: Access tier of the reviewer
        now: Review time
        rng: Random source for interval fuzzing
        repository: Store to write the item, event and session to
        session: Active session, if any
        policy: Quality policy (defaults to the tier's policy)

    Returns:
        ReviewOutcome with the persisted item, event and session

    Raises:
        RepositoryUnavailable: The write failed; nothing was applied
    """
    tier = AccessTier(tier)
    policy = policy or DEFAULT_QUALITY_POLICY[tier]
    quality = calculator.derive_quality(was_correct, response_time_ms, policy)

    review_type = review_type_for(item, now)
    updated = mark_seen(item, was_correct, now)

    srs_fields = {}
    if tier == AccessTier.PREMIUM:
        updated = apply_srs(updated, quality, now, rng)
        srs_fields = dict(
            previous_interval=item.interval,
            new_interval=updated.interval,
            previous_ease_factor=item.ease_factor,
            new_ease_factor=updated.ease_factor
        )

    active_session = session if session is not None and session.is_open else None
    event = ReviewEvent(
        item_id=item.id,
        timestamp=now,
        quality=quality,
        was_correct=was_correct,
        response_time_ms=response_time_ms,
        session_id=active_session.id if active_session else None,
        review_type=review_type,
        **srs_fields
    )

    updated_session = session
    if active_session is not None:
        updated_session = update_session(active_session, was_correct, response_time_ms, now)

    repository.apply_review(
        updated,
        event,
        updated_session if active_session is not None else None
    )

    logger.debug(
        "Recorded review for item %d (%s, quality %d, tier %s)",
        item.id, "correct" if was_correct else "incorrect", quality, tier.value
    )
    return ReviewOutcome(item=updated, event=event, session=updated_session)
