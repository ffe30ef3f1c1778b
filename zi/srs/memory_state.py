"""
Memory State - Learning items, review events and sessions

Plain record types for the scheduling core. They carry no persistence or
UI behavior; the recorder returns updated copies instead of mutating them.

Key concepts:
- Ease factor: how quickly intervals grow for an item
- Interval: days until the next review
- Repetitions: consecutive successful reviews
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Optional
import uuid

from zi.srs.constants import (
    AccessTier,
    DEFAULT_EASE_FACTOR,
)


@dataclass
class LearningItem:
    """
    One vocabulary entry with its review state.

    `last_seen_at` is None until the first review and `next_review_due`
    is None until the item is scheduled by the SRS calculator.
    """
    id: int
    level: int

    # Display content (not used by scheduling)
    hanzi: str = ""
    pinyin: str = ""
    meaning: str = ""

    # User annotations (kept across progress resets)
    is_favorited: bool = False
    user_notes: Optional[str] = None

    # Bookkeeping counters
    times_seen: int = 0
    times_correct: int = 0
    times_incorrect: int = 0
    last_seen_at: Optional[datetime] = None
    first_seen_at: Optional[datetime] = None

    # SRS state (premium)
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0
    repetitions: int = 0
    next_review_due: Optional[datetime] = None
    last_review_quality: Optional[int] = None

    @property
    def is_new(self) -> bool:
        return self.times_seen == 0

    @property
    def accuracy_rate(self) -> float:
        answered = self.times_correct + self.times_incorrect
        if answered == 0:
            return 0.0
        return self.times_correct / answered

    @property
    def due_at(self) -> Optional[datetime]:
        """
        When the item becomes due for an SRS review.

        Items reviewed without being scheduled (free tier) are due from
        their last review; never-seen items have no due time.
        """
        if self.next_review_due is not None:
            return self.next_review_due
        if self.times_seen > 0:
            return self.last_seen_at
        return None

    def is_due(self, now: datetime) -> bool:
        due = self.due_at
        if due is None:
            return not self.is_new
        return due <= now


@dataclass(frozen=True)
class ReviewEvent:
    """
    Immutable log entry for a single review.

    SRS before/after values are only filled for premium reviews.
    """
    item_id: int
    timestamp: datetime
    quality: int
    was_correct: bool
    response_time_ms: Optional[int] = None
    session_id: Optional[str] = None
    review_type: str = "new"  # "new", "review" or "relearn"
    previous_interval: Optional[int] = None
    new_interval: Optional[int] = None
    previous_ease_factor: Optional[float] = None
    new_ease_factor: Optional[float] = None


@dataclass
class SessionState:
    """
    One bounded learning run. Open while `ended_at` is None.
    """
    started_at: datetime
    goal: int
    access_tier_at_start: AccessTier
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    ended_at: Optional[datetime] = None
    words_reviewed: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    average_response_ms: float = 0.0
    levels: tuple[int, ...] = ()
    session_type: str = "learning"
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    @property
    def accuracy_rate(self) -> float:
        total = self.correct_count + self.incorrect_count
        if total == 0:
            return 0.0
        return self.correct_count / total

    @property
    def completion_rate(self) -> float:
        if self.goal <= 0:
            return 0.0
        return self.words_reviewed / self.goal

    def duration(self, now: datetime) -> timedelta:
        """Elapsed time; open sessions are measured against `now`."""
        end = self.ended_at if self.ended_at is not None else now
        return end - self.started_at


def new_item(id: int, level: int, **content) -> LearningItem:
    """
    Create an item in its creation state (never seen, never scheduled).
    """
    return LearningItem(id=id, level=level, **content)


def reset_item(item: LearningItem) -> LearningItem:
    """
    Restore an item to creation defaults, keeping identity and content.

    Idempotent: resetting a reset item yields an equal item.
    """
    return replace(
        item,
        times_seen=0,
        times_correct=0,
        times_incorrect=0,
        last_seen_at=None,
        first_seen_at=None,
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=0,
        repetitions=0,
        next_review_due=None,
        last_review_quality=None,
    )


def review_type_for(item: LearningItem, now: datetime) -> str:
    """
    Classify a review before it is applied.

    - new: first time the item is seen
    - relearn: last SRS review failed (repetitions reset)
    - review: everything else
    """
    if item.is_new:
        return "new"
    if item.next_review_due is not None and item.repetitions == 0:
        return "relearn"
    return "review"
