"""
Session plan: a selected batch plus its breakdown by item state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal, Sequence

from zi.srs.constants import SECONDS_PER_ITEM
from zi.srs.memory_state import LearningItem


SessionType = Literal["empty", "learning", "review", "mixed"]


@dataclass(frozen=True)
class SessionPlan:
    """
    Items chosen for a session, categorized for display.
    """
    items: list[LearningItem] = field(default_factory=list)
    new_items: list[LearningItem] = field(default_factory=list)
    review_items: list[LearningItem] = field(default_factory=list)
    practice_items: list[LearningItem] = field(default_factory=list)
    session_type: SessionType = "empty"
    estimated_duration: timedelta = timedelta(0)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def formatted_duration(self) -> str:
        minutes = int(self.estimated_duration.total_seconds() // 60)
        return f"{minutes} min"


def determine_session_type(new: int, review: int, practice: int) -> SessionType:
    """
    learning if new items are the majority, review if due items are,
    otherwise mixed.
    """
    total = new + review + practice
    if total == 0:
        return "empty"
    if new / total > 0.5:
        return "learning"
    if review / total > 0.5:
        return "review"
    return "mixed"


def build_session_plan(items: Sequence[LearningItem], now: datetime) -> SessionPlan:
    """
    Categorize selected items:
    - new: never seen
    - review: seen and due
    - practice: seen, not yet due
    """
    items = list(items)
    new_items = [i for i in items if i.is_new]
    review_items = [i for i in items if not i.is_new and i.is_due(now)]
    practice_items = [i for i in items if not i.is_new and not i.is_due(now)]

    return SessionPlan(
        items=items,
        new_items=new_items,
        review_items=review_items,
        practice_items=practice_items,
        session_type=determine_session_type(
            len(new_items), len(review_items), len(practice_items)
        ),
        estimated_duration=timedelta(seconds=len(items) * SECONDS_PER_ITEM)
    )
