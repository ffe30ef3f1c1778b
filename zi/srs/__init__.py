"""
SRS - SM-2 spaced repetition for vocabulary review

Main API for the scheduling core.

This package implements:
- SM-2 interval scheduling with easy bonus / hard penalty
- Interval fuzzing from an injected random source
- Tiered review recording (bookkeeping for free, full SRS for premium)
- Storage through a narrow repository interface

Quick start:
    from zi import srs
    from zi.providers import make_rng

    # Pure calculation (no I/O)
    result = srs.advance(quality=4, repetitions=2, ease_factor=2.5,
                         interval=6, now=now, rng=make_rng(42))

    # Record a review against a store
    repo = srs.InMemoryItemRepository([srs.new_item(1, level=1)])
    outcome = srs.record_review(item, True, 1500, srs.AccessTier.PREMIUM,
                                now, rng, repo)
"""

# Core algorithm
from zi.srs.calculator import (
    SRSResult,
    advance,
    derive_quality,
    estimate_retention,
    initial_state,
)

# Records
from zi.srs.memory_state import (
    LearningItem,
    ReviewEvent,
    SessionState,
    new_item,
    reset_item,
)

# Review recording
from zi.srs.recorder import (
    ReviewOutcome,
    close_session,
    record_review,
)

# Storage
from zi.srs.repository import ItemRepository, InMemoryItemRepository

# Constants
from zi.srs.constants import (
    AccessTier,
    Quality,
    QualityPolicy,
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    EASY_BONUS,
    HARD_PENALTY,
    SECOND_INTERVAL,
)


__all__ = [
    # Core algorithm
    "SRSResult",
    "advance",
    "derive_quality",
    "estimate_retention",
    "initial_state",

    # Records
    "LearningItem",
    "ReviewEvent",
    "SessionState",
    "new_item",
    "reset_item",

    # Review recording
    "ReviewOutcome",
    "close_session",
    "record_review",

    # Storage
    "ItemRepository",
    "InMemoryItemRepository",

    # Enums
    "AccessTier",
    "Quality",
    "QualityPolicy",

    # Parameters
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "EASY_BONUS",
    "HARD_PENALTY",
    "SECOND_INTERVAL",
]
