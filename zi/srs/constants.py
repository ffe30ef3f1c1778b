"""
SRS Constants and Parameters

All configurable parameters for the SM-2 scheduler and session selection
in one place.
"""

from enum import Enum, IntEnum


# ---- Access Tiers ----

class AccessTier(str, Enum):
    """Access level gating which scheduling branch applies."""
    FREE = "free"
    PREMIUM = "premium"


# ---- Quality Ratings ----

class Quality(IntEnum):
    """Recall quality on the 1-5 scale."""
    BLACKOUT = 1    # Incorrect answer
    STRUGGLED = 2   # Correct, but took 10s or more
    PASS = 3        # Correct with hesitation
    GOOD = 4        # Quick recall
    PERFECT = 5     # Instant recall


class QualityPolicy(str, Enum):
    """How a review outcome is turned into a quality rating."""
    BINARY = "binary"                # correct -> 5, incorrect -> 1
    RESPONSE_TIME = "response_time"  # bucketed by response time


MIN_QUALITY = 1
MAX_QUALITY = 5
PASSING_QUALITY = 3  # quality below this resets repetitions


# ---- Ease Factor ----

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
FAILED_EASE_PENALTY = 0.2


# ---- Intervals (days) ----

FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
EASY_BONUS = 1.3    # quality 5
HARD_PENALTY = 0.8  # quality 3


# ---- Fuzzing ----

FUZZ_MIN = 0.85
FUZZ_MAX = 1.15
FUZZ_THRESHOLD_DAYS = 2  # intervals at or below this are never fuzzed


# ---- Response-time buckets (milliseconds) ----

PERFECT_RESPONSE_MS = 2_000
GOOD_RESPONSE_MS = 5_000
PASS_RESPONSE_MS = 10_000


# ---- Retention estimate ----

STABILITY_PER_EASE = 5.0  # stability (days) = ease_factor * this


# ---- Free-tier priority scoring ----

CORRECT_ANSWER_WEIGHT = 20
RECENTLY_SEEN_PENALTY = 50
RECENT_WINDOW_DAYS = 1
PRIORITY_JITTER = 10
FREE_OVERFETCH_FACTOR = 2


# ---- Session Configuration ----

DEFAULT_SESSION_LENGTH = 20
MIN_SESSION_LENGTH = 5
MAX_SESSION_LENGTH = 100
DAILY_FREE_LIMIT = 20
SECONDS_PER_ITEM = 5  # used for session duration estimates

ALL_LEVELS = (1, 2, 3, 4, 5, 6)
FREE_LEVELS = (1, 2)

# Default quality policy per tier
DEFAULT_QUALITY_POLICY = {
    AccessTier.FREE: QualityPolicy.BINARY,
    AccessTier.PREMIUM: QualityPolicy.RESPONSE_TIME,
}


# ---- Mastery ----

MASTERY_MIN_SEEN = 5
MASTERY_MIN_ACCURACY = 0.8
