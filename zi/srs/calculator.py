"""
SRS Calculator - SM-2 interval scheduling

Pure scheduling logic (no database calls, no ambient randomness).

Workflow:
1. Clamp inputs (quality into 1-5, state into its valid range)
2. Update ease factor
3. Update repetitions and base interval, apply quality-tier adjustment
4. Fuzz the interval with the injected RNG to avoid review clustering
5. Round, clamp and compute the next due date

For a fixed RNG seed and fixed inputs the output is reproducible.
"""

from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from zi.srs.constants import (
    Quality,
    QualityPolicy,
    MIN_QUALITY,
    MAX_QUALITY,
    PASSING_QUALITY,
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    FAILED_EASE_PENALTY,
    FIRST_INTERVAL,
    SECOND_INTERVAL,
    EASY_BONUS,
    HARD_PENALTY,
    FUZZ_MIN,
    FUZZ_MAX,
    FUZZ_THRESHOLD_DAYS,
    PERFECT_RESPONSE_MS,
    GOOD_RESPONSE_MS,
    PASS_RESPONSE_MS,
    STABILITY_PER_EASE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SRSResult:
    """Scheduling state produced by one calculator step."""
    repetitions: int
    ease_factor: float
    interval: int
    next_review_due: Optional[datetime]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def clamp_quality(quality: int) -> int:
    return max(MIN_QUALITY, min(MAX_QUALITY, int(quality)))


def update_ease_factor(ease_factor: float, quality: int) -> float:
    """
    Update the ease factor for a (clamped) quality rating.

    Formula (quality >= 3):
        EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))

    Failed recall (quality < 3) subtracts 0.2. The result never drops
    below 1.3. There is no upper bound.
    """
    if quality >= PASSING_QUALITY:
        distance = MAX_QUALITY - quality
        new_ease = ease_factor + (0.1 - distance * (0.08 + distance * 0.02))
    else:
        new_ease = ease_factor - FAILED_EASE_PENALTY
    return max(MIN_EASE_FACTOR, new_ease)


def base_interval(repetitions: int, interval: int, ease_factor: float) -> int:
    """
    Base interval for a successful review, by repetition count.

    Args:
        repetitions: Repetition count after this review (>= 1)
        interval: Previous interval in days
        ease_factor: Updated ease factor
    """
    if repetitions == 1:
        return FIRST_INTERVAL
    if repetitions == 2:
        return SECOND_INTERVAL
    return round_half_up(interval * ease_factor)


def apply_quality_adjustment(interval: float, quality: int) -> float:
    """Easy bonus for perfect recall, hard penalty for a bare pass."""
    if quality == Quality.PERFECT:
        return interval * EASY_BONUS
    if quality == Quality.PASS:
        return interval * HARD_PENALTY
    return interval


def fuzz_interval(interval: float, rng: random.Random) -> float:
    """
    Multiply by a uniform factor in [0.85, 1.15].

    Intervals of 2 days or less are returned unchanged and consume no
    randomness.
    """
    if interval <= FUZZ_THRESHOLD_DAYS:
        return interval
    return interval * rng.uniform(FUZZ_MIN, FUZZ_MAX)


def advance(
    quality: int,
    repetitions: int,
    ease_factor: float,
    interval: int,
    now: datetime,
    rng: random.Random
) -> SRSResult:
    """
    Calculate the next scheduling state for an item.

    Out-of-range inputs are clamped rather than rejected, so this never
    raises.

    Args:
        quality: Recall quality (clamped to 1-5)
        repetitions: Consecutive successful reviews so far
        ease_factor: Current ease factor
        interval: Current interval in days
        now: Time of the review; the due date is computed from it
        rng: Seeded random source used for fuzzing

    Returns:
        SRSResult with the new repetitions, ease factor, interval and due date
    """
    q = clamp_quality(quality)
    repetitions = max(0, int(repetitions))
    ease_factor = max(MIN_EASE_FACTOR, float(ease_factor))
    interval = max(0, int(interval))

    new_ease = update_ease_factor(ease_factor, q)

    if q < PASSING_QUALITY:
        # Failed recall - start over
        new_repetitions = 0
        pre_fuzz: float = FIRST_INTERVAL
    else:
        new_repetitions = repetitions + 1
        pre_fuzz = apply_quality_adjustment(
            base_interval(new_repetitions, interval, new_ease),
            q
        )

    new_interval = max(1, round_half_up(fuzz_interval(pre_fuzz, rng)))
    next_due = now + timedelta(days=new_interval)

    logger.debug(
        "SRS calculation: quality=%d reps %d->%d ease %.2f->%.2f interval %d->%d days",
        q, repetitions, new_repetitions, ease_factor, new_ease, interval, new_interval
    )

    return SRSResult(
        repetitions=new_repetitions,
        ease_factor=new_ease,
        interval=new_interval,
        next_review_due=next_due
    )


def initial_state() -> SRSResult:
    """Scheduling state of an item that has never been reviewed."""
    return SRSResult(
        repetitions=0,
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=0,
        next_review_due=None
    )


def derive_quality(
    was_correct: bool,
    response_time_ms: Optional[int] = None,
    policy: QualityPolicy = QualityPolicy.BINARY
) -> int:
    """
    Turn a review outcome into a 1-5 quality rating.

    BINARY: correct -> 5, incorrect -> 1.
    RESPONSE_TIME: incorrect -> 1; correct is bucketed by response time
    (< 2s -> 5, < 5s -> 4, < 10s -> 3, otherwise 2). Without a response
    time it falls back to the binary mapping.
    """
    if not was_correct:
        return int(Quality.BLACKOUT)

    if policy == QualityPolicy.BINARY or response_time_ms is None:
        return int(Quality.PERFECT)

    if response_time_ms < PERFECT_RESPONSE_MS:
        return int(Quality.PERFECT)
    if response_time_ms < GOOD_RESPONSE_MS:
        return int(Quality.GOOD)
    if response_time_ms < PASS_RESPONSE_MS:
        return int(Quality.PASS)
    return int(Quality.STRUGGLED)


def estimate_retention(days_since_review: float, ease_factor: float) -> float:
    """
    Estimated probability of recall on a simple forgetting curve.

    Formula: R = exp(-t / S), with S = ease_factor * 5 days.
    """
    stability = max(MIN_EASE_FACTOR, ease_factor) * STABILITY_PER_EASE
    retention = math.exp(-max(0.0, days_since_review) / stability)
    return max(0.0, min(1.0, retention))
