import math
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from zi.providers import make_rng
from zi.srs import calculator
from zi.srs.constants import MIN_EASE_FACTOR, QualityPolicy


def test_first_perfect_review(now, rng):
    result = calculator.advance(5, repetitions=0, ease_factor=2.5, interval=0, now=now, rng=rng)

    assert result.repetitions == 1
    # 1 * 1.3 = 1.3 is below the fuzz threshold, rounds to 1
    assert result.interval == 1
    assert result.ease_factor == pytest.approx(2.6)
    assert result.next_review_due == now + timedelta(days=1)


@pytest.mark.parametrize("quality", [1, 2])
@pytest.mark.parametrize("repetitions", [0, 1, 3, 8])
@pytest.mark.parametrize("interval", [0, 1, 15, 200])
def test_failed_recall_resets(quality, repetitions, interval, now, rng):
    result = calculator.advance(quality, repetitions, 2.5, interval, now, rng)

    assert result.repetitions == 0
    assert result.interval == 1
    assert result.next_review_due == now + timedelta(days=1)


def test_ease_factor_never_below_floor(now):
    rng = make_rng(7)
    for quality in range(-3, 9):
        for ease in (0.5, 1.3, 1.31, 1.5, 2.5, 4.0):
            result = calculator.advance(quality, 2, ease, 6, now, rng)
            assert result.ease_factor >= MIN_EASE_FACTOR


@pytest.mark.parametrize(
    "quality,expected",
    [(5, 2.6), (4, 2.5), (3, 2.36), (2, 2.3), (1, 2.3)],
)
def test_ease_factor_update(quality, expected):
    assert calculator.update_ease_factor(2.5, quality) == pytest.approx(expected)


def test_ease_factor_has_no_upper_bound():
    ease = 2.5
    for _ in range(20):
        ease = calculator.update_ease_factor(ease, 5)
    assert ease == pytest.approx(4.5)


def test_second_repetition_uses_six_days(now, rng):
    result = calculator.advance(4, repetitions=1, ease_factor=2.5, interval=1, now=now, rng=rng)

    assert result.repetitions == 2
    # 6 days fuzzed by +/-15%
    assert 5 <= result.interval <= 7


def test_hard_pass_penalty(now, rng):
    result = calculator.advance(3, repetitions=1, ease_factor=2.5, interval=1, now=now, rng=rng)

    # 6 * 0.8 = 4.8, fuzzed into [4.08, 5.52]
    assert 4 <= result.interval <= 6


def test_later_interval_within_fuzz_bounds(now):
    for seed in range(50):
        result = calculator.advance(4, 2, 2.5, 6, now, make_rng(seed))
        # base round(6 * 2.5) = 15
        assert math.floor(15 * 0.85) <= result.interval <= math.ceil(15 * 1.15)


def test_short_intervals_consume_no_randomness(now):
    rng = MagicMock()
    calculator.advance(5, 0, 2.5, 0, now, rng)
    calculator.advance(1, 4, 2.5, 30, now, rng)

    rng.uniform.assert_not_called()


def test_same_seed_same_schedule(now):
    def run(seed):
        rng = make_rng(seed)
        state = calculator.initial_state()
        history = []
        for quality in (5, 4, 4, 3, 5, 2, 4, 5):
            state = calculator.advance(
                quality, state.repetitions, state.ease_factor, state.interval, now, rng
            )
            history.append(state)
        return history

    assert run(99) == run(99)


def test_intervals_grow_under_steady_good_recall(now):
    rng = make_rng(3)
    state = calculator.initial_state()
    intervals = []
    for _ in range(8):
        state = calculator.advance(4, state.repetitions, state.ease_factor, state.interval, now, rng)
        intervals.append(state.interval)

    assert intervals == sorted(intervals)
    assert intervals[-1] > intervals[0]


def test_out_of_range_quality_is_clamped(now):
    low = calculator.advance(-4, 2, 2.5, 6, now, make_rng(1))
    floor = calculator.advance(1, 2, 2.5, 6, now, make_rng(1))
    high = calculator.advance(11, 2, 2.5, 6, now, make_rng(1))
    top = calculator.advance(5, 2, 2.5, 6, now, make_rng(1))

    assert low == floor
    assert high == top


def test_invalid_state_does_not_raise(now, rng):
    result = calculator.advance(4, repetitions=-3, ease_factor=0.2, interval=-5, now=now, rng=rng)

    assert result.repetitions == 1
    assert result.interval >= 1
    assert result.ease_factor >= MIN_EASE_FACTOR


def test_initial_state():
    state = calculator.initial_state()
    assert state.repetitions == 0
    assert state.interval == 0
    assert state.ease_factor == 2.5
    assert state.next_review_due is None


@pytest.mark.parametrize("value,expected", [(0.5, 1), (1.49, 1), (2.5, 3), (4.8, 5), (-0.5, -1)])
def test_round_half_up(value, expected):
    assert calculator.round_half_up(value) == expected


def test_binary_quality():
    assert calculator.derive_quality(True) == 5
    assert calculator.derive_quality(False) == 1
    assert calculator.derive_quality(True, 30000, QualityPolicy.BINARY) == 5


@pytest.mark.parametrize(
    "response_ms,expected",
    [(0, 5), (1999, 5), (2000, 4), (4999, 4), (5000, 3), (9999, 3), (10000, 2), (60000, 2)],
)
def test_response_time_quality(response_ms, expected):
    assert calculator.derive_quality(True, response_ms, QualityPolicy.RESPONSE_TIME) == expected


def test_response_time_quality_edge_cases():
    assert calculator.derive_quality(False, 500, QualityPolicy.RESPONSE_TIME) == 1
    assert calculator.derive_quality(True, None, QualityPolicy.RESPONSE_TIME) == 5


def test_estimate_retention():
    assert calculator.estimate_retention(0, 2.5) == pytest.approx(1.0)
    assert calculator.estimate_retention(12.5, 2.5) == pytest.approx(math.exp(-1))
    assert calculator.estimate_retention(-3, 2.5) == pytest.approx(1.0)
    assert calculator.estimate_retention(10, 3.0) > calculator.estimate_retention(10, 1.5)
