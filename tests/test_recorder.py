from dataclasses import replace
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from zi.errors import RepositoryUnavailable
from zi.srs.constants import AccessTier, QualityPolicy
from zi.srs.memory_state import SessionState, reset_item, review_type_for
from zi.srs.recorder import close_session, record_review, update_session
from zi.srs.repository import InMemoryItemRepository, ItemRepository


@pytest.fixture
def session(now):
    return SessionState(started_at=now, goal=2, access_tier_at_start=AccessTier.PREMIUM)


def test_free_review_only_updates_bookkeeping(make_item, memory_repo, now, rng):
    item = make_item(1, hanzi="你好")
    memory_repo.add_items([item])

    outcome = record_review(item, True, 1500, AccessTier.FREE, now, rng, memory_repo)

    updated = outcome.item
    assert updated.times_seen == 1
    assert updated.times_correct == 1
    assert updated.times_incorrect == 0
    assert updated.last_seen_at == now
    assert updated.first_seen_at == now
    assert updated.ease_factor == item.ease_factor
    assert updated.interval == item.interval
    assert updated.repetitions == item.repetitions
    assert updated.next_review_due is None
    assert outcome.event.quality == 5
    assert outcome.event.new_interval is None
    assert memory_repo.get_item(1) == updated


def test_free_incorrect_review(make_item, memory_repo, now, rng):
    item = make_item(1, seen_days_ago=2, times_correct=1)

    outcome = record_review(item, False, None, AccessTier.FREE, now, rng, memory_repo)

    assert outcome.item.times_incorrect == 1
    assert outcome.item.times_seen == item.times_seen + 1
    assert outcome.item.first_seen_at == now
    assert outcome.event.quality == 1
    assert outcome.event.review_type == "review"


def test_premium_review_reschedules(make_item, memory_repo, now, rng):
    item = make_item(1)

    outcome = record_review(item, True, 1000, AccessTier.PREMIUM, now, rng, memory_repo)

    updated = outcome.item
    assert updated.repetitions == 1
    assert updated.interval == 1
    assert updated.ease_factor == pytest.approx(2.6)
    assert updated.next_review_due == now + timedelta(days=1)
    assert updated.last_review_quality == 5
    assert outcome.event.review_type == "new"
    assert outcome.event.previous_interval == 0
    assert outcome.event.new_interval == 1
    assert outcome.event.previous_ease_factor == 2.5
    assert outcome.event.new_ease_factor == pytest.approx(2.6)


def test_premium_policy_uses_response_time(make_item, memory_repo, now, rng):
    item = make_item(1)

    outcome = record_review(item, True, 7000, AccessTier.PREMIUM, now, rng, memory_repo)

    assert outcome.event.quality == 3


def test_explicit_policy_overrides_tier_default(make_item, memory_repo, now, rng):
    item = make_item(1)

    outcome = record_review(
        item, True, 7000, AccessTier.PREMIUM, now, rng, memory_repo,
        policy=QualityPolicy.BINARY,
    )

    assert outcome.event.quality == 5


def test_failed_premium_review_is_relearn_next_time(make_item, memory_repo, now, rng):
    item = make_item(1, due_in_days=-1, repetitions=3, interval=10)

    first = record_review(item, False, 800, AccessTier.PREMIUM, now, rng, memory_repo)
    assert first.item.repetitions == 0
    assert first.item.interval == 1

    later = now + timedelta(days=1)
    second = record_review(first.item, True, 800, AccessTier.PREMIUM, later, rng, memory_repo)
    assert second.event.review_type == "relearn"


def test_inputs_are_not_mutated(make_item, memory_repo, now, rng, session):
    item = make_item(1)
    item_before = replace(item)
    session_before = replace(session)

    record_review(item, True, 1000, AccessTier.PREMIUM, now, rng, memory_repo, session=session)

    assert item == item_before
    assert session == session_before


def test_failed_write_leaves_state_untouched(make_item, now, rng, session):
    repo = MagicMock(spec=ItemRepository)
    repo.apply_review.side_effect = RepositoryUnavailable("disk full")
    item = make_item(1)
    item_before = replace(item)
    session_before = replace(session)

    with pytest.raises(RepositoryUnavailable):
        record_review(item, True, 1000, AccessTier.PREMIUM, now, rng, repo, session=session)

    assert item == item_before
    assert session == session_before


def test_session_counts_and_closes_at_goal(make_item, memory_repo, now, rng, session):
    memory_repo.save_session(session)

    first = record_review(make_item(1), True, 1000, AccessTier.PREMIUM, now, rng, memory_repo, session=session)
    assert first.event.session_id == session.id
    assert first.session.words_reviewed == 1
    assert first.session.is_open

    second = record_review(
        make_item(2), False, 3000, AccessTier.PREMIUM, now, rng, memory_repo, session=first.session
    )
    assert second.session.words_reviewed == 2
    assert second.session.correct_count == 1
    assert second.session.incorrect_count == 1
    assert second.session.average_response_ms == pytest.approx(2000.0)
    assert second.session.ended_at == now
    assert memory_repo.get_session(session.id) == second.session


def test_closed_session_is_not_counted(make_item, memory_repo, now, rng, session):
    closed = replace(session, ended_at=now)

    outcome = record_review(make_item(1), True, 1000, AccessTier.FREE, now, rng, memory_repo, session=closed)

    assert outcome.session == closed
    assert outcome.event.session_id is None
    assert memory_repo.get_session(session.id) is None


def test_events_are_appended(make_item, memory_repo, now, rng):
    item = make_item(1)
    outcome = record_review(item, True, None, AccessTier.FREE, now, rng, memory_repo)
    record_review(outcome.item, True, None, AccessTier.FREE, now, rng, memory_repo)

    events = memory_repo.fetch_events()
    assert [e.review_type for e in events] == ["new", "review"]


def test_update_session_without_response_time(session, now):
    updated = update_session(session, True, None, now)

    assert updated.average_response_ms == 0.0
    assert updated.words_reviewed == 1


def test_close_session(session, now):
    abandoned = close_session(session, now, abandoned=True)

    assert abandoned.ended_at == now
    assert abandoned.notes == "Session abandoned"
    assert close_session(abandoned, now + timedelta(hours=1)) is abandoned


def test_reset_item_is_idempotent(make_item, now):
    item = make_item(
        1, hanzi="学", due_in_days=4, times_correct=3, times_incorrect=2,
        ease_factor=1.9, last_review_quality=4, last_seen_at=now,
    )

    once = reset_item(item)
    twice = reset_item(once)

    assert once == twice
    assert once.hanzi == "学"
    assert once.times_seen == 0
    assert once.next_review_due is None
    assert once.ease_factor == 2.5
    assert review_type_for(once, now) == "new"


def test_reset_progress_by_level(make_item):
    repo = InMemoryItemRepository([
        make_item(1, level=1, seen_days_ago=1),
        make_item(2, level=2, seen_days_ago=1),
    ])

    assert repo.reset_progress([1]) == 1
    assert repo.get_item(1).times_seen == 0
    assert repo.get_item(2).times_seen == 1
    assert repo.reset_progress() == 2
