from datetime import datetime, timedelta, timezone

import pytest

from zi.providers import FixedClock, make_rng
from zi.srs.database import SqlItemRepository, get_engine, init_db
from zi.srs.memory_state import LearningItem
from zi.srs.repository import InMemoryItemRepository

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def rng():
    return make_rng(1234)


@pytest.fixture
def make_item():
    """Build LearningItems with sensible defaults for tests."""

    def _make(id, level=1, seen_days_ago=None, due_in_days=None, **fields):
        if seen_days_ago is not None:
            fields.setdefault("last_seen_at", NOW - timedelta(days=seen_days_ago))
            fields.setdefault("times_seen", max(1, fields.get("times_correct", 0)))
        if due_in_days is not None:
            fields.setdefault("next_review_due", NOW + timedelta(days=due_in_days))
            fields.setdefault("times_seen", 1)
            fields.setdefault("repetitions", 1)
            fields.setdefault("interval", 1)
        return LearningItem(id=id, level=level, **fields)

    return _make


@pytest.fixture
def memory_repo():
    return InMemoryItemRepository()


@pytest.fixture
def sql_engine():
    engine = get_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_repo(sql_engine):
    return SqlItemRepository(sql_engine)


@pytest.fixture(params=["memory", "sql"])
def any_repo(request):
    """Runs a test against both repository implementations."""
    if request.param == "memory":
        return InMemoryItemRepository()
    return request.getfixturevalue("sql_repo")
