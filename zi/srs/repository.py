"""
Item Repository - storage contract for the scheduling core

Defines the queries the session selector and review recorder rely on, plus
a dict-backed implementation used by tests and scripts.

The SQLAlchemy implementation lives in zi.srs.database.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from zi.providers import ensure_utc
from zi.srs.memory_state import LearningItem, ReviewEvent, SessionState, reset_item

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class ItemRepository(ABC):
    """
    Port for reading and writing learning items, review events and sessions.

    Implementations raise RepositoryUnavailable on storage failures.
    """

    # ---- Queries used by session selection ----

    @abstractmethod
    def fetch_by_levels_and_due(
        self,
        levels: Sequence[int],
        now: datetime
    ) -> list[LearningItem]:
        """
        Items in the given levels that are due at `now`.

        Scheduled items are due once next_review_due <= now. Items that
        were reviewed but never scheduled (free-tier reviews) are always
        due, ranked at their last review time. Ordered earliest-due first.
        """
        pass

    @abstractmethod
    def fetch_by_levels_unseen(
        self,
        levels: Sequence[int],
        limit: int
    ) -> list[LearningItem]:
        """
        Up to `limit` never-seen items in the given levels, in insertion order.
        """
        pass

    @abstractmethod
    def fetch_by_levels(self, levels: Sequence[int]) -> list[LearningItem]:
        """All items in the given levels, in insertion order."""
        pass

    # ---- Browsing ----

    @abstractmethod
    def fetch_favorites(self) -> list[LearningItem]:
        """Favorited items ordered by level, then id."""
        pass

    @abstractmethod
    def search(
        self,
        query: str,
        levels: Optional[Sequence[int]] = None
    ) -> list[LearningItem]:
        """
        Case-insensitive substring match on pinyin, meaning or hanzi.

        A blank query matches nothing. Ordered by level, then id.
        """
        pass

    # ---- Writes ----

    @abstractmethod
    def save_item(self, item: LearningItem) -> None:
        pass

    @abstractmethod
    def append_event(self, event: ReviewEvent) -> None:
        pass

    @abstractmethod
    def save_session(self, session: SessionState) -> None:
        pass

    @abstractmethod
    def add_items(self, items: Iterable[LearningItem]) -> None:
        pass

    @abstractmethod
    def reset_progress(self, levels: Optional[Sequence[int]] = None) -> int:
        """
        Restore items to creation defaults.

        Args:
            levels: Only reset these levels (all items if None)

        Returns:
            Number of items reset
        """
        pass

    # ---- Lookups ----

    @abstractmethod
    def get_item(self, item_id: int) -> Optional[LearningItem]:
        pass

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[SessionState]:
        pass

    @abstractmethod
    def fetch_events(self, since: Optional[datetime] = None) -> list[ReviewEvent]:
        """Review events in append order, optionally only those at/after `since`."""
        pass

    @abstractmethod
    def fetch_sessions(self) -> list[SessionState]:
        """All sessions, oldest first."""
        pass

    def count_events_since(self, since: datetime) -> int:
        return len(self.fetch_events(since=since))

    def apply_review(
        self,
        item: LearningItem,
        event: ReviewEvent,
        session: Optional[SessionState] = None
    ) -> None:
        """
        Persist the result of one review.

        The default writes sequentially; stores with transactions should
        override this to write all three atomically.
        """
        self.save_item(item)
        self.append_event(event)
        if session is not None:
            self.save_session(session)


class InMemoryItemRepository(ItemRepository):
    """
    Dict-backed repository. Stores and returns copies so callers cannot
    change stored state without a write.

    Datetimes are normalized to UTC on the way in, as the SQL store does.
    """

    def __init__(self, items: Iterable[LearningItem] = ()):
        self._items: dict[int, LearningItem] = {}
        self._events: list[ReviewEvent] = []
        self._sessions: dict[str, SessionState] = {}
        self.add_items(items)

    def _in_levels(self, levels: Optional[Sequence[int]]) -> list[LearningItem]:
        if levels is None:
            return [replace(i) for i in self._items.values()]
        wanted = set(levels)
        return [replace(i) for i in self._items.values() if i.level in wanted]

    def fetch_by_levels_and_due(self, levels, now):
        now = ensure_utc(now)
        due = [i for i in self._in_levels(levels) if i.is_due(now)]
        due.sort(key=lambda i: i.due_at or _EPOCH)
        return due

    def fetch_by_levels_unseen(self, levels, limit):
        if limit <= 0:
            return []
        unseen = [i for i in self._in_levels(levels) if i.times_seen == 0]
        return unseen[:limit]

    def fetch_by_levels(self, levels):
        return self._in_levels(levels)

    def fetch_favorites(self):
        favorites = [i for i in self._in_levels(None) if i.is_favorited]
        return sorted(favorites, key=lambda i: (i.level, i.id))

    def search(self, query, levels=None):
        needle = query.strip().casefold()
        if not needle:
            return []
        matches = [
            i for i in self._in_levels(levels)
            if needle in i.pinyin.casefold()
            or needle in i.meaning.casefold()
            or needle in i.hanzi
        ]
        return sorted(matches, key=lambda i: (i.level, i.id))

    def save_item(self, item):
        self._items[item.id] = _normalized_item(item)

    def append_event(self, event):
        self._events.append(replace(event, timestamp=ensure_utc(event.timestamp)))

    def save_session(self, session):
        self._sessions[session.id] = replace(
            session,
            started_at=ensure_utc(session.started_at),
            ended_at=ensure_utc(session.ended_at)
        )

    def add_items(self, items):
        for item in items:
            self.save_item(item)

    def reset_progress(self, levels=None):
        wanted = set(levels) if levels is not None else None
        count = 0
        for item_id, item in list(self._items.items()):
            if wanted is not None and item.level not in wanted:
                continue
            self._items[item_id] = reset_item(item)
            count += 1
        return count

    def get_item(self, item_id):
        item = self._items.get(item_id)
        return replace(item) if item is not None else None

    def get_session(self, session_id):
        session = self._sessions.get(session_id)
        return replace(session) if session is not None else None

    def fetch_events(self, since=None):
        if since is None:
            return list(self._events)
        since = ensure_utc(since)
        return [e for e in self._events if e.timestamp >= since]

    def fetch_sessions(self):
        return sorted(
            (replace(s) for s in self._sessions.values()),
            key=lambda s: s.started_at
        )


def _normalized_item(item: LearningItem) -> LearningItem:
    return replace(
        item,
        last_seen_at=ensure_utc(item.last_seen_at),
        first_seen_at=ensure_utc(item.first_seen_at),
        next_review_due=ensure_utc(item.next_review_due)
    )
