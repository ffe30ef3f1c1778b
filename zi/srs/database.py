"""
Database - SQLAlchemy-backed item repository

Handles all database I/O for learning items, review events and sessions.
Scheduling logic lives in the calculator and recorder modules.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import and_, create_engine, func, inspect, or_
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from zi import config
from zi.errors import RepositoryUnavailable
from zi.srs.constants import AccessTier, DEFAULT_EASE_FACTOR
from zi.srs.memory_state import LearningItem, ReviewEvent, SessionState
from zi.srs.models import (
    Base,
    LearningItemRow,
    LearningSessionRow,
    ReviewEventRow,
)
from zi.srs.repository import ItemRepository

logger = logging.getLogger(__name__)

TABLE_NAMES = ('learning_items', 'review_events', 'learning_sessions')


def get_engine(url: Optional[str] = None) -> Engine:
    """
    Get SQLAlchemy engine for the learning database.

    SQLite in-memory databases share a single connection so every session
    sees the same data; other backends use connection pooling.

    Args:
        url: Database URL (defaults to config.get_database_url())
    """
    db_url = make_url(url or config.get_database_url())

    if db_url.get_backend_name() == "sqlite":
        if db_url.database in (None, "", ":memory:"):
            return create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False
            )
        Path(db_url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(db_url, echo=False)

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def init_db(engine: Engine) -> None:
    """
    Create tables that don't exist yet. Safe to call multiple times.
    """
    try:
        existing = set(inspect(engine).get_table_names())
        if not set(TABLE_NAMES) <= existing:
            Base.metadata.create_all(engine)
            logger.info("Created learning tables")
    except SQLAlchemyError as exc:
        raise RepositoryUnavailable(f"Could not initialize database: {exc}") from exc


def reset_db(engine: Engine) -> None:
    """
    DANGEROUS: Drop all tables and recreate them.

    All items, review history and sessions are lost.
    """
    try:
        Base.metadata.drop_all(engine)
    except SQLAlchemyError as exc:
        raise RepositoryUnavailable(f"Could not drop tables: {exc}") from exc
    logger.warning("All learning tables dropped")
    init_db(engine)


# ---- Row conversion ----

def _item_from_row(row: LearningItemRow) -> LearningItem:
    return LearningItem(
        id=row.id,
        level=row.level,
        hanzi=row.hanzi,
        pinyin=row.pinyin,
        meaning=row.meaning,
        is_favorited=bool(row.is_favorited),
        user_notes=row.user_notes,
        times_seen=row.times_seen,
        times_correct=row.times_correct,
        times_incorrect=row.times_incorrect,
        last_seen_at=row.last_seen_at,
        first_seen_at=row.first_seen_at,
        ease_factor=row.ease_factor,
        interval=row.interval,
        repetitions=row.repetitions,
        next_review_due=row.next_review_due,
        last_review_quality=row.last_review_quality
    )


def _copy_item_to_row(item: LearningItem, row: LearningItemRow) -> None:
    row.level = item.level
    row.hanzi = item.hanzi
    row.pinyin = item.pinyin
    row.meaning = item.meaning
    row.is_favorited = item.is_favorited
    row.user_notes = item.user_notes
    row.times_seen = item.times_seen
    row.times_correct = item.times_correct
    row.times_incorrect = item.times_incorrect
    row.last_seen_at = item.last_seen_at
    row.first_seen_at = item.first_seen_at
    row.ease_factor = item.ease_factor
    row.interval = item.interval
    row.repetitions = item.repetitions
    row.next_review_due = item.next_review_due
    row.last_review_quality = item.last_review_quality


def _event_from_row(row: ReviewEventRow) -> ReviewEvent:
    return ReviewEvent(
        item_id=row.item_id,
        timestamp=row.timestamp,
        quality=row.quality,
        was_correct=row.was_correct,
        response_time_ms=row.response_time_ms,
        session_id=row.session_id,
        review_type=row.review_type,
        previous_interval=row.previous_interval,
        new_interval=row.new_interval,
        previous_ease_factor=row.previous_ease_factor,
        new_ease_factor=row.new_ease_factor
    )


def _event_to_row(event: ReviewEvent) -> ReviewEventRow:
    return ReviewEventRow(
        item_id=event.item_id,
        timestamp=event.timestamp,
        quality=int(event.quality),
        was_correct=event.was_correct,
        response_time_ms=event.response_time_ms,
        session_id=event.session_id,
        review_type=event.review_type,
        previous_interval=event.previous_interval,
        new_interval=event.new_interval,
        previous_ease_factor=event.previous_ease_factor,
        new_ease_factor=event.new_ease_factor
    )


def _session_from_row(row: LearningSessionRow) -> SessionState:
    return SessionState(
        id=row.id,
        started_at=row.started_at,
        ended_at=row.ended_at,
        goal=row.goal,
        words_reviewed=row.words_reviewed,
        correct_count=row.correct_count,
        incorrect_count=row.incorrect_count,
        average_response_ms=row.average_response_ms,
        access_tier_at_start=AccessTier(row.access_tier),
        levels=tuple(row.levels or ()),
        session_type=row.session_type,
        notes=row.notes
    )


def _copy_session_to_row(session: SessionState, row: LearningSessionRow) -> None:
    row.started_at = session.started_at
    row.ended_at = session.ended_at
    row.goal = session.goal
    row.words_reviewed = session.words_reviewed
    row.correct_count = session.correct_count
    row.incorrect_count = session.incorrect_count
    row.average_response_ms = session.average_response_ms
    row.access_tier = AccessTier(session.access_tier_at_start).value
    row.levels = list(session.levels)
    row.session_type = session.session_type
    row.notes = session.notes


class SqlItemRepository(ItemRepository):
    """
    Item repository on a SQLAlchemy engine.

    Every SQLAlchemyError is rolled back and re-raised as
    RepositoryUnavailable.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @contextmanager
    def _session(self, write: bool = False) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            if write:
                session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise RepositoryUnavailable(str(exc)) from exc
        finally:
            session.close()

    # ---- Queries ----

    def fetch_by_levels_and_due(self, levels, now):
        if not levels:
            return []
        # Reviewed-but-unscheduled items count as due from their last review
        due_at = func.coalesce(LearningItemRow.next_review_due, LearningItemRow.last_seen_at)
        with self._session() as session:
            rows = session.query(LearningItemRow).filter(
                LearningItemRow.level.in_(list(levels)),
                or_(
                    and_(
                        LearningItemRow.next_review_due.isnot(None),
                        LearningItemRow.next_review_due <= now
                    ),
                    and_(
                        LearningItemRow.next_review_due.is_(None),
                        LearningItemRow.times_seen > 0
                    )
                )
            ).order_by(
                due_at.asc().nulls_first(),
                LearningItemRow.position
            ).all()
            return [_item_from_row(r) for r in rows]

    def fetch_by_levels_unseen(self, levels, limit):
        if not levels or limit <= 0:
            return []
        with self._session() as session:
            rows = session.query(LearningItemRow).filter(
                LearningItemRow.level.in_(list(levels)),
                LearningItemRow.times_seen == 0
            ).order_by(LearningItemRow.position).limit(limit).all()
            return [_item_from_row(r) for r in rows]

    def fetch_by_levels(self, levels):
        if not levels:
            return []
        with self._session() as session:
            rows = session.query(LearningItemRow).filter(
                LearningItemRow.level.in_(list(levels))
            ).order_by(LearningItemRow.position).all()
            return [_item_from_row(r) for r in rows]

    def fetch_favorites(self):
        with self._session() as session:
            rows = session.query(LearningItemRow).filter(
                LearningItemRow.is_favorited.is_(True)
            ).order_by(LearningItemRow.level, LearningItemRow.id).all()
            return [_item_from_row(r) for r in rows]

    def search(self, query, levels=None):
        needle = query.strip().lower()
        if not needle:
            return []
        pattern = f"%{needle}%"
        with self._session() as session:
            q = session.query(LearningItemRow).filter(
                or_(
                    func.lower(LearningItemRow.pinyin).like(pattern),
                    func.lower(LearningItemRow.meaning).like(pattern),
                    LearningItemRow.hanzi.like(pattern)
                )
            )
            if levels is not None:
                q = q.filter(LearningItemRow.level.in_(list(levels)))
            rows = q.order_by(LearningItemRow.level, LearningItemRow.id).all()
            return [_item_from_row(r) for r in rows]

    def get_item(self, item_id):
        with self._session() as session:
            row = session.get(LearningItemRow, item_id)
            return _item_from_row(row) if row is not None else None

    def get_session(self, session_id):
        with self._session() as session:
            row = session.get(LearningSessionRow, session_id)
            return _session_from_row(row) if row is not None else None

    def fetch_events(self, since=None):
        with self._session() as session:
            query = session.query(ReviewEventRow)
            if since is not None:
                query = query.filter(ReviewEventRow.timestamp >= since)
            return [_event_from_row(r) for r in query.order_by(ReviewEventRow.id).all()]

    def count_events_since(self, since):
        with self._session() as session:
            return session.query(func.count(ReviewEventRow.id)).filter(
                ReviewEventRow.timestamp >= since
            ).scalar() or 0

    def fetch_sessions(self):
        with self._session() as session:
            rows = session.query(LearningSessionRow).order_by(
                LearningSessionRow.started_at
            ).all()
            return [_session_from_row(r) for r in rows]

    # ---- Writes ----

    def _next_position(self, session: Session) -> int:
        current = session.query(func.max(LearningItemRow.position)).scalar()
        return 0 if current is None else current + 1

    def _upsert_item(self, session: Session, item: LearningItem) -> None:
        row = session.get(LearningItemRow, item.id)
        if row is None:
            row = LearningItemRow(id=item.id, position=self._next_position(session))
            session.add(row)
        _copy_item_to_row(item, row)
        session.flush()

    def _upsert_session(self, session: Session, state: SessionState) -> None:
        row = session.get(LearningSessionRow, state.id)
        if row is None:
            row = LearningSessionRow(id=state.id)
            session.add(row)
        _copy_session_to_row(state, row)

    def save_item(self, item):
        with self._session(write=True) as session:
            self._upsert_item(session, item)

    def add_items(self, items):
        with self._session(write=True) as session:
            for item in items:
                self._upsert_item(session, item)

    def append_event(self, event):
        with self._session(write=True) as session:
            session.add(_event_to_row(event))

    def save_session(self, session_state):
        with self._session(write=True) as session:
            self._upsert_session(session, session_state)

    def apply_review(self, item, event, session=None):
        """Write item, event and session in a single transaction."""
        with self._session(write=True) as db:
            self._upsert_item(db, item)
            db.add(_event_to_row(event))
            if session is not None:
                self._upsert_session(db, session)

    def reset_progress(self, levels=None):
        with self._session(write=True) as session:
            query = session.query(LearningItemRow)
            if levels is not None:
                query = query.filter(LearningItemRow.level.in_(list(levels)))
            return query.update(
                {
                    LearningItemRow.times_seen: 0,
                    LearningItemRow.times_correct: 0,
                    LearningItemRow.times_incorrect: 0,
                    LearningItemRow.last_seen_at: None,
                    LearningItemRow.first_seen_at: None,
                    LearningItemRow.ease_factor: DEFAULT_EASE_FACTOR,
                    LearningItemRow.interval: 0,
                    LearningItemRow.repetitions: 0,
                    LearningItemRow.next_review_due: None,
                    LearningItemRow.last_review_quality: None,
                },
                synchronize_session=False
            )
