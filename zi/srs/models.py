"""
SQLAlchemy ORM Models for the learning database

Defines LearningItem, ReviewEvent and LearningSession tables.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

from zi.providers import ensure_utc

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as UTC.

    SQLite drops tzinfo on the way out, so values read back are tagged UTC.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)


class LearningItemRow(Base):
    """
    Persistent review state for one vocabulary item.
    """
    __tablename__ = 'learning_items'

    id = Column(Integer, primary_key=True, autoincrement=False)
    position = Column(Integer, nullable=False)  # insertion order
    level = Column(Integer, nullable=False)

    # Display content
    hanzi = Column(String(64), nullable=False, default="")
    pinyin = Column(String(128), nullable=False, default="")
    meaning = Column(String(512), nullable=False, default="")

    # User annotations
    is_favorited = Column(Boolean, nullable=False, default=False)
    user_notes = Column(String(1024), nullable=True)

    # Bookkeeping
    times_seen = Column(Integer, nullable=False, default=0)
    times_correct = Column(Integer, nullable=False, default=0)
    times_incorrect = Column(Integer, nullable=False, default=0)
    last_seen_at = Column(UTCDateTime, nullable=True)
    first_seen_at = Column(UTCDateTime, nullable=True)

    # SRS state
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval = Column(Integer, nullable=False, default=0)
    repetitions = Column(Integer, nullable=False, default=0)
    next_review_due = Column(UTCDateTime, nullable=True)
    last_review_quality = Column(Integer, nullable=True)

    __table_args__ = (
        Index('idx_learning_items_level_due', 'level', 'next_review_due'),
        Index('idx_learning_items_level_seen', 'level', 'times_seen'),
        Index('idx_learning_items_favorited', 'is_favorited'),
    )

    def __repr__(self):
        return f"<LearningItemRow(id={self.id}, level={self.level}, reps={self.repetitions})>"


class ReviewEventRow(Base):
    """
    Append-only log entry for a single review.
    """
    __tablename__ = 'review_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, nullable=False, index=True)
    timestamp = Column(UTCDateTime, nullable=False, index=True)
    quality = Column(Integer, nullable=False)  # 1-5
    was_correct = Column(Boolean, nullable=False)
    response_time_ms = Column(Integer, nullable=True)
    session_id = Column(String(36), nullable=True, index=True)
    review_type = Column(String(16), nullable=False, default="new")

    # SRS before/after (premium reviews only)
    previous_interval = Column(Integer, nullable=True)
    new_interval = Column(Integer, nullable=True)
    previous_ease_factor = Column(Float, nullable=True)
    new_ease_factor = Column(Float, nullable=True)

    def __repr__(self):
        return f"<ReviewEventRow(id={self.id}, item={self.item_id}, quality={self.quality})>"


class LearningSessionRow(Base):
    """
    One bounded learning run.
    """
    __tablename__ = 'learning_sessions'

    id = Column(String(36), primary_key=True)
    started_at = Column(UTCDateTime, nullable=False)
    ended_at = Column(UTCDateTime, nullable=True)
    goal = Column(Integer, nullable=False)
    words_reviewed = Column(Integer, nullable=False, default=0)
    correct_count = Column(Integer, nullable=False, default=0)
    incorrect_count = Column(Integer, nullable=False, default=0)
    average_response_ms = Column(Float, nullable=False, default=0.0)
    access_tier = Column(String(16), nullable=False)
    levels = Column(JSON, nullable=False, default=list)
    session_type = Column(String(16), nullable=False, default="learning")
    notes = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<LearningSessionRow(id={self.id}, reviewed={self.words_reviewed}/{self.goal})>"
