"""
Service layer to assemble statistics from a repository.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from zi.analytics.metrics import (
    build_day_index,
    compute_daily_review_stats,
    compute_learning_progress,
    compute_session_statistics,
)
from zi.analytics.queries import load_items_df, load_review_events_df
from zi.analytics.types import Dashboard, LearningProgress, SessionStatistics
from zi.srs.repository import ItemRepository

DEFAULT_PAST_DAYS = 30


def daily_review_stats(
    repository: ItemRepository,
    now: datetime,
    past_days: int = DEFAULT_PAST_DAYS
) -> pd.DataFrame:
    """
    Per-day review counts and accuracy for the last `past_days` days.
    """
    day_index = build_day_index(now, past_days)
    since = day_index[0].to_pydatetime() if len(day_index) else now
    events_df = load_review_events_df(repository, since=since)
    return compute_daily_review_stats(events_df, day_index)


def learning_progress(repository: ItemRepository) -> LearningProgress:
    return compute_learning_progress(load_items_df(repository))


def session_statistics(repository: ItemRepository, now: datetime) -> SessionStatistics:
    return compute_session_statistics(repository.fetch_sessions(), now)


def build_dashboard(
    repository: ItemRepository,
    now: datetime,
    past_days: int = DEFAULT_PAST_DAYS
) -> Dashboard:
    """
    Build all values needed by a statistics screen.
    """
    return Dashboard(
        daily_reviews=daily_review_stats(repository, now, past_days),
        progress=learning_progress(repository),
        sessions=session_statistics(repository, now),
    )
