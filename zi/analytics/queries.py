"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from zi.srs.constants import ALL_LEVELS
from zi.srs.memory_state import LearningItem, ReviewEvent
from zi.srs.repository import ItemRepository

EVENT_COLUMNS = ["item_id", "timestamp", "quality", "was_correct", "session_id", "day_utc"]
ITEM_COLUMNS = ["id", "level", "times_seen", "times_correct", "times_incorrect"]


def events_to_df(events: Sequence[ReviewEvent]) -> pd.DataFrame:
    """
    Review events as a dataframe sorted by time, with a UTC day column.
    """
    if not events:
        return pd.DataFrame(columns=EVENT_COLUMNS)

    df = pd.DataFrame(
        [
            {
                "item_id": e.item_id,
                "timestamp": e.timestamp,
                "quality": e.quality,
                "was_correct": bool(e.was_correct),
                "session_id": e.session_id,
            }
            for e in events
        ]
    )
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
    df = df.dropna(subset=["timestamp"])
    df["day_utc"] = df["timestamp"].dt.floor("D")
    return df.sort_values("timestamp").reset_index(drop=True)


def items_to_df(items: Sequence[LearningItem]) -> pd.DataFrame:
    if not items:
        return pd.DataFrame(columns=ITEM_COLUMNS)
    return pd.DataFrame(
        [
            {
                "id": i.id,
                "level": i.level,
                "times_seen": i.times_seen,
                "times_correct": i.times_correct,
                "times_incorrect": i.times_incorrect,
            }
            for i in items
        ]
    )


def load_review_events_df(
    repository: ItemRepository,
    since: Optional[datetime] = None
) -> pd.DataFrame:
    return events_to_df(repository.fetch_events(since=since))


def load_items_df(repository: ItemRepository) -> pd.DataFrame:
    return items_to_df(repository.fetch_by_levels(ALL_LEVELS))
