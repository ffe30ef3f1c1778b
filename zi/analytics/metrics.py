"""
Metric computations for statistics screens.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Sequence

import pandas as pd

from zi.analytics.types import LearningProgress, SessionStatistics
from zi.srs.constants import ALL_LEVELS, MASTERY_MIN_SEEN, MASTERY_MIN_ACCURACY
from zi.srs.memory_state import SessionState


def _utc_timestamp(moment: datetime) -> pd.Timestamp:
    ts = pd.Timestamp(moment)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def build_day_index(now: datetime, past_days: int) -> pd.DatetimeIndex:
    """
    Dense UTC day index of `past_days` days ending today.
    """
    if past_days <= 0:
        return pd.DatetimeIndex([], tz="UTC")
    today = _utc_timestamp(now).floor("D")
    return pd.date_range(end=today, periods=past_days, freq="D")


def compute_daily_review_stats(
    events_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.DataFrame:
    """
    Reviews, correct reviews and accuracy per day, oldest day first.
    Days without reviews are present with zeros.
    """
    frame = pd.DataFrame(index=day_index)
    if events_df.empty or len(day_index) == 0:
        frame["total_reviews"] = 0
        frame["correct_reviews"] = 0
    else:
        # Key on calendar dates so index resolutions never have to agree
        day_keys = pd.Index(day_index.date)
        grouped = events_df.groupby(events_df["day_utc"].dt.date)
        frame["total_reviews"] = grouped.size().reindex(day_keys, fill_value=0).to_numpy()
        frame["correct_reviews"] = (
            grouped["was_correct"].sum().reindex(day_keys, fill_value=0).to_numpy()
        )

    frame = frame.astype("int64")
    totals = frame["total_reviews"].where(frame["total_reviews"] > 0)
    frame["accuracy"] = (frame["correct_reviews"] / totals).fillna(0.0).astype("float64")
    frame.index.name = "date"
    return frame.reset_index()


def compute_learning_progress(items_df: pd.DataFrame) -> LearningProgress:
    """
    - learned: seen at least once
    - mastered: seen 5+ times with 80%+ accuracy
    - average accuracy: total correct / total seen
    """
    words_by_level = {level: 0 for level in ALL_LEVELS}
    if items_df.empty:
        return LearningProgress(0, 0, words_by_level, 0.0)

    learned = items_df[items_df["times_seen"] > 0]
    if learned.empty:
        return LearningProgress(0, 0, words_by_level, 0.0)

    answered = learned["times_correct"] + learned["times_incorrect"]
    accuracy = (learned["times_correct"] / answered.where(answered > 0)).fillna(0.0)
    mastered = learned[
        (learned["times_seen"] >= MASTERY_MIN_SEEN) & (accuracy >= MASTERY_MIN_ACCURACY)
    ]

    counts = learned.groupby("level").size()
    for level, count in counts.items():
        words_by_level[int(level)] = int(count)

    total_seen = int(learned["times_seen"].sum())
    average_accuracy = float(learned["times_correct"].sum()) / total_seen if total_seen else 0.0

    return LearningProgress(
        total_words_learned=int(len(learned)),
        mastered_words=int(len(mastered)),
        words_by_level=words_by_level,
        average_accuracy=average_accuracy,
    )


def compute_best_streak(sessions: Sequence[SessionState]) -> int:
    """
    Longest run of consecutive calendar days (UTC) with a session.
    """
    days = sorted({s.started_at.astimezone(timezone.utc).date() for s in sessions})
    best = 0
    current = 0
    previous = None
    for day in days:
        if previous is not None and (day - previous).days == 1:
            current += 1
        else:
            current = 1
        best = max(best, current)
        previous = day
    return best


def compute_session_statistics(
    sessions: Sequence[SessionState],
    now: datetime
) -> SessionStatistics:
    """
    Aggregate completed sessions; open sessions are ignored.
    """
    completed = [s for s in sessions if not s.is_open]
    if not completed:
        return SessionStatistics(0, 0, 0.0, timedelta(0), 0, timedelta(0))

    total_words = sum(s.words_reviewed for s in completed)
    total_correct = sum(s.correct_count for s in completed)
    total_answers = sum(s.correct_count + s.incorrect_count for s in completed)
    total_time = sum((s.duration(now) for s in completed), timedelta(0))

    return SessionStatistics(
        total_sessions=len(completed),
        total_words_reviewed=total_words,
        average_accuracy=total_correct / total_answers if total_answers else 0.0,
        average_duration=total_time / len(completed),
        best_streak=compute_best_streak(completed),
        total_study_time=total_time,
    )
