"""
Types for learning analytics.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import pandas as pd


@dataclass(frozen=True)
class LearningProgress:
    """
    Snapshot of how much vocabulary has been learned.
    """
    total_words_learned: int
    mastered_words: int
    words_by_level: dict[int, int]
    average_accuracy: float

    @property
    def mastery_rate(self) -> float:
        if self.total_words_learned == 0:
            return 0.0
        return self.mastered_words / self.total_words_learned


@dataclass(frozen=True)
class SessionStatistics:
    """
    Aggregates over completed sessions.
    """
    total_sessions: int
    total_words_reviewed: int
    average_accuracy: float
    average_duration: timedelta
    best_streak: int
    total_study_time: timedelta


@dataclass(frozen=True)
class Dashboard:
    """
    Everything a statistics screen needs, computed in one pass.
    """
    daily_reviews: pd.DataFrame
    progress: LearningProgress
    sessions: SessionStatistics
