"""
Analytics package exports.
"""

from zi.analytics.service import (
    build_dashboard,
    daily_review_stats,
    learning_progress,
    session_statistics,
)
from zi.analytics.types import Dashboard, LearningProgress, SessionStatistics

__all__ = [
    "build_dashboard",
    "daily_review_stats",
    "learning_progress",
    "session_statistics",
    "Dashboard",
    "LearningProgress",
    "SessionStatistics",
]
