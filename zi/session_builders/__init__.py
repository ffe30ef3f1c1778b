"""Session builder modules: priority ranking, selection and planning."""

from zi.session_builders.priority import (
    days_since_last_seen,
    priority_score,
    rank_items,
)
from zi.session_builders.selector import select_session
from zi.session_builders.session_plan import (
    SessionPlan,
    build_session_plan,
    determine_session_type,
)

__all__ = [
    "days_since_last_seen",
    "priority_score",
    "rank_items",
    "select_session",
    "SessionPlan",
    "build_session_plan",
    "determine_session_type",
]
