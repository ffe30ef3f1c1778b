"""
Learning service - session lifecycle over injected collaborators.

Wires the selector, planner and recorder to a repository, an entitlement
oracle, a clock and a random source. Nothing here is global; build one
service per learner.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Sequence

from zi.errors import DailyLimitReached
from zi.providers import Clock, EntitlementOracle
from zi.session_builders.selector import select_session
from zi.session_builders.session_plan import SessionPlan, build_session_plan
from zi.settings import LearningSettings
from zi.srs import recorder
from zi.srs.constants import AccessTier
from zi.srs.memory_state import LearningItem, SessionState
from zi.srs.repository import ItemRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartedSession:
    """
    Result of starting a session. `session` is None when no items were
    available, in which case no session was created.
    """
    plan: SessionPlan
    session: Optional[SessionState]

    @property
    def is_empty(self) -> bool:
        return self.plan.is_empty


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


class LearningService:
    """
    Session creation and review recording for one learner.
    """

    def __init__(
        self,
        repository: ItemRepository,
        entitlements: EntitlementOracle,
        clock: Clock,
        rng: random.Random,
        settings: Optional[LearningSettings] = None,
    ):
        self._repo = repository
        self._entitlements = entitlements
        self._clock = clock
        self._rng = rng
        self.settings = settings or LearningSettings()

    def current_tier(self) -> AccessTier:
        return AccessTier.PREMIUM if self._entitlements.is_premium() else AccessTier.FREE

    def reviews_today(self) -> int:
        return self._repo.count_events_since(start_of_day(self._clock.now()))

    def has_reached_daily_limit(self) -> bool:
        """
        Free learners get a fixed number of reviews per (UTC) day.
        """
        if self.current_tier() == AccessTier.PREMIUM:
            return False
        return self.reviews_today() >= self.settings.daily_free_limit

    def start_session(self, settings: Optional[LearningSettings] = None) -> StartedSession:
        """
        Select items and open a session for them.

        Raises:
            DailyLimitReached: Free tier has used today's reviews
            RepositoryUnavailable: The store could not be read or written
        """
        settings = settings or self.settings
        tier = self.current_tier()
        now = self._clock.now()

        if tier == AccessTier.FREE:
            reviewed = self.reviews_today()
            if reviewed >= settings.daily_free_limit:
                logger.warning(
                    "Daily free limit reached (%d/%d)", reviewed, settings.daily_free_limit
                )
                raise DailyLimitReached(reviewed, settings.daily_free_limit)

        levels = settings.eligible_levels(tier)
        logger.info("Building %s session - levels: %s", tier.value, levels)

        items = select_session(
            tier=tier,
            eligible_levels=levels,
            limit=settings.session_length,
            now=now,
            repository=self._repo,
            rng=self._rng,
        )
        plan = build_session_plan(items, now)

        if plan.is_empty:
            logger.info("No items available for levels %s", levels)
            return StartedSession(plan=plan, session=None)

        session = SessionState(
            started_at=now,
            goal=min(len(items), settings.session_length),
            access_tier_at_start=tier,
            levels=tuple(levels),
            session_type=plan.session_type,
        )
        self._repo.save_session(session)
        logger.info(
            "Started %s session %s with goal %d", plan.session_type, session.id, session.goal
        )
        return StartedSession(plan=plan, session=session)

    def record_review(
        self,
        item: LearningItem,
        was_correct: bool,
        response_time_ms: Optional[int] = None,
        session: Optional[SessionState] = None,
    ) -> recorder.ReviewOutcome:
        tier = self.current_tier()
        return recorder.record_review(
            item=item,
            was_correct=was_correct,
            response_time_ms=response_time_ms,
            tier=tier,
            now=self._clock.now(),
            rng=self._rng,
            repository=self._repo,
            session=session,
            policy=self.settings.quality_policy(tier),
        )

    def end_session(self, session: SessionState, abandoned: bool = False) -> SessionState:
        """Close a session early (or confirm a completed one) and store it."""
        closed = recorder.close_session(session, self._clock.now(), abandoned=abandoned)
        if closed is not session:
            self._repo.save_session(closed)
            logger.info(
                "%s session %s after %d items",
                "Abandoned" if abandoned else "Ended", closed.id, closed.words_reviewed
            )
        return closed

    def toggle_favorite(self, item: LearningItem) -> LearningItem:
        updated = replace(item, is_favorited=not item.is_favorited)
        self._repo.save_item(updated)
        logger.debug("Toggled favorite for item %d: %s", item.id, updated.is_favorited)
        return updated

    def update_notes(self, item: LearningItem, notes: Optional[str]) -> LearningItem:
        """Attach free-text notes to an item; blank notes clear them."""
        cleaned = notes.strip() if notes else None
        updated = replace(item, user_notes=cleaned or None)
        self._repo.save_item(updated)
        return updated

    def favorites(self) -> list[LearningItem]:
        return self._repo.fetch_favorites()

    def search_words(
        self,
        query: str,
        levels: Optional[Sequence[int]] = None
    ) -> list[LearningItem]:
        return self._repo.search(query, levels)

    def reset_progress(self, levels: Optional[Sequence[int]] = None) -> int:
        """Reset items (optionally only some levels) to creation defaults."""
        count = self._repo.reset_progress(levels)
        logger.info("Reset progress for %d items (levels: %s)", count, levels or "all")
        return count
