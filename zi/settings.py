"""
Pydantic model for learner settings.

Settings are validated once at the edge; the scheduling core receives
plain values.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from zi.srs.constants import (
    AccessTier,
    QualityPolicy,
    ALL_LEVELS,
    FREE_LEVELS,
    DEFAULT_SESSION_LENGTH,
    MIN_SESSION_LENGTH,
    MAX_SESSION_LENGTH,
    DAILY_FREE_LIMIT,
    DEFAULT_QUALITY_POLICY,
)


class LearningSettings(BaseModel):
    """Learner preferences that drive session creation."""
    selected_levels: list[int] = Field(
        default_factory=lambda: list(FREE_LEVELS),
        description="Levels (1-6) the learner studies"
    )
    session_length: int = Field(
        default=DEFAULT_SESSION_LENGTH,
        description="Items per session, clamped to 5-100"
    )
    daily_free_limit: int = Field(default=DAILY_FREE_LIMIT, ge=0)
    quality_policy_free: QualityPolicy = DEFAULT_QUALITY_POLICY[AccessTier.FREE]
    quality_policy_premium: QualityPolicy = DEFAULT_QUALITY_POLICY[AccessTier.PREMIUM]

    @field_validator("selected_levels")
    @classmethod
    def _check_levels(cls, levels: list[int]) -> list[int]:
        invalid = [level for level in levels if level not in ALL_LEVELS]
        if invalid:
            raise ValueError(f"Unknown levels {invalid}; expected values in {list(ALL_LEVELS)}")
        return sorted(set(levels))

    @field_validator("session_length")
    @classmethod
    def _clamp_session_length(cls, value: int) -> int:
        return max(MIN_SESSION_LENGTH, min(MAX_SESSION_LENGTH, value))

    def eligible_levels(self, tier: AccessTier) -> list[int]:
        """
        Levels a session may draw from. Free tier is limited to the free levels.
        """
        if AccessTier(tier) == AccessTier.PREMIUM:
            return list(self.selected_levels)
        return [level for level in self.selected_levels if level in FREE_LEVELS]

    def quality_policy(self, tier: AccessTier) -> QualityPolicy:
        if AccessTier(tier) == AccessTier.PREMIUM:
            return self.quality_policy_premium
        return self.quality_policy_free
