"""
Service Factory
Builds a LearningService wired to the configured database and environment.
"""

from __future__ import annotations

from typing import Optional

from zi import config
from zi.providers import EntitlementOracle, StaticEntitlement, SystemClock, make_rng
from zi.service import LearningService
from zi.settings import LearningSettings
from zi.srs.database import SqlItemRepository, get_engine, init_db


def get_repository(url: Optional[str] = None) -> SqlItemRepository:
    """
    Returns a SQL repository on the configured database, creating tables if needed.
    """
    engine = get_engine(url)
    init_db(engine)
    return SqlItemRepository(engine)


def get_learning_service(
    url: Optional[str] = None,
    entitlements: Optional[EntitlementOracle] = None,
    settings: Optional[LearningSettings] = None,
) -> LearningService:
    """
    Returns a LearningService using the wall clock and an RNG seeded from
    ZI_RNG_SEED (system entropy when unset).
    """
    return LearningService(
        repository=get_repository(url),
        entitlements=entitlements or StaticEntitlement(config.is_premium_env()),
        clock=SystemClock(),
        rng=make_rng(config.get_rng_seed()),
        settings=settings,
    )
