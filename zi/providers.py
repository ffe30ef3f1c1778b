"""
Injected collaborators: clock, random source and entitlement oracle.

Every caller gets these passed in explicitly so that tests can pin time
and randomness.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(Clock):
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, current: datetime):
        self._current = current

    def now(self) -> datetime:
        return self._current

    def advance(self, **kwargs) -> datetime:
        """Move forward by a timedelta built from kwargs (days=1, hours=2, ...)."""
        self._current = self._current + timedelta(**kwargs)
        return self._current


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Tag naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def make_rng(seed: Optional[int] = None) -> random.Random:
    """
    Build a random source.

    A seed gives a reproducible sequence; None seeds from system entropy.
    """
    return random.Random(seed)


class EntitlementOracle(ABC):
    """Single boolean gate for premium access."""

    @abstractmethod
    def is_premium(self) -> bool:
        pass


class StaticEntitlement(EntitlementOracle):
    """Entitlement fixed at construction time."""

    def __init__(self, premium: bool = False):
        self._premium = premium

    def is_premium(self) -> bool:
        return self._premium
