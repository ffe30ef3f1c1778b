"""
Error types raised by the scheduling core.

An empty session selection is not an error: selectors return an empty
list and callers branch on it.
"""


class ZiError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInput(ZiError, ValueError):
    """Input rejected at an outer surface (settings, configuration)."""


class RepositoryUnavailable(ZiError):
    """The item store could not be read or written. Never retried internally."""


class DailyLimitReached(ZiError):
    """Free-tier daily review quota is used up."""

    def __init__(self, reviewed_today: int, limit: int):
        super().__init__(
            f"Daily limit reached: {reviewed_today} reviews today (limit {limit})"
        )
        self.reviewed_today = reviewed_today
        self.limit = limit
