"""Zi Trainer: spaced-repetition scheduling and session selection."""

__version__ = "0.1.0"
