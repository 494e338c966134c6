"""Time operations abstraction for testing.

This module provides an ABC for clock reads so cache freshness can be tested
without waiting on the wall clock.
"""

from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def now(self) -> float:
        """Return the current time in seconds (monotonic within a process)."""
        ...
