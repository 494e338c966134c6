"""Fake Time implementation for testing.

FakeTime is an in-memory clock that only moves when a test advances it.
"""

from ghedit.core.time.abc import Time


class FakeTime(Time):
    """In-memory fake clock.

    All state is provided via constructor or changed explicitly by the test.
    """

    def __init__(self, start: float = 0.0) -> None:
        """Create FakeTime.

        Args:
            start: Initial clock reading in seconds
        """
        self._now = start

    def advance(self, seconds: float) -> None:
        """Move the clock forward."""
        self._now += seconds

    def now(self) -> float:
        return self._now
