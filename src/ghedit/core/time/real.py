"""Real time implementation using the process clock."""

import time

from ghedit.core.time.abc import Time


class RealTime(Time):
    """Production implementation backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()
