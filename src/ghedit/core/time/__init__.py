from ghedit.core.time.abc import Time
from ghedit.core.time.fake import FakeTime
from ghedit.core.time.real import RealTime

__all__ = [
    "FakeTime",
    "RealTime",
    "Time",
]
