"""Time sources for the vesting engines"""
import time
from typing import Optional, Protocol

from vestledger.exceptions import InvalidConfiguration


class Clock(Protocol):
    def now(self) -> int:
        ...


class SystemClock:
    """Wall clock in whole Unix seconds"""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """
    Clock that only moves when told to.

    Used by tests and previews. Time never goes backwards.
    """

    def __init__(self, start: Optional[int] = None):
        self._now = int(time.time()) if start is None else start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> int:
        if timestamp < self._now:
            raise InvalidConfiguration(
                "Clock cannot move backwards", current=self._now, requested=timestamp
            )
        self._now = timestamp
        return self._now

    def advance(self, seconds: int) -> int:
        return self.set(self._now + seconds)
