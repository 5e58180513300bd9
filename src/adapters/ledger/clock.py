"""
Block clock adapter - Implements Clock protocol from wall time.

Derives a monotonic block height from the system clock so the HTTP host
can supply `now` without a ledger node.
"""

import time
from collections.abc import Callable


class BlockClock:
    """
    Implements Clock protocol as elapsed blocks since a genesis timestamp.

    Never returns a value lower than one previously returned, even if the
    system clock steps backwards.
    """

    def __init__(
        self,
        genesis_timestamp: float,
        block_time_seconds: int,
        time_source: Callable[[], float] = time.time,
    ) -> None:
        if block_time_seconds <= 0:
            raise ValueError("block_time_seconds must be positive")
        self._genesis = genesis_timestamp
        self._block_time = block_time_seconds
        self._time_source = time_source
        self._last = 0

    def now(self) -> int:
        height = max(0, int((self._time_source() - self._genesis) // self._block_time))
        self._last = max(self._last, height)
        return self._last
