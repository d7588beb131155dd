"""In-process store of per-second counters."""

from __future__ import annotations

import math
import threading
from datetime import datetime, timedelta
from typing import Dict, Iterator, List, Tuple

_ONE_SECOND = timedelta(seconds=1)


def _unix(moment: datetime) -> int:
    return math.floor(moment.timestamp())


def _each_second(start: datetime, end: datetime) -> Iterator[datetime]:
    moment = start
    while moment <= end:
        yield moment
        moment += _ONE_SECOND


class MemoryStore:
    """Thread-safe counters keyed by (unix second, bucket).

    ``degree`` is the branching factor hint of the underlying index; counters
    are held in a hash map, so it only has to be a positive-or-zero integer.
    """

    def __init__(self, degree: int = 0) -> None:
        self.degree = degree
        self._lock = threading.Lock()
        self._counts: Dict[Tuple[int, str], int] = {}

    def incr_key(self, bucket: str, amount: int, cur: datetime) -> int:
        """Add ``amount`` to ``bucket`` at ``cur``'s second and return the new value."""
        key = (_unix(cur), bucket)
        with self._lock:
            value = self._counts.get(key, 0) + amount
            self._counts[key] = value
        return value

    def get_keys(self, bucket: str, start: datetime, end: datetime) -> List[int]:
        """Return one counter per second from ``start`` to ``end`` inclusive, 0 where unset."""
        with self._lock:
            return [
                self._counts.get((_unix(moment), bucket), 0)
                for moment in _each_second(start, end)
            ]

    def cleanup(self, now: datetime, age: timedelta) -> None:
        """Remove counters whose second lies more than ``age`` before ``now``."""
        now_seconds = _unix(now)
        age_seconds = int(age.total_seconds())
        with self._lock:
            expired = [key for key in self._counts if now_seconds - key[0] > age_seconds]
            for key in expired:
                del self._counts[key]