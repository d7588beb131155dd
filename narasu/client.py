"""Client for counting events in per-second buckets and summing them over time windows."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Protocol, Sequence, runtime_checkable

DEFAULT_MAX_OLD_AGE = timedelta(seconds=60)


@runtime_checkable
class Store(Protocol):
    """Backend that keeps one integer counter per (second, bucket)."""

    def incr_key(self, bucket: str, amount: int, cur: datetime) -> int:
        """Add ``amount`` to the counter of ``bucket`` at ``cur``'s second; return the new value."""
        ...

    def get_keys(self, bucket: str, start: datetime, end: datetime) -> Sequence[int]:
        """Return the counters of ``bucket`` for each second from ``start`` to ``end`` inclusive."""
        ...

    def cleanup(self, now: datetime, age: timedelta) -> None:
        """Drop every counter older than ``age`` relative to ``now``."""
        ...


class Client:
    """Front end over a :class:`Store` with a retention limit for cleanup."""

    def __init__(
        self,
        store: Optional[Store] = None,
        max_old_age: timedelta = DEFAULT_MAX_OLD_AGE,
    ) -> None:
        if max_old_age < timedelta(seconds=1):
            raise ValueError("max old age must be greater than 1 second")
        if store is None:
            raise ValueError("store must be set")
        self.store = store
        self.max_old_age = max_old_age

    def incr_key(self, bucket: str, amount: int, cur: datetime) -> int:
        """Increment the counter of ``bucket`` at ``cur`` and return its new value."""
        return self.store.incr_key(bucket, amount, cur)

    def window(self, bucket: str, start: datetime, end: datetime) -> int:
        """Return the total of ``bucket`` over every second from ``start`` to ``end`` inclusive."""
        return sum(self.store.get_keys(bucket, start, end))

    def cleanup(self, now: datetime) -> None:
        """Drop counters older than the client's maximum age, measured from ``now``."""
        self.store.cleanup(now, self.max_old_age)