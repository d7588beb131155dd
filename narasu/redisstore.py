"""Redis-backed store of per-second counters."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any, Iterator, List, Optional

_ONE_SECOND = timedelta(seconds=1)
_SCAN_COUNT = 1024


def _unix(moment: datetime) -> int:
    return math.floor(moment.timestamp())


def _each_second(start: datetime, end: datetime) -> Iterator[datetime]:
    moment = start
    while moment <= end:
        yield moment
        moment += _ONE_SECOND


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, (bytes, bytearray)) else str(value)


class RedisStore:
    """Counters kept as redis keys ``[namespace:]narasu:buckets:<unix>:{<bucket>}``.

    When ``ttl`` is positive, a freshly created key expires ``ttl`` after its second.
    """

    def __init__(
        self,
        redis: Any = None,
        namespace: str = "",
        ttl: timedelta = timedelta(0),
    ) -> None:
        if redis is None:
            raise ValueError("redis client is required for redisstore")
        self.redis = redis
        self.namespace = namespace
        self.ttl = ttl

    @property
    def prefix(self) -> str:
        """Common prefix of every key this store writes."""
        if not self.namespace:
            return "narasu:buckets:"
        return self.namespace + ":narasu:buckets:"

    def _key(self, cur: datetime, bucket: str) -> str:
        return f"{self.prefix}{_unix(cur)}:{{{bucket}}}"

    def incr_key(self, bucket: str, amount: int, cur: datetime) -> int:
        """Add ``amount`` to ``bucket`` at ``cur``'s second and return the new value."""
        key = self._key(cur, bucket)
        value = int(self.redis.incrby(key, amount))
        if value == amount and self.ttl > timedelta(0):
            self.redis.expireat(key, _unix(cur + self.ttl))
        return value

    def get_keys(self, bucket: str, start: datetime, end: datetime) -> List[int]:
        """Return one counter per second from ``start`` to ``end`` inclusive, 0 where unset."""
        keys = [self._key(moment, bucket) for moment in _each_second(start, end)]
        values = self.redis.mget(keys)
        return [0 if value is None else int(value) for value in values]

    def _timestamp(self, key: str) -> Optional[int]:
        if not key.startswith(self.prefix):
            return None
        parts = key[len(self.prefix):].split(":", 1)
        if len(parts) != 2:
            return None
        try:
            return int(parts[0])
        except ValueError:
            return None

    def cleanup(self, now: datetime, age: timedelta) -> None:
        """Delete keys whose second lies more than ``age`` before ``now``.

        Keys under the prefix that do not have the expected shape are left alone.
        """
        now_seconds = _unix(now)
        age_seconds = int(age.total_seconds())
        expired = []
        for raw in self.redis.scan_iter(match=self.prefix + "*", count=_SCAN_COUNT):
            key = _text(raw)
            timestamp = self._timestamp(key)
            if timestamp is not None and now_seconds - timestamp > age_seconds:
                expired.append(key)
        if expired:
            self.redis.delete(*expired)