# narasu

Per-second counters grouped into named buckets, with sliding-window sums and
cleanup of old data. Counts can live in process memory or in Redis.

## Installation

```
pip install narasu
```

The package has no required dependencies. To keep counters in Redis, install
a Redis client such as `redis` yourself.

## Concepts

Every increment is recorded against a bucket name and the whole second (Unix
time, rounded down) it happened in. A window query sums the counters of a
bucket over an inclusive range of seconds. Cleanup drops counters whose second
lies more than a maximum age before a given moment.

## Usage

```python
from datetime import datetime, timedelta, timezone

from narasu.client import Client
from narasu.memorystore import MemoryStore

client = Client(MemoryStore(8), max_old_age=timedelta(seconds=60))

now = datetime.now(timezone.utc)
client.incr_key("logins", 1, now)
client.incr_key("logins", 1, now)

total = client.window("logins", now - timedelta(seconds=10), now)
print(total)  # 2

client.cleanup(now)
```

`Client(store, max_old_age)` requires a store, and a `max_old_age` of at least
one second (default 60 seconds); otherwise it raises `ValueError`.

- `Client.incr_key(bucket, amount, cur)` adds `amount` to the counter of the
  second containing `cur` and returns the new value.
- `Client.window(bucket, start, end)` returns the sum of the bucket's counters
  for every second from `start` to `end`, both included.
- `Client.cleanup(now)` removes counters older than `max_old_age` relative to
  `now`.

### In-memory storage

`MemoryStore(degree)` keeps counters in a thread-safe dictionary inside the
process. `degree` is stored as given and has no effect on behaviour.

### Redis storage

```python
from datetime import timedelta

import redis

from narasu.client import Client
from narasu.redisstore import RedisStore

store = RedisStore(redis.Redis(), namespace="myapp", ttl=timedelta(minutes=5))
client = Client(store, max_old_age=timedelta(seconds=60))
```

`RedisStore(redis, namespace="", ttl=timedelta(0))` works with any client
object offering `incrby`, `expireat`, `mget`, `scan_iter` and `delete` in the
style of redis-py; passing `None` raises `ValueError`.

Keys are written as `<namespace>:narasu:buckets:<unix-seconds>:{<bucket>}`
(without the namespace part when none is given); the `prefix` property gives
the common part. When `ttl` is positive, a newly created key gets an expiry at
its second plus the ttl. Cleanup scans for keys under the prefix and deletes
the expired ones; keys under the prefix that do not have the expected shape are
left alone.

### Custom stores

Any object that provides `incr_key(bucket, amount, cur)`,
`get_keys(bucket, start, end)` and `cleanup(now, age)`, as laid out by the
`narasu.client.Store` protocol, can be passed to `Client`.

## What it does not do

narasu is a library only: it has no command-line tool and runs no server or
background job. Cleanup happens only when you call it.

## Running the tests

```
pip install -e ".[test]"
pytest
```