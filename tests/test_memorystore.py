import threading
from datetime import datetime, timedelta, timezone

from narasu.memorystore import MemoryStore


def _at(seconds):
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def test_memory_store():
    store = MemoryStore(8)
    start = _at(1000)
    end = start + timedelta(seconds=14)
    bucket = "test"

    assert store.incr_key(bucket, 1, start) == 1
    assert store.incr_key(bucket, 1, start + timedelta(seconds=1)) == 1
    assert store.incr_key(bucket, 1, start + timedelta(seconds=1)) == 2
    assert store.incr_key(bucket, 1, start + timedelta(seconds=2)) == 1
    assert store.incr_key(bucket, 1, start + timedelta(seconds=10)) == 1
    assert store.incr_key(bucket, 1, start + timedelta(seconds=12)) == 1

    xs = store.get_keys(bucket, start, end)
    assert sorted(xs) == sorted([1, 2, 1, 0, 0, 0, 0, 0, 0, 1, 0, 1, 0, 0, 0])
    assert xs == [1, 2, 1, 0, 0, 0, 0, 0, 0, 0, 1, 0, 1, 0, 0]

    store.cleanup(end, timedelta(seconds=8))

    xs = store.get_keys(bucket, start, end)
    assert sorted(xs) == sorted([0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 0, 1, 0, 0, 0])
    assert xs == [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 0, 1, 0, 0]


def test_get_keys_empty_range():
    store = MemoryStore(8)
    store.incr_key("b", 1, _at(10))
    assert store.get_keys("b", _at(11), _at(10)) == []


def test_get_keys_single_second_inclusive():
    store = MemoryStore(8)
    store.incr_key("b", 9, _at(10))
    assert store.get_keys("b", _at(10), _at(10)) == [9]


def test_sub_second_times_share_a_counter():
    store = MemoryStore(8)
    base = _at(500)
    assert store.incr_key("b", 1, base) == 1
    assert store.incr_key("b", 1, base + timedelta(milliseconds=999)) == 2


def test_negative_amount():
    store = MemoryStore(8)
    store.incr_key("b", 5, _at(1))
    assert store.incr_key("b", -7, _at(1)) == -2


def test_cleanup_keeps_boundary():
    store = MemoryStore(8)
    store.incr_key("b", 1, _at(100))
    store.incr_key("b", 1, _at(99))
    store.cleanup(_at(110), timedelta(seconds=10))
    assert store.get_keys("b", _at(99), _at(100)) == [0, 1]


def test_cleanup_applies_to_all_buckets():
    store = MemoryStore(8)
    store.incr_key("a", 1, _at(0))
    store.incr_key("b", 2, _at(0))
    store.incr_key("b", 3, _at(50))
    store.cleanup(_at(50), timedelta(seconds=5))
    assert store.get_keys("a", _at(0), _at(0)) == [0]
    assert store.get_keys("b", _at(0), _at(50))[-1] == 3
    assert sum(store.get_keys("b", _at(0), _at(50))) == 3


def test_concurrent_increments():
    store = MemoryStore(8)

    def work():
        for _ in range(500):
            store.incr_key("b", 1, _at(7))

    threads = [threading.Thread(target=work) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert store.get_keys("b", _at(7), _at(7)) == [2000]