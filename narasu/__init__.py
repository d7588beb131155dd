"""Per-second bucket counters with sliding-window sums, in memory or in Redis."""

__version__ = "0.1.0"
__all__ = ["client", "memorystore", "redisstore"]