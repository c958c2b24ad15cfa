"""
Windowed rate limiting.

Counters live in 20 minute windows, one per (subject, event, window), with
per-event thresholds held in an ``EventRegistry``.
"""

from onetime.platform.exceptions import LimitExceeded, RateLimitStoreError

from .capability import EventCounter, RateLimited
from .guard import ActionGuard
from .limiter import Limiter, LimiterFactory
from .registry import DEFAULT_LIMIT, EventRegistry
from .store import (
    TTL_MISSING,
    TTL_PERSISTENT,
    CounterStore,
    MemoryCounterStore,
    RedisCounterStore,
    create_counter_store,
)
from .window import WINDOW_SECONDS, window_stamp, window_start

__all__ = [
    "ActionGuard",
    "CounterStore",
    "DEFAULT_LIMIT",
    "EventCounter",
    "EventRegistry",
    "LimitExceeded",
    "Limiter",
    "LimiterFactory",
    "MemoryCounterStore",
    "RateLimitStoreError",
    "RateLimited",
    "RedisCounterStore",
    "TTL_MISSING",
    "TTL_PERSISTENT",
    "WINDOW_SECONDS",
    "create_counter_store",
    "window_stamp",
    "window_start",
]
