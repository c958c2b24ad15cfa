"""
Windowed event counters.

A limiter counts one event for one subject (IP address, session id,
customer) inside one fixed window::

    limiter:<identifier>:<event>:<HHMM>:counter

The window is chosen when the limiter is built, so an instance keeps
addressing the same counter even if the clock moves into the next window
while it is alive.
"""

from datetime import datetime

import structlog

from onetime.platform.exceptions import LimitExceeded

from .registry import EventRegistry
from .store import CounterStore
from .window import WINDOW_SECONDS, window_stamp

logger = structlog.get_logger(__name__)

KEY_PREFIX = "limiter"


class Limiter:
    """Counter for one ``(identifier, event, window)`` triple."""

    def __init__(
        self,
        identifier: str,
        event: str,
        *,
        store: CounterStore,
        registry: EventRegistry,
        now: datetime | None = None,
        ttl: int = WINDOW_SECONDS,
        prefix: str = KEY_PREFIX,
    ):
        self.identifier = str(identifier)
        self.event = str(event)
        self.store = store
        self.registry = registry
        self.ttl = ttl
        self.stamp = window_stamp(now, ttl)
        self.key = f"{prefix}:{self.identifier}:{self.event}:{self.stamp}:counter"

    @property
    def external_identifier(self) -> str:
        return self.identifier

    @property
    def limit(self) -> int:
        return self.registry.event_limit(self.event)

    async def increment(self) -> int:
        """Count one occurrence.

        Raises:
            LimitExceeded: the new count is above the event's limit. The
                increment is kept.
        """
        count = await self.store.incr(self.key, self.ttl)
        limit = self.limit
        if count > limit:
            logger.info(
                "rate_limit.exceeded",
                event=self.event,
                identifier=self.identifier,
                count=count,
                limit=limit,
            )
            raise LimitExceeded(self.event, self.identifier, count, limit)
        return count

    async def count(self) -> int:
        return await self.store.get(self.key)

    async def exceeded(self) -> bool:
        return await self.count() > self.limit

    async def exists(self) -> bool:
        return await self.store.exists(self.key)

    async def remaining_ttl(self) -> int:
        """Seconds until the counter expires (-1 no expiration, -2 absent)."""
        return await self.store.ttl(self.key)

    async def update_expiration(self, ttl: int) -> bool:
        return await self.store.expire(self.key, ttl)

    async def clear(self) -> bool:
        return await self.store.delete(self.key)

    def __repr__(self) -> str:
        return f"<Limiter {self.key}>"


class LimiterFactory:
    """Builds limiters bound to one store and one event registry."""

    def __init__(
        self,
        store: CounterStore,
        registry: EventRegistry,
        *,
        ttl: int = WINDOW_SECONDS,
        prefix: str = KEY_PREFIX,
    ):
        self.store = store
        self.registry = registry
        self.ttl = ttl
        self.prefix = prefix

    def limiter(self, identifier: str, event: str, now: datetime | None = None) -> Limiter:
        return Limiter(
            identifier,
            event,
            store=self.store,
            registry=self.registry,
            now=now,
            ttl=self.ttl,
            prefix=self.prefix,
        )

    async def increment(self, identifier: str, event: str) -> int:
        return await self.limiter(identifier, event).increment()

    async def clear(self, identifier: str, event: str) -> bool:
        return await self.limiter(identifier, event).clear()
