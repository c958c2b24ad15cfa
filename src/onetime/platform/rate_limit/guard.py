"""
Action-level rate limit guard.

Use cases call ``limit_action`` before doing any work. A ``LimitExceeded``
aborts the use case; counter store failures follow the configured policy:

* fail closed (default): the ``RateLimitStoreError`` propagates and the
  action is refused with a 503.
* fail open: the failure is logged and the action proceeds unthrottled.
"""

import structlog

from onetime.platform.exceptions import LimitExceeded, RateLimitStoreError

from .capability import EventCounter
from .limiter import Limiter, LimiterFactory

logger = structlog.get_logger(__name__)


class ActionGuard:
    """Applies event limits to the subject of the current request."""

    def __init__(self, factory: LimiterFactory, *, enabled: bool = True, fail_open: bool = False):
        self.factory = factory
        self.enabled = enabled
        self.fail_open = fail_open

    @classmethod
    def from_settings(cls, factory: LimiterFactory, settings) -> "ActionGuard":
        return cls(
            factory,
            enabled=settings.rate_limit.enabled,
            fail_open=settings.rate_limit.fail_open,
        )

    async def limit_action(self, identifier: str, event: str) -> int | None:
        """Count ``event`` for ``identifier``.

        Returns the new count, or None when nothing was counted (guard
        disabled, or the store failed while failing open).

        Raises:
            LimitExceeded: over the limit for this window
            RateLimitStoreError: store unreachable and failing closed
        """
        if not self.enabled:
            return None
        return await self._increment(self.factory.limiter(identifier, event))

    async def limit_counter(self, counter: EventCounter, event: str) -> int | None:
        """Same as ``limit_action``, for a rate-limited entity."""
        if not self.enabled:
            return None
        return await self._increment(counter.limiter(event))

    async def _increment(self, limiter: Limiter) -> int | None:
        try:
            return await limiter.increment()
        except LimitExceeded as e:
            e.retry_after = await self._retry_after(limiter)
            raise
        except RateLimitStoreError as e:
            if not self.fail_open:
                raise
            logger.warning(
                "rate_limit.fail_open",
                event=limiter.event,
                identifier=limiter.identifier,
                error=e.message,
            )
            return None

    @staticmethod
    async def _retry_after(limiter: Limiter) -> int | None:
        try:
            ttl = await limiter.remaining_ttl()
        except RateLimitStoreError:
            return None
        return ttl if ttl > 0 else None
