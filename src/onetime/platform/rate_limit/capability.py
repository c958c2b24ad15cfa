"""Per-entity event counting for anything with a stable external identifier."""

from typing import Protocol, runtime_checkable

from .limiter import Limiter, LimiterFactory


@runtime_checkable
class RateLimited(Protocol):
    """An entity that can be rate limited."""

    @property
    def external_identifier(self) -> str: ...  # pragma: no cover - protocol definition


class EventCounter:
    """Counts events for one rate-limited subject.

    Example:
        counter = EventCounter(customer, factory)
        await counter.event_increment("create_secret")
    """

    def __init__(self, subject: RateLimited, factory: LimiterFactory):
        self.subject = subject
        self.factory = factory

    def limiter(self, event: str) -> Limiter:
        return self.factory.limiter(self.subject.external_identifier, event)

    async def event_increment(self, event: str) -> int:
        return await self.limiter(event).increment()

    async def event_count(self, event: str) -> int:
        return await self.limiter(event).count()

    async def event_clear(self, event: str) -> bool:
        return await self.limiter(event).clear()
