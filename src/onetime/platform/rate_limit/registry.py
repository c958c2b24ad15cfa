"""Named rate limit events and their per-window thresholds."""

from collections.abc import Mapping
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:  # pragma: no cover - typings only
    from onetime.platform.settings import Settings

logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = 25


class EventRegistry:
    """
    Mapping of event name to the maximum allowed occurrences per window.

    Built once at startup and handed to whatever performs rate limiting.
    Lookups for unregistered events fall back to ``default_limit``.
    """

    def __init__(self, default_limit: int = DEFAULT_LIMIT, events: Mapping[str, int] | None = None):
        self.default_limit = default_limit
        self._events: dict[str, int] = {}
        if events:
            self.register_events(events)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "EventRegistry":
        registry = cls(default_limit=settings.rate_limit.default_limit)
        registry.register_events(settings.rate_limit.limits)
        logger.debug("rate_limit.events_registered", count=len(registry.events))
        return registry

    @property
    def events(self) -> dict[str, int]:
        return dict(self._events)

    def register_event(self, name: str, limit: int) -> int:
        self._events[str(name)] = int(limit)
        return self._events[str(name)]

    def register_events(self, mapping: Mapping[str, int]) -> None:
        for name, limit in mapping.items():
            self.register_event(name, limit)

    def event_limit(self, name: str) -> int:
        return self._events.get(str(name), self.default_limit)

    def __contains__(self, name: object) -> bool:
        return str(name) in self._events

    def __repr__(self) -> str:
        return f"EventRegistry(default_limit={self.default_limit}, events={len(self._events)})"
