"""Fixed time windows for rate limit counters."""

from datetime import UTC, datetime

WINDOW_SECONDS = 20 * 60


def _as_utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)


def window_start(now: datetime | None = None, window_seconds: int = WINDOW_SECONDS) -> datetime:
    """Return the start of the window containing ``now`` (floor, never rounded)."""
    epoch = int(_as_utc(now).timestamp())
    return datetime.fromtimestamp(epoch - (epoch % window_seconds), tz=UTC)


def window_stamp(now: datetime | None = None, window_seconds: int = WINDOW_SECONDS) -> str:
    """
    Identify the window containing ``now`` as a zero-padded ``HHMM`` stamp.

    Naive datetimes are taken to be UTC. The stamp carries no date: two days
    share stamps, but counters live for a single window so they never meet.
    """
    return window_start(now, window_seconds).strftime("%H%M")
