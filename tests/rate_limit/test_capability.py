"""Tests for per-entity event counting."""

import pytest

from onetime.platform.exceptions import LimitExceeded
from onetime.platform.models import Customer, Session
from onetime.platform.rate_limit import EventCounter, RateLimited

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


async def test_models_are_rate_limited(redis):
    cust = await Customer.create(redis, "user@example.com")
    sess = await Session.create(redis, "198.51.100.4")
    assert isinstance(cust, RateLimited)
    assert isinstance(sess, RateLimited)


async def test_event_counter_uses_external_identifier(redis, factory):
    cust = await Customer.create(redis, "user@example.com")
    counter = cust.rate_limits(factory)

    assert await counter.event_increment("test_limit") == 1
    assert await counter.event_count("test_limit") == 1
    assert await factory.limiter(cust.external_identifier, "test_limit").count() == 1
    # The raw custid never appears in the counter key
    assert "user@example.com" not in factory.limiter(cust.external_identifier, "x").key


async def test_event_counter_limit_and_clear(redis, factory):
    sess = await Session.create(redis, "198.51.100.4")
    counter = EventCounter(sess, factory)
    for _ in range(3):
        await counter.event_increment("test_limit")
    with pytest.raises(LimitExceeded) as exc_info:
        await counter.event_increment("test_limit")
    assert exc_info.value.identifier == sess.external_identifier

    assert await counter.event_clear("test_limit") is True
    assert await counter.event_count("test_limit") == 0


async def test_subjects_counted_separately(redis, factory):
    first = EventCounter(await Session.create(redis, "198.51.100.4"), factory)
    second = EventCounter(await Session.create(redis, "198.51.100.5"), factory)
    await first.event_increment("test_limit")
    assert await second.event_count("test_limit") == 0


async def test_fresh_sessions_from_one_address_share_a_counter(redis, factory):
    first = EventCounter(await Session.create(redis, "198.51.100.4"), factory)
    second = EventCounter(await Session.create(redis, "198.51.100.4"), factory)
    await first.event_increment("test_limit")
    assert await second.event_count("test_limit") == 1
