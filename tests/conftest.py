"""
Global pytest configuration and fixtures for the Onetime Secret platform tests.

Redis is replaced by fakeredis everywhere; nothing here needs a server.
"""

import os

# Settings are read at import time, so the environment goes first.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("OBSERVABILITY__LOG_FORMAT", "console")

import fakeredis
import pytest
import pytest_asyncio

from onetime.platform.logic import LogicServices, RequestContext
from onetime.platform.models import Customer, Session
from onetime.platform.rate_limit import (
    ActionGuard,
    EventRegistry,
    LimiterFactory,
    RedisCounterStore,
)
from onetime.platform.settings import Settings


@pytest_asyncio.fixture
async def redis():
    """Fresh in-memory Redis for each test."""
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def registry() -> EventRegistry:
    return EventRegistry(events={"test_limit": 3})


@pytest.fixture
def store(redis) -> RedisCounterStore:
    return RedisCounterStore(redis)


@pytest.fixture
def factory(store, registry) -> LimiterFactory:
    return LimiterFactory(store, registry)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        testing=True,
        colonels=["admin@example.com"],
        site={"autoverify": True, "domains_enabled": True, "host": "onetime.example.com"},
        rate_limit={"limits": {"create_account": 3, "update_domain_brand": 2, "failed_passphrase": 2}},
    )


@pytest.fixture
def services(redis, test_settings) -> LogicServices:
    registry = EventRegistry.from_settings(test_settings)
    factory = LimiterFactory(RedisCounterStore(redis), registry)
    return LogicServices(
        redis=redis,
        limiter_factory=factory,
        guard=ActionGuard(factory),
        settings=test_settings,
    )


@pytest.fixture
def make_context(redis):
    """Build a request context, optionally signed in as ``custid``."""

    async def _make(custid: str | None = None, ipaddress: str = "203.0.113.7") -> RequestContext:
        sess = await Session.create(redis, ipaddress)
        cust = Customer.anonymous()
        if custid:
            cust = await Customer.load(redis, custid) or await Customer.create(redis, custid)
            await sess.authenticate(cust.custid)
        return RequestContext(sess=sess, cust=cust, ipaddress=ipaddress)

    return _make
