"""Tests for the event registry."""

import pytest

from onetime.platform.rate_limit import DEFAULT_LIMIT, EventRegistry
from onetime.platform.settings import DEFAULT_EVENT_LIMITS, Settings

pytestmark = pytest.mark.unit


def test_unregistered_event_uses_default():
    registry = EventRegistry()
    assert DEFAULT_LIMIT == 25
    assert registry.event_limit("anything_at_all") == 25
    assert "anything_at_all" not in registry


def test_register_event_returns_limit():
    registry = EventRegistry()
    assert registry.register_event("create_secret", 250) == 250
    assert registry.event_limit("create_secret") == 250
    assert "create_secret" in registry


def test_register_event_overwrites():
    registry = EventRegistry(events={"homepage": 500})
    registry.register_event("homepage", 10)
    assert registry.event_limit("homepage") == 10


def test_register_events_bulk():
    registry = EventRegistry()
    registry.register_events({"a": 1, "b": 2})
    assert registry.events == {"a": 1, "b": 2}


def test_events_returns_copy():
    registry = EventRegistry(events={"a": 1})
    registry.events["a"] = 99
    assert registry.event_limit("a") == 1


def test_custom_default_limit():
    assert EventRegistry(default_limit=7).event_limit("missing") == 7


def test_from_settings():
    settings = Settings(_env_file=None, rate_limit={"default_limit": 40, "limits": {"homepage": 3}})
    registry = EventRegistry.from_settings(settings)
    assert registry.default_limit == 40
    assert registry.events == {"homepage": 3}


def test_from_default_settings_registers_known_events():
    registry = EventRegistry.from_settings(Settings(_env_file=None))
    assert registry.events == DEFAULT_EVENT_LIMITS
    assert registry.event_limit("create_account") == 10
    assert registry.event_limit("failed_passphrase") == 5
