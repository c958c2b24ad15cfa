"""Tests for secrets."""

import pytest

from onetime.platform.models import MAX_VALUE_LENGTH, Metadata, MetadataState, Secret, SecretState

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


async def test_spawn_pair_links_records(redis):
    metadata, secret = await Secret.spawn_pair(redis, "anon", "hello", ttl=600)
    assert secret.metadata_key == metadata.key
    assert secret.value == "hello"
    assert secret.secret_ttl == 600
    assert await secret.exists()
    assert await metadata.exists()
    assert 0 < await secret.realttl() <= 600


async def test_passphrase_is_hashed(redis):
    _, secret = await Secret.spawn_pair(redis, "anon", "hello", ttl=600, passphrase="opensesame")
    assert secret.has_passphrase()
    assert secret.passphrase != "opensesame"
    assert secret.passphrase_matches("opensesame")
    assert not secret.passphrase_matches("wrong")
    assert not secret.passphrase_matches(None)

    loaded = await Secret.load(redis, secret.key)
    assert loaded.passphrase_matches("opensesame")


async def test_no_passphrase_always_matches(redis):
    _, secret = await Secret.spawn_pair(redis, "anon", "hello", ttl=600)
    assert secret.passphrase_matches(None)
    assert secret.passphrase_matches("anything")


async def test_long_values_are_truncated(redis):
    metadata, secret = await Secret.spawn_pair(redis, "anon", "x" * (MAX_VALUE_LENGTH + 5), ttl=600)
    assert len(secret.value) == MAX_VALUE_LENGTH
    assert secret.truncated
    assert metadata.is_truncated()


async def test_received_removes_secret(redis):
    metadata, secret = await Secret.spawn_pair(redis, "anon", "hello", ttl=600)
    await secret.mark_viewed()
    assert secret.state == SecretState.VIEWED
    assert secret.is_viewable()

    assert await secret.received() is True
    assert await Secret.load(redis, secret.key) is None
    reloaded = await Metadata.load(redis, metadata.key)
    assert reloaded.state == MetadataState.RECEIVED


async def test_burned_removes_secret(redis):
    metadata, secret = await Secret.spawn_pair(redis, "anon", "hello", ttl=600)
    assert await secret.burned() is True
    assert not await Secret.exists_for(redis, secret.key)
    assert (await Metadata.load(redis, metadata.key)).state == MetadataState.BURNED


async def test_only_first_removal_wins(redis):
    metadata, secret = await Secret.spawn_pair(redis, "anon", "hello", ttl=600)
    stale = await Secret.load(redis, secret.key)

    assert await secret.received() is True
    assert await stale.received() is False
    assert await stale.burned() is False
    assert (await Metadata.load(redis, metadata.key)).state == MetadataState.RECEIVED
