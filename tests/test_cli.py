"""
Tests for the administration CLI.

Counters live in a fakeredis server shared between the CLI's async client
and a sync client used to seed and inspect keys.
"""

from unittest.mock import patch

import fakeredis
import pytest
from click.testing import CliRunner

from onetime.platform.cli import CLIDependencies, cli
from onetime.platform.rate_limit import window_stamp
from onetime.platform.settings import Settings

pytestmark = pytest.mark.integration


@pytest.fixture
def server():
    return fakeredis.FakeServer()


@pytest.fixture
def sync_redis(server):
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture
def deps(server) -> CLIDependencies:
    return CLIDependencies(
        settings=Settings(_env_file=None, rate_limit={"default_limit": 20, "limits": {"create_secret": 5}}),
        redis_factory=lambda: fakeredis.aioredis.FakeRedis(server=server, decode_responses=True),
    )


@pytest.fixture
def runner(deps):
    with patch("onetime.platform.cli._get_cli_dependencies", return_value=deps):
        yield CliRunner()


def _key(identifier: str, event: str) -> str:
    return f"limiter:{identifier}:{event}:{window_stamp()}:counter"


def test_help_lists_commands(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("limits", "limiter-show", "limiter-clear", "limiter-expire"):
        assert command in result.output


def test_limits(runner):
    result = runner.invoke(cli, ["limits"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["default: 20", "create_secret: 5"]


def test_limiter_show(runner, sync_redis):
    sync_redis.set(_key("203.0.113.7", "create_secret"), 3, ex=1200)
    result = runner.invoke(cli, ["limiter-show", "203.0.113.7", "create_secret"])
    assert result.exit_code == 0
    assert f"key: {_key('203.0.113.7', 'create_secret')}" in result.output
    assert "count: 3/5" in result.output


def test_limiter_show_missing(runner):
    result = runner.invoke(cli, ["limiter-show", "nobody", "homepage"])
    assert result.exit_code == 0
    assert "count: 0/20" in result.output
    assert "ttl: -2" in result.output


def test_limiter_clear(runner, sync_redis):
    key = _key("203.0.113.7", "create_secret")
    sync_redis.set(key, 6, ex=1200)

    result = runner.invoke(cli, ["limiter-clear", "203.0.113.7", "create_secret"])
    assert result.exit_code == 0
    assert "Cleared" in result.output
    assert not sync_redis.exists(key)

    result = runner.invoke(cli, ["limiter-clear", "203.0.113.7", "create_secret"])
    assert "Nothing to clear" in result.output


def test_limiter_expire(runner, sync_redis):
    key = _key("sess", "show_secret")
    sync_redis.set(key, 1, ex=1200)

    result = runner.invoke(cli, ["limiter-expire", "sess", "show_secret", "30"])
    assert result.exit_code == 0
    assert "Expires in 30s" in result.output
    assert 0 < sync_redis.ttl(key) <= 30


def test_limiter_expire_missing_counter(runner):
    result = runner.invoke(cli, ["limiter-expire", "sess", "show_secret", "30"])
    assert result.exit_code != 0
    assert "No such counter" in result.output


def test_limiter_expire_rejects_zero(runner):
    result = runner.invoke(cli, ["limiter-expire", "sess", "show_secret", "0"])
    assert result.exit_code == 2
