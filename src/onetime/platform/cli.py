#!/usr/bin/env python
"""
CLI management commands for the Onetime Secret platform.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import click

from onetime.platform.logging import log_audit_event
from onetime.platform.rate_limit import EventRegistry, LimiterFactory, create_counter_store
from onetime.platform.settings import Settings, get_settings


@dataclass
class CLIDependencies:
    """Bundle of injectable dependencies used by CLI commands."""

    settings: Settings
    redis_factory: Callable[[], Any]


def _get_cli_dependencies() -> CLIDependencies:
    """Return the default dependency bundle for CLI commands."""
    from redis.asyncio import Redis

    settings = get_settings()
    return CLIDependencies(
        settings=settings,
        redis_factory=lambda: Redis.from_url(
            settings.redis.redis_url, decode_responses=settings.redis.decode_responses
        ),
    )


def _run_with_factory(
    deps: CLIDependencies, action: Callable[[LimiterFactory], Awaitable[Any]]
) -> Any:
    async def _runner() -> Any:
        redis = deps.redis_factory()
        try:
            store = create_counter_store(deps.settings, redis)
            factory = LimiterFactory(
                store,
                EventRegistry.from_settings(deps.settings),
                ttl=deps.settings.rate_limit.window_seconds,
                prefix=deps.settings.rate_limit.key_prefix,
            )
            return await action(factory)
        finally:
            await redis.aclose()

    return asyncio.run(_runner())


@click.group()
def cli() -> None:
    """Onetime Secret administration."""
    pass


@cli.command()
def limits() -> None:
    """Print the configured event limits."""
    deps = _get_cli_dependencies()
    registry = EventRegistry.from_settings(deps.settings)
    click.echo(f"default: {registry.default_limit}")
    for event, limit in sorted(registry.events.items()):
        click.echo(f"{event}: {limit}")


@cli.command()
@click.argument("identifier")
@click.argument("event")
def limiter_show(identifier: str, event: str) -> None:
    """Show the current window's counter for IDENTIFIER and EVENT."""
    deps = _get_cli_dependencies()

    async def _show(factory: LimiterFactory) -> None:
        limiter = factory.limiter(identifier, event)
        count = await limiter.count()
        ttl = await limiter.remaining_ttl()
        click.echo(f"key: {limiter.key}")
        click.echo(f"count: {count}/{limiter.limit}")
        click.echo(f"ttl: {ttl}")

    _run_with_factory(deps, _show)


@cli.command()
@click.argument("identifier")
@click.argument("event")
def limiter_clear(identifier: str, event: str) -> None:
    """Delete the current window's counter for IDENTIFIER and EVENT."""
    deps = _get_cli_dependencies()

    async def _clear(factory: LimiterFactory) -> bool:
        return await factory.clear(identifier, event)

    cleared = _run_with_factory(deps, _clear)
    log_audit_event(
        "rate_limit.cleared",
        category="rate_limit",
        resource_type="limiter",
        resource_id=f"{identifier}:{event}",
        cleared=cleared,
    )
    click.echo("Cleared" if cleared else "Nothing to clear")


@cli.command()
@click.argument("identifier")
@click.argument("event")
@click.argument("seconds", type=click.IntRange(min=1))
def limiter_expire(identifier: str, event: str, seconds: int) -> None:
    """Set the remaining lifetime of a counter to SECONDS."""
    deps = _get_cli_dependencies()

    async def _expire(factory: LimiterFactory) -> bool:
        return await factory.limiter(identifier, event).update_expiration(seconds)

    updated = _run_with_factory(deps, _expire)
    log_audit_event(
        "rate_limit.expiration_updated",
        category="rate_limit",
        resource_type="limiter",
        resource_id=f"{identifier}:{event}",
        ttl=seconds,
        updated=updated,
    )
    if not updated:
        raise click.ClickException("No such counter")
    click.echo(f"Expires in {seconds}s")


if __name__ == "__main__":
    cli()
