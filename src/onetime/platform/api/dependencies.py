"""
FastAPI dependencies shared by the API routers.
"""

from typing import Any

import structlog
from fastapi import Depends, Request, Response

from onetime.platform.logic import LogicServices, RequestContext
from onetime.platform.models import Customer, Session
from onetime.platform.rate_limit import (
    ActionGuard,
    EventRegistry,
    LimiterFactory,
    create_counter_store,
)
from onetime.platform.redis_client import get_redis_client
from onetime.platform.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

SESSION_COOKIE = "sess"


def configure_rate_limiting(app: Any, settings: Settings, redis: Any) -> LimiterFactory:
    """Build the event registry, counter store, factory and guard once per app."""
    registry = EventRegistry.from_settings(settings)
    store = create_counter_store(settings, redis)
    factory = LimiterFactory(
        store,
        registry,
        ttl=settings.rate_limit.window_seconds,
        prefix=settings.rate_limit.key_prefix,
    )
    app.state.event_registry = registry
    app.state.limiter_factory = factory
    app.state.action_guard = ActionGuard.from_settings(factory, settings)
    logger.info(
        "rate_limit.configured",
        enabled=settings.rate_limit.enabled,
        fail_open=settings.rate_limit.fail_open,
        events=len(registry.events),
        store=type(store).__name__,
    )
    return factory


def client_ip(request: Request, trust_forwarded: bool = False) -> str:
    """Client address; the first X-Forwarded-For hop when ``trust_forwarded``."""
    forwarded = request.headers.get("x-forwarded-for", "") if trust_forwarded else ""
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "0.0.0.0"  # nosec B104 - placeholder address, never bound


async def get_services(request: Request, redis: Any = Depends(get_redis_client)) -> LogicServices:
    state = request.app.state
    return LogicServices(
        redis=redis,
        limiter_factory=state.limiter_factory,
        guard=state.action_guard,
        settings=get_settings(),
    )


async def get_request_context(
    request: Request,
    response: Response,
    services: LogicServices = Depends(get_services),
) -> RequestContext:
    """Load the caller's session (creating one if needed) and customer."""
    ipaddress = client_ip(request, services.settings.site.trust_forwarded_for)
    redis = services.redis

    sess = await Session.load(redis, request.cookies.get(SESSION_COOKIE, ""))
    if sess is None:
        sess = await Session.create(redis, ipaddress)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sess.sessid,
            httponly=True,
            secure=services.settings.site.ssl,
            samesite="lax",
            path="/",
        )

    cust: Customer | None = None
    if sess.is_authenticated() or sess.custid != "anon":
        cust = await Customer.load(redis, sess.custid)
    return RequestContext(sess=sess, cust=cust or Customer.anonymous(), ipaddress=ipaddress)
