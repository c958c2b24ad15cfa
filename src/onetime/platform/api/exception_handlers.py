"""
Map application errors to HTTP responses.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.responses import Response

from onetime.platform.exceptions import (
    LimitExceeded,
    OnetimeError,
    RateLimitStoreError,
    Redirect,
)

logger = structlog.get_logger(__name__)


async def onetime_error_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, OnetimeError):  # FastAPI only routes OnetimeError here
        raise exc
    logger.info(
        "request.refused",
        path=request.url.path,
        error_code=exc.error_code,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def redirect_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, Redirect):
        raise exc
    logger.info("request.redirected", path=request.url.path, location=exc.location)
    return RedirectResponse(url=exc.location, status_code=exc.status_code)


async def limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, LimitExceeded):
        raise exc
    logger.warning(
        "request.rate_limited",
        path=request.url.path,
        event=exc.event,
        count=exc.count,
    )
    headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def store_error_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, RateLimitStoreError):
        raise exc
    logger.error("request.rate_limit_unavailable", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LimitExceeded, limit_exceeded_handler)
    app.add_exception_handler(RateLimitStoreError, store_error_handler)
    app.add_exception_handler(Redirect, redirect_handler)
    app.add_exception_handler(OnetimeError, onetime_error_handler)
