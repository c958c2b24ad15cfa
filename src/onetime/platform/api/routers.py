"""
JSON API routes.

Each route hands its payload to one use case and returns the use case's
success data. Errors are rendered by the registered exception handlers.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from onetime.platform.logic import (
    BurnSecret,
    CreateAccount,
    CreateSecret,
    GetDomainBrand,
    Homepage,
    LogicServices,
    RequestContext,
    ShowMetadata,
    ShowRecentMetadata,
    ShowSecret,
    UpdateDomainBrand,
)
from onetime.platform.redis_client import check_redis_health

from .dependencies import get_request_context, get_services

logger = structlog.get_logger(__name__)

api_router = APIRouter(prefix="/api/v2")


# ========================================
# Request Models
# ========================================


class CreateAccountRequest(BaseModel):
    u: str = Field(..., description="Email address")
    p: str = Field(..., description="Password")
    planid: str | None = None
    skill: str | None = Field(None, description="Leave empty")


class ConcealRequest(BaseModel):
    secret: str
    passphrase: str | None = None
    ttl: int | None = Field(None, ge=1)
    share_domain: str | None = None


class RevealRequest(BaseModel):
    passphrase: str | None = None
    continue_: bool = Field(False, alias="continue")


class BrandRequest(BaseModel):
    brand: dict[str, Any] | None = None


def _params(model: BaseModel, **extra: Any) -> dict[str, Any]:
    return {**model.model_dump(by_alias=True), **extra}


# ========================================
# Routes
# ========================================


@api_router.get("/health")
async def health(services: LogicServices = Depends(get_services)) -> JSONResponse:
    result = await check_redis_health(services.redis)
    status_code = 200 if result["status"] == "healthy" else 503
    return JSONResponse(status_code=status_code, content=result)


@api_router.post("/account")
async def create_account(
    payload: CreateAccountRequest,
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await CreateAccount(context, _params(payload), services).run()


@api_router.get("/dashboard")
async def dashboard(
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await Homepage(context, {}, services).run()


@api_router.get("/receipt/recent")
async def recent_receipts(
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await ShowRecentMetadata(context, {}, services).run()


@api_router.post("/secret/conceal")
async def conceal_secret(
    payload: ConcealRequest,
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await CreateSecret(context, _params(payload), services).run()


@api_router.get("/secret/{key}")
async def show_secret(
    key: str,
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await ShowSecret(context, {"key": key}, services).run()


@api_router.post("/secret/{key}/reveal")
async def reveal_secret(
    key: str,
    payload: RevealRequest,
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await ShowSecret(context, _params(payload, key=key), services).run()


@api_router.get("/receipt/{key}")
async def show_receipt(
    key: str,
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await ShowMetadata(context, {"key": key}, services).run()


@api_router.post("/receipt/{key}/burn")
async def burn_secret(
    key: str,
    payload: RevealRequest,
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await BurnSecret(context, _params(payload, key=key), services).run()


@api_router.get("/domains/{domain_id}/brand")
async def get_domain_brand(
    domain_id: str,
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await GetDomainBrand(context, {"domain": domain_id}, services).run()


@api_router.put("/domains/{domain_id}/brand")
async def update_domain_brand(
    domain_id: str,
    payload: BrandRequest,
    context: RequestContext = Depends(get_request_context),
    services: LogicServices = Depends(get_services),
) -> dict[str, Any]:
    return await UpdateDomainBrand(context, _params(payload, domain=domain_id), services).run()
