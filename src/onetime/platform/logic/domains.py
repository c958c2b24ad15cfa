"""Custom domain brand use cases."""

import re
from typing import Any

import structlog

from onetime.platform.models import BRAND_KEYS, CustomDomain

from .base import Logic

logger = structlog.get_logger(__name__)

COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
FONT_FAMILIES = ("sans-serif", "serif", "monospace")
CORNER_STYLES = ("rounded", "square", "pill")


class _DomainLogic(Logic):
    custom_domain: CustomDomain

    def process_params(self) -> None:
        self.domain_id = str(self.params.get("domain") or "").strip()

    async def load_domain(self) -> CustomDomain:
        if not self.domain_id:
            self.raise_form_error("Please provide a domain ID")
        domain = await CustomDomain.load_owned(self.redis, self.domain_id, self.cust.custid)
        if domain is None:
            self.raise_form_error("Domain not found")
        return domain


class GetDomainBrand(_DomainLogic):
    brand: dict[str, str]

    async def raise_concerns(self) -> None:
        await self.limit_action("get_domain_brand")
        self.require_authenticated()
        self.custom_domain = await self.load_domain()

    async def process(self) -> None:
        self.brand = await self.custom_domain.brand()

    def success_data(self) -> dict[str, Any]:
        return {
            "custid": self.cust.custid,
            "record": self.custom_domain.safe_dump(),
            "details": {"brand": self.brand},
        }


class UpdateDomainBrand(_DomainLogic):
    brand: dict[str, str]

    def process_params(self) -> None:
        super().process_params()
        raw = self.params.get("brand")
        self.brand_settings: dict[str, Any] | None = None
        if isinstance(raw, dict):
            self.brand_settings = {
                key: value for key, value in raw.items() if key in BRAND_KEYS
            }
        logger.debug(
            "domain_brand.params",
            domain=self.domain_id,
            keys=sorted(self.brand_settings or {}),
        )

    async def raise_concerns(self) -> None:
        await self.limit_action("update_domain_brand")
        self.require_authenticated()
        self.custom_domain = await self.load_domain()

        if self.brand_settings is None:
            self.raise_form_error("Please provide brand settings")
        settings = self.brand_settings or {}

        color = settings.get("primary_color")
        if color is not None and not COLOR_PATTERN.match(str(color)):
            self.raise_form_error("Invalid primary color")

        font = settings.get("font_family")
        if font is not None and font not in FONT_FAMILIES:
            self.raise_form_error("Invalid font family")

        corner = settings.get("corner_style")
        if corner is not None and corner not in CORNER_STYLES:
            self.raise_form_error("Invalid button style")

    async def process(self) -> None:
        self.brand = await self.custom_domain.update_brand(self.brand_settings or {})
        logger.info(
            "domain_brand.updated",
            domain=self.custom_domain.domainid,
            keys=sorted(self.brand_settings or {}),
        )

    def form_fields(self) -> dict[str, Any]:
        return {"domain": self.domain_id}

    def success_data(self) -> dict[str, Any]:
        return {
            "custid": self.cust.custid,
            "record": self.custom_domain.safe_dump(),
            "details": {"brand": self.brand},
        }
