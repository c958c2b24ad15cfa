"""Custom domains and their brand settings."""

import hashlib
from typing import Any, ClassVar, Self

from .base import RedisModel, now_epoch

# Keys accepted in a domain's brand hash. They match what the frontend
# renders for a branded secret page.
BRAND_KEYS: tuple[str, ...] = (
    "logo",
    "primary_color",
    "instructions_pre_reveal",
    "instructions_reveal",
    "instructions_post_reveal",
    "button_text_light",
    "font_family",
    "corner_style",
    "allow_public_homepage",
    "allow_public_api",
)


def domain_id_for(display_domain: str, custid: str) -> str:
    digest = hashlib.sha256(f"{display_domain.lower()}:{custid}".encode()).hexdigest()
    return digest[:20]


def split_domain(display_domain: str) -> tuple[str, str]:
    """Return ``(base_domain, subdomain)`` for a display domain."""
    labels = display_domain.lower().strip(".").split(".")
    if len(labels) <= 2:
        return ".".join(labels), ""
    return ".".join(labels[-2:]), ".".join(labels[:-2])


class CustomDomain(RedisModel):
    prefix: ClassVar[str] = "customdomain"
    safe_dump_fields: ClassVar[tuple[str, ...]] = (
        "domainid",
        "custid",
        "display_domain",
        "base_domain",
        "subdomain",
        "verified",
        "created",
        "updated",
    )

    domainid: str
    custid: str
    display_domain: str
    base_domain: str = ""
    subdomain: str = ""
    verified: bool = False
    created: int = 0
    updated: int = 0

    @property
    def identifier(self) -> str:
        return self.domainid

    @property
    def brand_key(self) -> str:
        return f"{self.prefix}:{self.domainid}:brand"

    @property
    def is_apex(self) -> bool:
        return not self.subdomain

    @classmethod
    async def create(cls, redis: Any, display_domain: str, custid: str) -> Self:
        display_domain = display_domain.strip().lower()
        base_domain, subdomain = split_domain(display_domain)
        now = now_epoch()
        domain = cls(
            domainid=domain_id_for(display_domain, custid),
            custid=custid,
            display_domain=display_domain,
            base_domain=base_domain,
            subdomain=subdomain,
            created=now,
            updated=now,
        ).bind(redis)
        await domain.save()
        return domain

    @classmethod
    async def load_owned(cls, redis: Any, domainid: str, custid: str) -> Self | None:
        """Load a domain only if ``custid`` owns it."""
        domain = await cls.load(redis, domainid)
        if domain is None or domain.custid != custid:
            return None
        return domain

    async def brand(self) -> dict[str, str]:
        return dict(await self.redis.hgetall(self.brand_key))

    async def update_brand(self, settings: dict[str, Any]) -> dict[str, str]:
        """Apply brand changes. ``None`` removes a key; other values are stored as strings."""
        removed = [key for key, value in settings.items() if value is None]
        updated = {
            key: ("true" if value else "false") if isinstance(value, bool) else str(value)
            for key, value in settings.items()
            if value is not None
        }
        async with self.redis.pipeline(transaction=True) as pipe:
            if removed:
                pipe.hdel(self.brand_key, *removed)
            if updated:
                pipe.hset(self.brand_key, mapping=updated)
            await pipe.execute()
        self.updated = now_epoch()
        await self.save()
        return await self.brand()

    async def destroy(self) -> None:
        await self.redis.delete(self.rediskey, self.brand_key)

    def safe_dump(self) -> dict[str, Any]:
        data = super().safe_dump()
        data["is_apex"] = self.is_apex
        return data
