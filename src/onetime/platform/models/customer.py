"""Customer accounts."""

import hashlib
from typing import TYPE_CHECKING, Any, ClassVar, Self

from passlib.context import CryptContext

from onetime.platform.rate_limit import EventCounter, LimiterFactory

from .base import RedisModel, now_epoch

if TYPE_CHECKING:  # pragma: no cover - typings only
    from .metadata import Metadata

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ANONYMOUS = "anon"


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return str(pwd_context.hash(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its bcrypt hash."""
    return bool(pwd_context.verify(plain_password, hashed_password))


class Customer(RedisModel):
    """A registered customer, identified by their lowercased email address."""

    prefix: ClassVar[str] = "customer"
    safe_dump_fields: ClassVar[tuple[str, ...]] = (
        "custid",
        "role",
        "planid",
        "verified",
        "created",
        "updated",
    )

    custid: str
    role: str = "customer"
    planid: str = "basic"
    verified: bool = False
    passphrase: str | None = None
    created: int = 0
    updated: int = 0

    @property
    def identifier(self) -> str:
        return self.custid

    @property
    def external_identifier(self) -> str:
        """Opaque id used for rate limiting and anywhere the email must not leak."""
        return hashlib.sha256(f"customer:{self.custid}".encode()).hexdigest()[:32]

    @property
    def metadata_key(self) -> str:
        return f"{self.prefix}:{self.custid}:metadata"

    @classmethod
    def anonymous(cls) -> "Customer":
        return cls(custid=ANONYMOUS, role="anonymous")

    def is_anonymous(self) -> bool:
        return self.custid == ANONYMOUS

    def is_colonel(self) -> bool:
        return self.role == "colonel"

    @classmethod
    async def create(cls, redis: Any, custid: str, **values: Any) -> Self:
        custid = custid.strip().lower()
        if await cls.exists_for(redis, custid):
            raise ValueError(f"Customer exists: {custid}")
        now = now_epoch()
        cust = cls(custid=custid, created=now, updated=now, **values).bind(redis)
        await cust.save()
        return cust

    def update_passphrase(self, password: str) -> None:
        self.passphrase = hash_password(password)

    def passphrase_matches(self, password: str) -> bool:
        if not self.passphrase:
            return False
        return verify_password(password, self.passphrase)

    def rate_limits(self, factory: LimiterFactory) -> EventCounter:
        return EventCounter(self, factory)

    async def add_metadata(self, metadata: "Metadata") -> None:
        await self.redis.zadd(self.metadata_key, {metadata.key: metadata.created})

    async def metadata_list(self) -> list["Metadata"]:
        """Most recent first. Keys whose record expired are pruned."""
        from .metadata import Metadata

        keys = await self.redis.zrevrange(self.metadata_key, 0, -1)
        records = []
        for key in keys:
            metadata = await Metadata.load(self.redis, key)
            if metadata is None:
                await self.redis.zrem(self.metadata_key, key)
                continue
            records.append(metadata)
        return records

    async def destroy(self) -> None:
        await self.redis.delete(self.rediskey, self.metadata_key)
