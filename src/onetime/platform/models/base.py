"""
Redis hash backed records.

Each record is a pydantic model stored as one hash at
``<prefix>:<identifier>:object``. Values are written as strings and coerced
back to their field types on load.
"""

import secrets
import time
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, PrivateAttr

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_id(length: int = 31) -> str:
    """Random base36 identifier."""
    value = secrets.randbits(256)
    chars = []
    while value:
        value, rem = divmod(value, 36)
        chars.append(_BASE36[rem])
    return "".join(chars)[:length].rjust(length, "0")


def now_epoch() -> int:
    return int(time.time())


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RedisModel(BaseModel):
    """Base class for records kept in Redis hashes."""

    model_config = ConfigDict(extra="ignore")

    prefix: ClassVar[str] = ""
    default_ttl: ClassVar[int | None] = None
    safe_dump_fields: ClassVar[tuple[str, ...]] = ()

    _redis: Any = PrivateAttr(default=None)

    @property
    def identifier(self) -> str:
        raise NotImplementedError

    @classmethod
    def rediskey_for(cls, identifier: str) -> str:
        return f"{cls.prefix}:{identifier}:object"

    @property
    def rediskey(self) -> str:
        return self.rediskey_for(self.identifier)

    @property
    def redis(self) -> Any:
        if self._redis is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to a Redis client")
        return self._redis

    def bind(self, redis: Any) -> Self:
        self._redis = redis
        return self

    def to_hash(self) -> dict[str, str]:
        return {
            name: _encode(value)
            for name, value in self.model_dump(exclude_none=True).items()
        }

    async def save(self, ttl: int | None = None, update_expiration: bool = True) -> bool:
        """Write every field. ``update_expiration=False`` keeps the current TTL."""
        mapping = self.to_hash()
        unset = [name for name, value in self.model_dump().items() if value is None]
        async with self.redis.pipeline(transaction=True) as pipe:
            if unset:
                pipe.hdel(self.rediskey, *unset)
            pipe.hset(self.rediskey, mapping=mapping)
            ttl = ttl or self.default_ttl
            if update_expiration and ttl:
                pipe.expire(self.rediskey, ttl)
            await pipe.execute()
        return True

    async def exists(self) -> bool:
        return bool(await self.redis.exists(self.rediskey))

    async def delete(self) -> bool:
        return bool(await self.redis.delete(self.rediskey))

    async def realttl(self) -> int:
        return int(await self.redis.ttl(self.rediskey))

    @classmethod
    async def load(cls, redis: Any, identifier: str) -> Self | None:
        if not identifier:
            return None
        data = await redis.hgetall(cls.rediskey_for(identifier))
        if not data:
            return None
        return cls.model_validate(data).bind(redis)

    @classmethod
    async def exists_for(cls, redis: Any, identifier: str) -> bool:
        return bool(await redis.exists(cls.rediskey_for(identifier)))

    def safe_dump(self) -> dict[str, Any]:
        """Fields that are safe to hand to API clients."""
        fields = self.safe_dump_fields or tuple(type(self).model_fields)
        return {name: getattr(self, name) for name in fields}
