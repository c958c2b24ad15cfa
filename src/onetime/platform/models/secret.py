"""Secrets: the shared value, readable once."""

from typing import Any, ClassVar

import structlog

from .base import RedisModel, generate_id, now_epoch
from .customer import hash_password, verify_password
from .metadata import Metadata

logger = structlog.get_logger(__name__)

MAX_VALUE_LENGTH = 10_000


class SecretState:
    NEW = "new"
    VIEWED = "viewed"
    RECEIVED = "received"
    BURNED = "burned"


class Secret(RedisModel):
    prefix: ClassVar[str] = "secret"
    default_ttl: ClassVar[int | None] = 7 * 24 * 3600

    key: str
    custid: str = "anon"
    metadata_key: str
    value: str = ""
    passphrase: str | None = None
    state: str = SecretState.NEW
    secret_ttl: int | None = None
    share_domain: str | None = None
    truncated: bool = False
    created: int = 0
    updated: int = 0

    @property
    def identifier(self) -> str:
        return self.key

    @property
    def shortkey(self) -> str:
        return self.key[:8]

    def has_passphrase(self) -> bool:
        return bool(self.passphrase)

    def passphrase_matches(self, guess: str | None) -> bool:
        if not self.has_passphrase():
            return True
        if not guess:
            return False
        return verify_password(guess, self.passphrase or "")

    def is_viewable(self) -> bool:
        return self.state in (SecretState.NEW, SecretState.VIEWED)

    async def load_metadata(self) -> Metadata | None:
        return await Metadata.load(self.redis, self.metadata_key)

    async def mark_viewed(self) -> bool:
        if self.state != SecretState.NEW:
            return False
        self.state = SecretState.VIEWED
        self.updated = now_epoch()
        await self.save(update_expiration=False)
        return True

    async def received(self) -> bool:
        """The recipient read the secret: drop it and close out the receipt.

        Returns False when another request removed the secret first; the
        caller must not hand out the value in that case.
        """
        metadata = await self.load_metadata()
        if not await self.delete():
            return False
        if metadata is not None:
            await metadata.mark_received()
        return True

    async def burned(self) -> bool:
        """The sender destroyed the secret before it was read."""
        metadata = await self.load_metadata()
        if not await self.delete():
            return False
        if metadata is not None:
            await metadata.mark_burned()
        return True

    @classmethod
    async def spawn_pair(
        cls,
        redis: Any,
        custid: str,
        value: str,
        *,
        ttl: int,
        passphrase: str | None = None,
        share_domain: str | None = None,
        metadata_ttl: int | None = None,
    ) -> tuple[Metadata, "Secret"]:
        """Create a linked metadata/secret pair.

        The metadata outlives the secret so the sender can still see what
        happened to it.
        """
        truncated = len(value) > MAX_VALUE_LENGTH
        metadata = Metadata.new(
            redis,
            custid=custid,
            secret_ttl=ttl,
            share_domain=share_domain,
            passphrase=bool(passphrase),
            truncate=truncated,
        )
        now = now_epoch()
        secret = cls(
            key=generate_id(),
            custid=custid,
            metadata_key=metadata.key,
            value=value[:MAX_VALUE_LENGTH],
            passphrase=hash_password(passphrase) if passphrase else None,
            secret_ttl=ttl,
            share_domain=share_domain,
            truncated=truncated,
            created=now,
            updated=now,
        ).bind(redis)
        metadata.secret_key = secret.key
        metadata.secret_shortkey = secret.shortkey

        await secret.save(ttl=ttl)
        await metadata.save(ttl=max(ttl * 2, metadata_ttl or 0) or None)
        logger.debug("secret.spawned", metadata=metadata.shortkey, secret=secret.shortkey, ttl=ttl)
        return metadata, secret
