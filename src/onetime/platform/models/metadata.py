"""
Metadata: the sender's receipt for a secret.

State moves one way only::

    new -> viewed -> received | burned
    new ------------> received | burned

``orphaned`` marks a record whose secret vanished without going through
either of the terminal transitions. State changes never refresh the
record's TTL.
"""

from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from .base import RedisModel, generate_id, now_epoch

if TYPE_CHECKING:  # pragma: no cover - typings only
    from .secret import Secret

logger = structlog.get_logger(__name__)


class MetadataState:
    NEW = "new"
    VIEWED = "viewed"
    RECEIVED = "received"
    BURNED = "burned"
    ORPHANED = "orphaned"


class Metadata(RedisModel):
    prefix: ClassVar[str] = "metadata"
    default_ttl: ClassVar[int | None] = 14 * 24 * 3600

    key: str
    custid: str = "anon"
    state: str = MetadataState.NEW
    secret_key: str | None = None
    secret_shortkey: str | None = None
    secret_ttl: int | None = None
    share_domain: str | None = None
    passphrase: bool = False
    viewed: int | None = None
    received: int | None = None
    burned: int | None = None
    shared: int | None = None
    created: int = 0
    updated: int = 0
    recipients: str | None = None
    truncate: bool = False

    @property
    def identifier(self) -> str:
        return self.key

    @classmethod
    def new(cls, redis: Any, custid: str = "anon", **values: Any) -> "Metadata":
        now = now_epoch()
        return cls(key=generate_id(), custid=custid, created=now, updated=now, **values).bind(redis)

    @property
    def shortkey(self) -> str:
        return self.key[:8]

    def state_is(self, guess: str) -> bool:
        return self.state == guess

    def is_anonymous(self) -> bool:
        return self.custid == "anon"

    def is_owner(self, custid: str) -> bool:
        return not self.is_anonymous() and self.custid == custid

    def is_truncated(self) -> bool:
        return self.truncate

    def is_destroyed(self) -> bool:
        return self.state in (MetadataState.RECEIVED, MetadataState.BURNED)

    def age(self) -> int:
        return now_epoch() - self.updated

    async def mark_viewed(self) -> bool:
        # The secret link was opened but not revealed yet. Only a fresh record
        # can be viewed.
        if not self.state_is(MetadataState.NEW):
            return False
        self.state = MetadataState.VIEWED
        self.viewed = now_epoch()
        await self.save(update_expiration=False)
        return True

    async def mark_received(self) -> bool:
        if self.state not in (MetadataState.NEW, MetadataState.VIEWED):
            return False
        self.state = MetadataState.RECEIVED
        self.received = now_epoch()
        self.secret_key = None
        await self.save(update_expiration=False)
        return True

    async def mark_burned(self) -> bool:
        if self.state not in (MetadataState.NEW, MetadataState.VIEWED):
            return False
        self.state = MetadataState.BURNED
        self.burned = now_epoch()
        self.secret_key = None
        await self.save(update_expiration=False)
        return True

    async def mark_orphaned(self) -> bool:
        # Records that already let go of their secret keep their state.
        if not self.secret_key:
            return False
        logger.warning("metadata.orphaned", metadata=self.shortkey, state=self.state)
        self.state = MetadataState.ORPHANED
        self.updated = now_epoch()
        self.secret_key = None
        await self.save(update_expiration=False)
        return True

    async def load_secret(self) -> "Secret | None":
        from .secret import Secret

        if not self.secret_key:
            return None
        return await Secret.load(self.redis, self.secret_key)

    def safe_dump(self) -> dict[str, Any]:
        return {
            "identifier": self.key,
            "key": self.key,
            "custid": self.custid,
            "state": self.state,
            "secret_shortkey": self.secret_shortkey,
            "secret_ttl": self.secret_ttl,
            "share_domain": self.share_domain,
            "created": self.created,
            "updated": self.updated,
            "shared": self.shared,
            "received": self.received,
            "burned": self.burned,
            "viewed": self.viewed,
            "recipients": self.recipients,
            "shortkey": self.shortkey,
            "show_recipients": bool(self.recipients),
            "is_viewed": self.state_is(MetadataState.VIEWED),
            "is_received": self.state_is(MetadataState.RECEIVED),
            "is_burned": self.state_is(MetadataState.BURNED),
            "is_destroyed": self.is_destroyed(),
            "is_truncated": self.is_truncated(),
        }
