"""Browser and API sessions."""

import hashlib
import secrets
from typing import Any, ClassVar, Self

from .base import RedisModel, now_epoch


def subject_for(ipaddress: str, custid: str) -> str:
    """Rate limit identity of whoever is behind ``ipaddress`` as ``custid``.

    Session tokens are free to mint, so they never identify a caller on
    their own. Every cookie-less request from one address maps to the same
    subject.
    """
    digest = hashlib.sha256(f"session:{ipaddress or 'unknown'}:{custid or 'anon'}".encode())
    return digest.hexdigest()[:32]


class Session(RedisModel):
    prefix: ClassVar[str] = "session"
    default_ttl: ClassVar[int | None] = 20 * 60

    sessid: str
    ipaddress: str = ""
    custid: str = "anon"
    authenticated: bool = False
    created: int = 0
    updated: int = 0

    @property
    def identifier(self) -> str:
        return self.sessid

    @property
    def external_identifier(self) -> str:
        return subject_for(self.ipaddress, self.custid)

    @property
    def short_identifier(self) -> str:
        return self.sessid[:12]

    def is_authenticated(self) -> bool:
        return self.authenticated and self.custid != "anon"

    @classmethod
    async def create(cls, redis: Any, ipaddress: str) -> Self:
        now = now_epoch()
        sess = cls(
            sessid=secrets.token_hex(32), ipaddress=ipaddress, created=now, updated=now
        ).bind(redis)
        await sess.save()
        return sess

    async def authenticate(self, custid: str) -> None:
        self.custid = custid
        self.authenticated = True
        self.updated = now_epoch()
        await self.save()
