"""
Use case base class.

Every use case runs the same lifecycle:

1. ``process_params``  - read and normalize the request params (on init)
2. ``raise_concerns``  - rate limit and validate; no side effects allowed
3. ``process``         - do the work

``run`` drives 2 and 3 and returns ``success_data``.
"""

from dataclasses import dataclass
from typing import Any, NoReturn

import structlog
from pydantic import EmailStr, TypeAdapter, ValidationError

from onetime.platform.exceptions import FormError, Unauthorized
from onetime.platform.models import Customer, Session, subject_for
from onetime.platform.rate_limit import ActionGuard, LimiterFactory
from onetime.platform.settings import Settings

logger = structlog.get_logger(__name__)

_email_adapter = TypeAdapter(EmailStr)


@dataclass
class LogicServices:
    """Collaborators shared by every use case in a request."""

    redis: Any
    limiter_factory: LimiterFactory
    guard: ActionGuard
    settings: Settings


@dataclass
class RequestContext:
    """Who is asking."""

    sess: Session
    cust: Customer
    ipaddress: str

    @property
    def subject(self) -> str:
        """Rate limit subject: the client address plus whoever it is signed in as."""
        return subject_for(self.ipaddress, self.sess.custid)

    @property
    def authenticated(self) -> bool:
        return self.sess.is_authenticated() and not self.cust.is_anonymous()


class Logic:
    """Base class for use cases."""

    def __init__(self, context: RequestContext, params: dict[str, Any] | None, services: LogicServices):
        self.context = context
        self.sess = context.sess
        self.cust = context.cust
        self.params = dict(params or {})
        self.services = services
        self.settings = services.settings
        self.redis = services.redis
        self.process_params()

    def process_params(self) -> None:
        pass

    async def raise_concerns(self) -> None:
        pass

    async def process(self) -> None:
        pass

    def success_data(self) -> dict[str, Any]:
        return {}

    async def run(self) -> dict[str, Any]:
        await self.raise_concerns()
        await self.process()
        return self.success_data()

    async def limit_action(self, event: str) -> int | None:
        return await self.services.guard.limit_action(self.context.subject, event)

    async def limit_customer(self, event: str) -> int | None:
        """Count ``event`` against the signed-in customer, wherever they connect from."""
        if self.cust.is_anonymous():
            return None
        counter = self.cust.rate_limits(self.services.limiter_factory)
        return await self.services.guard.limit_counter(counter, event)

    def form_fields(self) -> dict[str, Any]:
        return {}

    def raise_form_error(self, message: str) -> NoReturn:
        raise FormError(message, form_fields=self.form_fields())

    def require_authenticated(self) -> None:
        if not self.context.authenticated:
            raise Unauthorized("Sign in to continue")

    @staticmethod
    def valid_email(address: str) -> bool:
        try:
            _email_adapter.validate_python(address)
        except ValidationError:
            return False
        return True

    @staticmethod
    def normalize_password(value: Any, max_length: int = 128) -> str:
        return str(value or "").strip()[:max_length]
