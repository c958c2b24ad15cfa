"""Account use cases."""

from typing import Any

import structlog

from onetime.platform.exceptions import FormError, Redirect
from onetime.platform.models import Customer

from .base import Logic

logger = structlog.get_logger(__name__)

PLANS = ("anonymous", "basic", "identity")


class CreateAccount(Logic):
    """Sign up with an email address and password."""

    cust_record: Customer
    customer_role: str = "customer"
    success_message: str = ""

    def process_params(self) -> None:
        self.planid = str(self.params.get("planid") or "")
        self.custid = str(self.params.get("u") or "").strip().lower()
        self.password = self.normalize_password(self.params.get("p"))
        self.autoverify = self.settings.site.autoverify

        # Hidden field. Regular people leave it empty; a value means a bot
        # filled in the whole form.
        self.skill = str(self.params.get("skill") or "").strip()[:60]

    async def raise_concerns(self) -> None:
        await self.limit_action("create_account")

        if self.context.authenticated:
            raise FormError("You're already signed up")
        if await Customer.exists_for(self.redis, self.custid):
            self.raise_form_error("Please try another email address")
        if not self.valid_email(self.custid):
            self.raise_form_error("Is that a valid email address?")
        if len(self.password) < self.settings.site.min_password_length:
            self.raise_form_error("Password is too short")

        if self.planid not in PLANS:
            self.planid = "basic"

        if self.skill:
            # the query string is arbitrary, for log filtering
            raise Redirect("/?s=1")

    async def process(self) -> None:
        self.customer_role = "colonel" if self.custid in self.settings.colonels else "customer"

        cust = await Customer.create(
            self.redis,
            self.custid,
            planid=self.planid,
            verified=self.autoverify,
            role=self.customer_role,
        )
        cust.update_passphrase(self.password)
        await cust.save()
        self.cust_record = cust

        if self.autoverify:
            await self.sess.authenticate(cust.custid)
            self.success_message = "Account created."
        else:
            self.sess.custid = cust.custid
            await self.sess.save()
            # Verification email delivery happens outside this service.
            logger.info("account.verification_pending", custid_hash=cust.external_identifier)
            self.success_message = f"A verification was sent to {cust.custid}."

        logger.info(
            "account.created",
            role=cust.role,
            planid=cust.planid,
            session=self.sess.short_identifier,
            ipaddress=self.context.ipaddress,
        )

    def form_fields(self) -> dict[str, Any]:
        return {"planid": self.planid, "custid": self.custid}

    def success_data(self) -> dict[str, Any]:
        return {
            "custid": self.cust_record.custid,
            "record": self.cust_record.safe_dump(),
            "details": {"message": self.success_message},
        }
