"""Secret use cases: conceal, reveal, receipts and burning."""

from typing import Any

import structlog

from onetime.platform.exceptions import FormError, MissingSecret
from onetime.platform.models import Metadata, Secret

from .base import Logic

logger = structlog.get_logger(__name__)

MIN_SECRET_TTL = 60


def _truthy(value: Any) -> bool:
    return str(value).strip().lower() in ("true", "1", "yes", "on")


class CreateSecret(Logic):
    metadata: Metadata
    secret: Secret

    def process_params(self) -> None:
        self.secret_value = str(self.params.get("secret") or "")
        self.passphrase = str(self.params.get("passphrase") or "")

        site = self.settings.site
        try:
            ttl = int(self.params.get("ttl") or site.default_secret_ttl)
        except (TypeError, ValueError):
            ttl = site.default_secret_ttl
        self.ttl = min(max(ttl, MIN_SECRET_TTL), site.max_secret_ttl)

        share_domain = str(self.params.get("share_domain") or "").strip().lower()
        self.share_domain = share_domain if share_domain and site.domains_enabled else None

    async def raise_concerns(self) -> None:
        await self.limit_action("create_secret")
        # A signed-in customer shares one allowance across all their addresses
        await self.limit_customer("create_secret")
        if not self.secret_value.strip():
            self.raise_form_error("You did not provide anything to share")

    async def process(self) -> None:
        self.metadata, self.secret = await Secret.spawn_pair(
            self.redis,
            self.cust.custid,
            self.secret_value,
            ttl=self.ttl,
            passphrase=self.passphrase or None,
            share_domain=self.share_domain,
            metadata_ttl=self.settings.site.metadata_ttl,
        )
        if not self.cust.is_anonymous():
            await self.cust.add_metadata(self.metadata)

        logger.info(
            "secret.created",
            metadata=self.metadata.shortkey,
            ttl=self.ttl,
            has_passphrase=bool(self.passphrase),
            session=self.sess.short_identifier,
        )

    def share_url(self) -> str:
        host = self.share_domain or self.settings.site.host
        scheme = "https" if self.settings.site.ssl else "http"
        return f"{scheme}://{host}/secret/{self.secret.key}"

    def success_data(self) -> dict[str, Any]:
        return {
            "record": {
                "metadata": self.metadata.safe_dump(),
                "secret": {
                    "key": self.secret.key,
                    "shortkey": self.secret.shortkey,
                    "secret_ttl": self.secret.secret_ttl,
                },
            },
            "details": {"share_url": self.share_url()},
        }


class ShowSecret(Logic):
    """View a secret link; ``continue`` reveals (and destroys) the secret."""

    secret: Secret
    secret_value: str | None = None
    correct_passphrase: bool = False

    def process_params(self) -> None:
        self.key = str(self.params.get("key") or "").strip()
        self.passphrase = str(self.params.get("passphrase") or "")
        self.continue_reveal = _truthy(self.params.get("continue", False))

    async def raise_concerns(self) -> None:
        await self.limit_action("show_secret")
        secret = await Secret.load(self.redis, self.key)
        if secret is None or not secret.is_viewable():
            raise MissingSecret()
        self.secret = secret

    async def process(self) -> None:
        secret = self.secret

        if not self.continue_reveal:
            # Link opened, secret not revealed yet
            await secret.mark_viewed()
            metadata = await secret.load_metadata()
            if metadata is not None:
                await metadata.mark_viewed()
            return

        if not secret.passphrase_matches(self.passphrase):
            await self.limit_action("failed_passphrase")
            raise FormError("Double check that passphrase")

        # Only the request that actually removes the secret gets to see it
        if not await secret.received():
            raise MissingSecret()

        self.correct_passphrase = True
        self.secret_value = secret.value
        logger.info("secret.received", secret=secret.shortkey, session=self.sess.short_identifier)

    def success_data(self) -> dict[str, Any]:
        return {
            "record": {
                "shortkey": self.secret.shortkey,
                "secret_value": self.secret_value,
                "is_truncated": self.secret.truncated,
            },
            "details": {
                "has_passphrase": self.secret.has_passphrase(),
                "show_secret": self.secret_value is not None,
                "correct_passphrase": self.correct_passphrase,
            },
        }


class ShowMetadata(Logic):
    """The sender's receipt page."""

    metadata: Metadata
    secret_realttl: int | None = None

    def process_params(self) -> None:
        self.key = str(self.params.get("key") or "").strip()

    async def raise_concerns(self) -> None:
        await self.limit_action("show_metadata")
        metadata = await Metadata.load(self.redis, self.key)
        if metadata is None:
            raise MissingSecret()
        self.metadata = metadata

    async def process(self) -> None:
        secret = await self.metadata.load_secret()
        if secret is None:
            # secret_key set but nothing behind it
            await self.metadata.mark_orphaned()
        else:
            self.secret_realttl = await secret.realttl()

    def success_data(self) -> dict[str, Any]:
        return {
            "record": self.metadata.safe_dump(),
            "details": {"secret_realttl": self.secret_realttl},
        }


class BurnSecret(Logic):
    """Destroy a secret from its receipt before anyone reads it."""

    metadata: Metadata
    secret: Secret
    burned: bool = False

    def process_params(self) -> None:
        self.key = str(self.params.get("key") or "").strip()
        self.passphrase = str(self.params.get("passphrase") or "")
        self.continue_burn = _truthy(self.params.get("continue", False))

    async def raise_concerns(self) -> None:
        await self.limit_action("burn_secret")
        metadata = await Metadata.load(self.redis, self.key)
        if metadata is None:
            raise MissingSecret()
        secret = await metadata.load_secret()
        if secret is None:
            raise MissingSecret()
        self.metadata, self.secret = metadata, secret

    async def process(self) -> None:
        if not self.continue_burn:
            return
        if not self.secret.passphrase_matches(self.passphrase):
            await self.limit_action("failed_passphrase")
            raise FormError("Double check that passphrase")

        if not await self.secret.burned():
            raise MissingSecret()
        self.burned = True
        self.metadata = await Metadata.load(self.redis, self.key) or self.metadata
        logger.info("secret.burned", metadata=self.metadata.shortkey, session=self.sess.short_identifier)

    def success_data(self) -> dict[str, Any]:
        return {
            "record": self.metadata.safe_dump(),
            "details": {"burned": self.burned},
        }
