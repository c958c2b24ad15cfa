"""Dashboard use cases."""

from typing import Any

from onetime.platform.exceptions import MissingSecret
from onetime.platform.models import Metadata

from .base import Logic


class Homepage(Logic):
    async def raise_concerns(self) -> None:
        await self.limit_action("dashboard")

    def success_data(self) -> dict[str, Any]:
        return {
            "custid": self.cust.custid,
            "authenticated": self.context.authenticated,
            "record": None if self.cust.is_anonymous() else self.cust.safe_dump(),
        }


class ShowRecentMetadata(Logic):
    metadata: list[Metadata] | None = None

    async def raise_concerns(self) -> None:
        await self.limit_action("show_metadata")
        # Anonymous visitors have no receipt list at all.
        if self.cust.is_anonymous():
            raise MissingSecret("No recent secrets")
        self.metadata = await self.cust.metadata_list()

    def success_data(self) -> dict[str, Any]:
        records = [m.safe_dump() for m in self.metadata or []]
        return {
            "custid": self.cust.custid,
            "records": records,
            "count": len(records),
        }
