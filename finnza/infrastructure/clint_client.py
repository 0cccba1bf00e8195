"""Clint Client — forwards landing-page contacts to the configured Clint webhook."""

import logging
from typing import Any

import httpx

from finnza.core.errors import PartnerAPIError, PartnerNotConfiguredError

logger = logging.getLogger(__name__)

PARTNER = "Clint"


class ClintClient:
    def __init__(
        self,
        webhook_url: str,
        timeout_seconds: int = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_url = webhook_url
        self._client = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def forward(self, contact: dict[str, Any]) -> dict:
        if not self.webhook_url:
            raise PartnerNotConfiguredError(PARTNER, "CLINT_WEBHOOK_URL")
        try:
            response = await self._client.post(self.webhook_url, json=contact)
        except httpx.HTTPError as e:
            logger.error(f"Clint webhook unreachable: {e}")
            raise PartnerAPIError(PARTNER, "webhook unreachable")
        if response.is_error:
            logger.error(
                f"Clint webhook returned {response.status_code}",
                extra={"partner": PARTNER},
            )
            raise PartnerAPIError(
                PARTNER, f"webhook returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError:
            body = {"raw": response.text}
        return {"success": True, "response": body}
