"""Asaas Client — thin async wrapper over the Asaas v3 REST API (customers, payments, subscriptions).

Invariants:
    - Mock mode when no API key is configured or mock is forced: no network, synthetic ids
      ("cus_", "pay_", "sub_" + 12 hex chars)
    - get_payment returns None on 404 (payment removed at the provider)
    - List endpoints follow offset/limit pagination until hasMore is false
    - Every other failure raises PartnerAPIError (core/errors.py)

Design Decisions:
    - Request bodies use the provider's field names: services build them, the client
      only transports them
    - transport injectable: tests use httpx.MockTransport instead of patching
"""

import logging
import uuid
from typing import Any

import httpx

from finnza.core.errors import PartnerAPIError

logger = logging.getLogger(__name__)

PARTNER = "Asaas"
PAGE_SIZE = 100
MOCK_BARCODE = "34191.09008 01234.567890 12345.678901 2 12345678901234"


def _mock_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class AsaasClient:
    """Payment gateway backed by Asaas."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://sandbox.asaas.com/api/v3",
        mock_enabled: bool = False,
        timeout_seconds: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._mock = mock_enabled or not api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "access_token": api_key,
                "Content-Type": "application/json",
                "User-Agent": "finnza-backoffice",
            },
            timeout=timeout_seconds,
            transport=transport,
        )
        if self._mock:
            logger.warning("Asaas client running in MOCK mode")

    @property
    def mock_enabled(self) -> bool:
        return self._mock

    async def aclose(self) -> None:
        await self._client.aclose()

    # ─── Customers ──────────────────────────────────────────────

    async def find_customer_by_document(self, document: str) -> str | None:
        if self._mock:
            return None
        data = await self._request("GET", "/customers", params={"cpfCnpj": document})
        items = data.get("data") or []
        return items[0]["id"] if items else None

    async def create_customer(self, customer: dict[str, Any]) -> str:
        """Create the customer unless one with the same document already exists."""
        if self._mock:
            return _mock_id("cus")
        document = customer.get("cpfCnpj")
        if document:
            existing = await self.find_customer_by_document(document)
            if existing:
                logger.info(f"Reusing Asaas customer {existing}")
                return existing
        data = await self._request("POST", "/customers", json=customer)
        return data["id"]

    async def get_customer(self, customer_id: str) -> dict | None:
        if self._mock:
            return None
        return await self._request(
            "GET", f"/customers/{customer_id}", allow_not_found=True,
        )

    # ─── Payments & Subscriptions ───────────────────────────────

    async def create_payment(self, payment: dict[str, Any]) -> dict:
        if self._mock:
            payment_id = _mock_id("pay")
            return {
                "id": payment_id,
                "customer": payment.get("customer"),
                "value": payment.get("value"),
                "dueDate": payment.get("dueDate"),
                "status": "PENDING",
                "invoiceUrl": f"https://sandbox.asaas.com/invoice/{payment_id}",
                "bankSlipUrl": None,
                "barcode": MOCK_BARCODE,
            }
        body = {"billingType": "BOLETO", **payment}
        return await self._request("POST", "/payments", json=body)

    async def create_subscription(self, subscription: dict[str, Any]) -> dict:
        if self._mock:
            return {
                "id": _mock_id("sub"),
                "customer": subscription.get("customer"),
                "value": subscription.get("value"),
                "nextDueDate": subscription.get("nextDueDate"),
                "cycle": "MONTHLY",
                "status": "ACTIVE",
            }
        body = {"billingType": "BOLETO", "cycle": "MONTHLY", **subscription}
        return await self._request("POST", "/subscriptions", json=body)

    async def get_payment(self, payment_id: str) -> dict | None:
        if self._mock:
            return {"id": payment_id, "status": "PENDING", "value": 100.00}
        return await self._request(
            "GET", f"/payments/{payment_id}", allow_not_found=True,
        )

    async def list_subscriptions(self) -> list[dict]:
        if self._mock:
            return []
        return await self._paginate("/subscriptions")

    async def list_payments(self, subscription_id: str | None = None) -> list[dict]:
        if self._mock:
            return []
        params = {"subscription": subscription_id} if subscription_id else None
        return await self._paginate("/payments", params)

    # ─── Transport ──────────────────────────────────────────────

    async def _paginate(self, path: str, params: dict | None = None) -> list[dict]:
        items: list[dict] = []
        offset = 0
        while True:
            data = await self._request(
                "GET", path,
                params={**(params or {}), "offset": offset, "limit": PAGE_SIZE},
            )
            page = data.get("data") or []
            items.extend(page)
            if not data.get("hasMore") or not page:
                return items
            offset += PAGE_SIZE

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: dict | None = None,
        allow_not_found: bool = False,
    ) -> dict | None:
        try:
            response = await self._client.request(
                method, path, params=params, json=json,
            )
        except httpx.HTTPError as e:
            logger.error(f"Asaas {method} {path} failed: {e}")
            raise PartnerAPIError(PARTNER, f"{method} {path} unreachable")
        if allow_not_found and response.status_code == 404:
            return None
        if response.is_error:
            logger.error(
                f"Asaas {method} {path} returned {response.status_code}: {response.text[:500]}",
                extra={"partner": PARTNER},
            )
            raise PartnerAPIError(
                PARTNER,
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()
