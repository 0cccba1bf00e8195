"""Fake Partner Gateways — in-memory stand-ins for the payment provider and the ledger.

Invariants:
    - FakePaymentGateway satisfies PaymentGateway (core/repository_protocols.py)
    - Every call is recorded in `calls` as (method, argument) for assertions
    - Provider state lives in plain dicts that tests seed directly

Design Decisions:
    - Flat classes (no inheritance): simple, explicit, easy to debug
    - fail_with lets a test make the next matching call raise a FinnzaError
"""

from typing import Any

from finnza.core.errors import PartnerAPIError


class FakePaymentGateway:
    def __init__(self, mock_enabled: bool = False):
        self._mock = mock_enabled
        self.calls: list[tuple[str, Any]] = []
        self.customers: dict[str, dict] = {}
        self.payments: dict[str, dict] = {}
        self.subscriptions: dict[str, dict] = {}
        self.fail_with: dict[str, Exception] = {}
        self._seq = 0

    @property
    def mock_enabled(self) -> bool:
        return self._mock

    def _next(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}_{self._seq:012d}"

    def _maybe_fail(self, method: str) -> None:
        error = self.fail_with.get(method)
        if error is not None:
            raise error

    async def find_customer_by_document(self, document: str) -> str | None:
        self.calls.append(("find_customer_by_document", document))
        for customer_id, customer in self.customers.items():
            if customer.get("cpfCnpj") == document:
                return customer_id
        return None

    async def create_customer(self, customer: dict[str, Any]) -> str:
        self.calls.append(("create_customer", customer))
        self._maybe_fail("create_customer")
        existing = await self.find_customer_by_document(customer.get("cpfCnpj", ""))
        if existing:
            return existing
        customer_id = self._next("cus")
        self.customers[customer_id] = {"id": customer_id, **customer}
        return customer_id

    async def get_customer(self, customer_id: str) -> dict | None:
        self.calls.append(("get_customer", customer_id))
        return self.customers.get(customer_id)

    async def create_payment(self, payment: dict[str, Any]) -> dict:
        self.calls.append(("create_payment", payment))
        self._maybe_fail("create_payment")
        payment_id = self._next("pay")
        created = {
            "id": payment_id,
            "status": "PENDING",
            "invoiceUrl": f"https://pay.example/{payment_id}",
            "barcode": "0000.1111",
            **payment,
        }
        self.payments[payment_id] = created
        return created

    async def create_subscription(self, subscription: dict[str, Any]) -> dict:
        self.calls.append(("create_subscription", subscription))
        self._maybe_fail("create_subscription")
        subscription_id = self._next("sub")
        created = {"id": subscription_id, "status": "ACTIVE", **subscription}
        self.subscriptions[subscription_id] = created
        return created

    async def get_payment(self, payment_id: str) -> dict | None:
        self.calls.append(("get_payment", payment_id))
        self._maybe_fail("get_payment")
        return self.payments.get(payment_id)

    async def list_subscriptions(self) -> list[dict]:
        self.calls.append(("list_subscriptions", None))
        return list(self.subscriptions.values())

    async def list_payments(self, subscription_id: str | None = None) -> list[dict]:
        self.calls.append(("list_payments", subscription_id))
        if subscription_id is None:
            return list(self.payments.values())
        return [
            p for p in self.payments.values()
            if p.get("subscription") == subscription_id
        ]


class FakeLedger:
    """LedgerGateway double; `responses` feed search_movements in order."""

    def __init__(self, mock_enabled: bool = False):
        self._mock = mock_enabled
        self.calls: list[tuple[str, Any]] = []
        self.companies: list[dict] = [{"Id": 7, "Nome": "Acme Ltda"}]
        self.movements: dict = {"Itens": [], "TotalItens": 0}
        self.error: Exception | None = None

    @property
    def mock_enabled(self) -> bool:
        return self._mock

    async def search_companies(self, term: str | None = None) -> list[dict]:
        self.calls.append(("search_companies", term))
        if self.error is not None:
            raise self.error
        return list(self.companies)

    async def search_movements(self, params: dict[str, Any]) -> dict:
        self.calls.append(("search_movements", params))
        if self.error is not None:
            raise self.error
        return self.movements


def partner_down(partner: str = "Asaas") -> PartnerAPIError:
    return PartnerAPIError(partner, "unreachable")
