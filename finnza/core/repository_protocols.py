"""Boundary Protocols — row shapes and partner gateways seen by core and services.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE ChargeLike/ContractLike are never async —
      services orchestrate the async calls around the pure logic
    - Partner gateways return plain dicts in the provider's own field names
      (camelCase); translation to domain types happens in services
"""

from datetime import date
from decimal import Decimal
from typing import Any, Protocol, Sequence


class ChargeLike(Protocol):
    """Structural contract for billing items fed to the pure status rules."""
    status: str
    due_date: date | None
    payment_date: date | None


class ContractLike(Protocol):
    """Structural contract for contracts fed to category and filter rules."""
    status: str | None
    due_date: date | None
    amount: Decimal
    charges: Sequence[ChargeLike]


# ─── Partner gateways ───────────────────────────────────────────

class PaymentGateway(Protocol):
    """Payments/subscriptions provider (Asaas) — implemented by infrastructure/asaas_client.py."""

    @property
    def mock_enabled(self) -> bool: ...
    async def find_customer_by_document(self, document: str) -> str | None: ...
    async def create_customer(self, customer: dict[str, Any]) -> str: ...
    async def get_customer(self, customer_id: str) -> dict | None: ...
    async def create_payment(self, payment: dict[str, Any]) -> dict: ...
    async def create_subscription(self, subscription: dict[str, Any]) -> dict: ...
    async def get_payment(self, payment_id: str) -> dict | None: ...
    async def list_subscriptions(self) -> list[dict]: ...
    async def list_payments(self, subscription_id: str | None = None) -> list[dict]: ...


class LedgerGateway(Protocol):
    """ERP bookkeeping partner (BomControle) — implemented by infrastructure/bomcontrole_client.py."""

    @property
    def mock_enabled(self) -> bool: ...
    async def search_companies(self, term: str | None = None) -> list[dict]: ...
    async def search_movements(self, params: dict[str, Any]) -> dict: ...


class CrmGateway(Protocol):
    """CRM webhook proxy (Clint) — implemented by infrastructure/clint_client.py."""
    async def forward(self, contact: dict[str, Any]) -> dict: ...
