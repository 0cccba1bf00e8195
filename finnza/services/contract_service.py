"""Contract Service — contract lifecycle, provider billing, sync and dashboard totals.

Invariants:
    - Contract creation never fails because of the payment provider: provider errors
      are logged and the contract is kept without external links
    - UNICO contracts get exactly one charge at creation; RECORRENTE contracts get a
      provider subscription id and receive charges through webhooks/import
    - Every read path recomputes status from charges (status_reconciler) and persists
      the result when it changed
    - Provider sync never overwrites local state when the provider no longer knows a payment

Design Decisions:
    - Mock provider skips the per-charge lookup on sync: its canned PENDING answer would
      erase statuses delivered by webhooks
    - Complex search filters run in memory after a narrowing SQL query: the filter set
      mixes contract and charge fields and the data volume per tenant is small
"""

import logging
from datetime import date
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.contract_category import classify_contract, summarize_categories
from finnza.core.contract_filters import ContractFilter, matches, paginate
from finnza.core.domain_types import ContractStatus, PaymentType
from finnza.core.errors import FinnzaError, ResourceNotFoundError
from finnza.core.repository_protocols import PaymentGateway
from finnza.core.status_reconciler import (
    is_known_provider_status,
    is_paid,
    map_provider_status,
    recompute_contract_status,
    settle_payment_date,
)
from finnza.models.charge import Charge
from finnza.models.contract import Contract
from finnza.repositories.contracts import ContractRepository
from finnza.schemas.contract import ContractCreate, ContractResponse
from finnza.services.client_service import ClientService

logger = logging.getLogger(__name__)


def _money(value) -> float:
    return float(value)


def provider_payment_body(contract: Contract, customer_id: str, body: ContractCreate) -> dict:
    """Asaas one-off payment payload, including optional interest/fine/discount."""
    payment: dict = {
        "customer": customer_id,
        "billingType": body.billing_type or "BOLETO",
        "value": _money(contract.amount),
        "dueDate": contract.due_date.isoformat(),
        "description": contract.title,
    }
    if body.interest_per_month:
        payment["interest"] = {"value": _money(body.interest_per_month)}
    if body.late_fine_percent:
        payment["fine"] = {"value": _money(body.late_fine_percent), "type": "PERCENTAGE"}
    discount = None
    if body.discount_percent:
        discount = {"value": _money(body.discount_percent), "type": "PERCENTAGE"}
    elif body.discount_fixed:
        discount = {"value": _money(body.discount_fixed), "type": "FIXED"}
    if discount is not None:
        if body.discount_days_before_due is not None:
            discount["dueDateLimitDays"] = body.discount_days_before_due
        payment["discount"] = discount
    if body.installment_count:
        payment["installmentCount"] = body.installment_count
    return payment


class ContractService:
    def __init__(
        self,
        db: AsyncSession,
        gateway: PaymentGateway,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.gateway = gateway
        self.today = today
        self.contracts = ContractRepository(db)
        self.client_service = ClientService(db)

    # ─── Create ─────────────────────────────────────────────────

    async def create(self, body: ContractCreate) -> Contract:
        client = await self.client_service.find_or_create(body.client)
        contract = Contract(
            title=body.title,
            description=body.description,
            content=body.content,
            client_id=client.id,
            amount=body.amount,
            recurring_amount=body.recurring_amount,
            down_payment=body.down_payment,
            due_date=body.due_date,
            status=ContractStatus.PENDENTE.value,
            payment_type=body.payment_type.value,
            service=body.service,
            contract_start=body.contract_start,
            recurrence_start=body.recurrence_start,
            sale_date=body.sale_date,
            whatsapp=body.whatsapp,
            contract_link=body.contract_link,
            project=body.project,
        )
        contract.client = client
        contract.charges = []
        self.db.add(contract)
        await self.db.flush()

        customer_id = await self.client_service.ensure_provider_customer(
            client, self.gateway,
        )
        if customer_id:
            if body.payment_type == PaymentType.UNICO:
                await self._bill_once(contract, customer_id, body)
            else:
                await self._subscribe(contract, customer_id, body)

        contract.status = recompute_contract_status(
            contract.status, contract.due_date, contract.charges, self.today(),
        ).value
        await self.db.commit()
        logger.info(
            f"Contract {contract.id} created ({contract.payment_type})",
            extra={"contract_id": contract.id},
        )
        return contract

    async def _bill_once(
        self, contract: Contract, customer_id: str, body: ContractCreate,
    ) -> None:
        try:
            payment = await self.gateway.create_payment(
                provider_payment_body(contract, customer_id, body),
            )
        except FinnzaError as e:
            logger.error(
                f"Provider payment not created for contract {contract.id}: {e.message}",
                extra={"contract_id": contract.id, "error_code": e.code},
            )
            return
        contract.charges.append(Charge(
            amount=contract.amount,
            due_date=contract.due_date,
            status=map_provider_status(payment.get("status")).value,
            asaas_payment_id=payment.get("id"),
            payment_link=payment.get("invoiceUrl") or payment.get("bankSlipUrl"),
            barcode=payment.get("barcode") or payment.get("identificationField"),
            installment_number=1,
        ))

    async def _subscribe(
        self, contract: Contract, customer_id: str, body: ContractCreate,
    ) -> None:
        start = body.recurrence_start or body.due_date
        value = body.recurring_amount or body.amount
        try:
            subscription = await self.gateway.create_subscription({
                "customer": customer_id,
                "value": _money(value),
                "nextDueDate": start.isoformat(),
                "description": contract.title,
            })
        except FinnzaError as e:
            logger.error(
                f"Provider subscription not created for contract {contract.id}: {e.message}",
                extra={"contract_id": contract.id, "error_code": e.code},
            )
            return
        contract.asaas_subscription_id = subscription.get("id")

    # ─── Read ───────────────────────────────────────────────────

    async def get(self, contract_id: int, sync: bool = True) -> Contract:
        contract = await self.contracts.get(contract_id)
        if not contract:
            raise ResourceNotFoundError("Contract", str(contract_id))
        if sync:
            await self.sync_with_provider(contract)
        return contract

    async def list_page(self, page: int, size: int) -> tuple[list[Contract], int]:
        items, total = await self.contracts.list_page(size, page * size)
        await self._refresh_statuses(items)
        return items, total

    async def by_client(self, client_id: int) -> list[Contract]:
        items = await self.contracts.by_client(client_id)
        await self._refresh_statuses(items)
        return items

    async def by_status(self, status: ContractStatus) -> list[Contract]:
        items = await self.contracts.by_status(status.value)
        await self._refresh_statuses(items)
        return [c for c in items if c.status == status]

    async def search(
        self, flt: ContractFilter, page: int, size: int,
    ) -> tuple[list[Contract], int]:
        if flt.client_id is not None or flt.term:
            candidates = await self.contracts.search(flt.client_id, flt.term)
        else:
            candidates = await self.contracts.list_active()
        await self._refresh_statuses(candidates)
        return paginate([c for c in candidates if matches(c, flt)], page, size)

    async def category_totals(self) -> dict:
        contracts = await self.contracts.list_active()
        return summarize_categories(contracts, self.today()).to_dict()

    def to_response(self, contract: Contract) -> ContractResponse:
        category = classify_contract(
            contract.status, contract.due_date, list(contract.charges), self.today(),
        )
        return ContractResponse.model_validate(contract).model_copy(
            update={"category": category},
        )

    # ─── Write ──────────────────────────────────────────────────

    async def soft_delete(self, contract_id: int) -> None:
        contract = await self.contracts.get(contract_id)
        if not contract:
            raise ResourceNotFoundError("Contract", str(contract_id))
        contract.soft_delete()
        await self.db.commit()
        logger.info(
            f"Contract {contract_id} soft-deleted", extra={"contract_id": contract_id},
        )

    async def sync_with_provider(self, contract: Contract) -> Contract:
        """Pull each charge's provider status, then recompute the contract."""
        today = self.today()
        if not self.gateway.mock_enabled:
            for charge in contract.charges:
                await self._sync_charge(contract, charge, today)
        contract.status = recompute_contract_status(
            contract.status, contract.due_date, contract.charges, today,
        ).value
        await self.db.commit()
        return contract

    async def _sync_charge(self, contract: Contract, charge: Charge, today: date) -> None:
        if not charge.asaas_payment_id:
            return
        try:
            payment = await self.gateway.get_payment(charge.asaas_payment_id)
        except FinnzaError as e:
            logger.warning(
                f"Provider lookup failed, keeping local charge state: {e.message}",
                extra={"contract_id": contract.id, "payment_id": charge.asaas_payment_id},
            )
            return
        if payment is None:
            logger.info(
                "Payment unknown to provider, keeping local charge state",
                extra={"contract_id": contract.id, "payment_id": charge.asaas_payment_id},
            )
            return
        raw_status = payment.get("status")
        if not is_known_provider_status(raw_status):
            logger.warning(
                f"Unknown provider status '{raw_status}', treating as PENDING",
                extra={"payment_id": charge.asaas_payment_id},
            )
        new_status = map_provider_status(raw_status)
        charge.status = new_status.value
        if is_paid(new_status):
            charge.payment_date = settle_payment_date(
                charge.payment_date,
                payment.get("paymentDate") or payment.get("clientPaymentDate"),
                today,
            )

    async def sync_all(self) -> tuple[int, int]:
        synced = failed = 0
        for contract in await self.contracts.list_active():
            try:
                await self.sync_with_provider(contract)
                synced += 1
            except FinnzaError as e:
                failed += 1
                logger.error(
                    f"Sync failed for contract {contract.id}: {e.message}",
                    extra={"contract_id": contract.id, "error_code": e.code},
                )
        logger.info(f"Provider sync finished: {synced} synced, {failed} failed")
        return synced, failed

    async def _refresh_statuses(self, contracts: list[Contract]) -> None:
        today = self.today()
        changed = False
        for contract in contracts:
            new_status = recompute_contract_status(
                contract.status, contract.due_date, contract.charges, today,
            ).value
            if new_status != contract.status:
                contract.status = new_status
                changed = True
        if changed:
            await self.db.commit()
