"""Asaas Import — back-fills local contracts from provider subscriptions and payments.

Invariants:
    - Idempotent: known subscription ids and payment ids are never imported twice
    - Subscriptions become RECORRENTE contracts; each subscription payment becomes an
      installment charge ordered by due date
    - Payments without a subscription become UNICO contracts with a single charge
    - Imported amounts are at least 0.01 (provider may report 0 for courtesy items)
    - Mock provider imports nothing

Design Decisions:
    - One commit per imported contract; a record that fails (provider or database error)
      is rolled back on its own, so a client it created never rides along with the next
      contract, and the import moves on
    - Client matched by provider customer id, then by document, else created from the
      provider customer record
"""

import calendar
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.domain_types import ContractStatus, PaymentType
from finnza.core.errors import FinnzaError
from finnza.core.repository_protocols import PaymentGateway
from finnza.core.status_reconciler import (
    is_paid, map_provider_status, payment_date_from, recompute_contract_status,
)
from finnza.models.charge import Charge
from finnza.models.client import Client
from finnza.models.contract import Contract
from finnza.repositories.charges import ChargeRepository
from finnza.repositories.clients import ClientRepository
from finnza.repositories.contracts import ContractRepository

logger = logging.getLogger(__name__)

_MIN_AMOUNT = Decimal("0.01")


def _amount(raw, default: Decimal = _MIN_AMOUNT) -> Decimal:
    try:
        value = Decimal(str(raw)) if raw is not None else default
    except InvalidOperation:
        value = default
    return max(value, _MIN_AMOUNT).quantize(Decimal("0.01"))


def _parse_date(raw) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        return None


def one_month_after(day: date) -> date:
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class AsaasImporter:
    def __init__(
        self,
        db: AsyncSession,
        gateway: PaymentGateway,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.gateway = gateway
        self.today = today
        self.clients = ClientRepository(db)
        self.contracts = ContractRepository(db)
        self.charges = ChargeRepository(db)

    async def import_all(self) -> int:
        """Import every unknown subscription and standalone payment. Returns contracts created."""
        if self.gateway.mock_enabled:
            logger.warning("Provider in mock mode, nothing to import")
            return 0

        known_subscriptions = await self.contracts.known_subscription_ids()
        known_payments = await self.charges.known_payment_ids()
        imported = 0

        for subscription in await self.gateway.list_subscriptions():
            sub_id = subscription.get("id")
            if not sub_id or sub_id in known_subscriptions:
                continue
            imported_sub = await self._isolated(
                f"subscription {sub_id}", {"subscription_id": sub_id},
                lambda: self._import_subscription(subscription, known_payments),
            )
            if imported_sub:
                known_subscriptions.add(sub_id)
                imported += 1

        for payment in await self.gateway.list_payments():
            payment_id = payment.get("id")
            if not payment_id or payment.get("subscription") or payment_id in known_payments:
                continue
            imported_payment = await self._isolated(
                f"payment {payment_id}", {"payment_id": payment_id},
                lambda: self._import_payment(payment),
            )
            if imported_payment:
                known_payments.add(payment_id)
                imported += 1

        logger.info(f"Provider import finished: {imported} contracts created")
        return imported

    async def _isolated(
        self, label: str, extra: dict, step: Callable[[], Awaitable[bool]],
    ) -> bool:
        try:
            return await step()
        except (FinnzaError, SQLAlchemyError) as e:
            await self.db.rollback()
            message = e.message if isinstance(e, FinnzaError) else str(e)
            logger.error(f"Skipping {label}: {message}", extra=extra)
            return False

    async def _import_subscription(self, subscription: dict, known_payments: set[str]) -> bool:
        sub_id = subscription["id"]
        client = await self._resolve_client(subscription.get("customer"))
        if client is None:
            return False
        payments = await self.gateway.list_payments(subscription_id=sub_id)

        installment = _amount(subscription.get("value"))
        count = len(payments) or 1
        payments = sorted(payments, key=lambda p: str(p.get("dueDate") or ""))
        due = _parse_date(subscription.get("nextDueDate"))
        if due is None and payments:
            due = _parse_date(payments[0].get("dueDate"))
        title = (subscription.get("description") or "").strip() or (
            f"Contrato Recorrente - {client.company_name}"
        )

        contract = Contract(
            title=title[:200],
            description=f"Imported from Asaas: {count}x of {installment}",
            client_id=client.id,
            amount=installment * count,
            recurring_amount=installment,
            due_date=due or one_month_after(self.today()),
            status=ContractStatus.PENDENTE.value,
            payment_type=PaymentType.RECORRENTE.value,
            asaas_subscription_id=sub_id,
        )
        contract.client = client
        contract.charges = []
        taken: set[str] = set()
        for number, payment in enumerate(payments, start=1):
            if payment.get("id") in known_payments or payment.get("id") in taken:
                continue
            charge = self._charge_from(payment, installment, number)
            if charge is not None:
                contract.charges.append(charge)
                taken.add(payment["id"])
        await self._save(contract)
        known_payments.update(taken)
        logger.info(
            f"Imported subscription {sub_id} as contract {contract.id}",
            extra={"subscription_id": sub_id, "contract_id": contract.id},
        )
        return True

    async def _import_payment(self, payment: dict) -> bool:
        payment_id = payment["id"]
        client = await self._resolve_client(payment.get("customer"))
        if client is None:
            return False

        charge = self._charge_from(payment, _amount(payment.get("value")), 1)
        if charge is None:
            return False
        title = (payment.get("description") or "").strip() or (
            f"Contrato - {client.company_name}"
        )
        contract = Contract(
            title=title[:200],
            description="Imported from Asaas",
            client_id=client.id,
            amount=charge.amount,
            due_date=charge.due_date,
            status=ContractStatus.PENDENTE.value,
            payment_type=PaymentType.UNICO.value,
        )
        contract.client = client
        contract.charges = [charge]
        await self._save(contract)
        logger.info(
            f"Imported payment {payment_id} as contract {contract.id}",
            extra={"payment_id": payment_id, "contract_id": contract.id},
        )
        return True

    def _charge_from(self, payment: dict, default_amount: Decimal, number: int) -> Charge | None:
        due = _parse_date(payment.get("dueDate"))
        if due is None:
            logger.warning(
                "Provider payment without dueDate skipped",
                extra={"payment_id": payment.get("id")},
            )
            return None
        status = map_provider_status(payment.get("status"))
        paid_on = None
        if is_paid(status):
            paid_on = payment_date_from(
                payment.get("paymentDate") or payment.get("clientPaymentDate"),
                self.today(),
            )
        return Charge(
            amount=_amount(payment.get("value"), default_amount),
            due_date=due,
            payment_date=paid_on,
            status=status.value,
            asaas_payment_id=payment.get("id"),
            payment_link=payment.get("invoiceUrl") or payment.get("bankSlipUrl"),
            barcode=payment.get("identificationField") or payment.get("barcode"),
            installment_number=payment.get("installmentNumber") or number,
        )

    async def _resolve_client(self, customer_id: str | None) -> Client | None:
        if not customer_id:
            logger.warning("Provider record without customer skipped")
            return None
        client = await self.clients.find_by_asaas_customer_id(customer_id)
        if client:
            return client

        customer = await self.gateway.get_customer(customer_id)
        if not customer:
            logger.warning(f"Provider customer {customer_id} not found")
            return None
        document = "".join(ch for ch in (customer.get("cpfCnpj") or "") if ch.isdigit())
        if document:
            client = await self.clients.find_by_document(document)
            if client:
                if not client.asaas_customer_id:
                    client.asaas_customer_id = customer_id
                return client

        client = Client(
            company_name=(customer.get("name") or f"Cliente {customer_id}")[:200],
            document=document or customer_id[:20],
            billing_email=customer.get("email"),
            billing_phone=customer.get("mobilePhone") or customer.get("phone"),
            postal_code=customer.get("postalCode"),
            full_address=customer.get("address"),
            asaas_customer_id=customer_id,
        )
        self.db.add(client)
        await self.db.flush()
        return client

    async def _save(self, contract: Contract) -> None:
        contract.status = recompute_contract_status(
            contract.status, contract.due_date, contract.charges, self.today(),
        ).value
        self.db.add(contract)
        await self.db.commit()
