"""Webhook Reconciler — applies payment-provider notifications to local charges and contracts.

Invariants:
    - Unknown payment/subscription ids are logged and skipped, never created
    - Charge status always goes through map_provider_status (unknown -> PENDING + warning)
    - A paid charge takes paymentDate when sent; otherwise it keeps its date, else today
    - Contract status after a payment comes from resolve_payment_event; after a
      subscription change from resolve_subscription_event
    - A payload may carry both objects; each is handled independently, one commit total
"""

import logging
from datetime import date
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.status_reconciler import (
    is_known_provider_status,
    is_paid,
    map_provider_status,
    resolve_payment_event,
    resolve_subscription_event,
    settle_payment_date,
)
from finnza.repositories.charges import ChargeRepository
from finnza.repositories.contracts import ContractRepository
from finnza.schemas.webhook import AsaasWebhookPayload, WebhookAck

logger = logging.getLogger(__name__)


class WebhookReconciler:
    def __init__(self, db: AsyncSession, today: Callable[[], date] = date.today):
        self.db = db
        self.today = today
        self.charges = ChargeRepository(db)
        self.contracts = ContractRepository(db)

    async def handle(self, payload: AsaasWebhookPayload) -> WebhookAck:
        event = payload.event
        logger.info(f"Provider webhook received: {event}", extra={"event": event})
        ack = WebhookAck(event=event)

        if payload.payment:
            charge_updated, contract_updated = await self._apply_payment(
                event, payload.payment,
            )
            ack.charge_updated = charge_updated
            ack.contract_updated = contract_updated
        if payload.subscription:
            if await self._apply_subscription(event, payload.subscription):
                ack.contract_updated = True

        if ack.charge_updated or ack.contract_updated:
            await self.db.commit()
        return ack

    async def _apply_payment(self, event: str | None, payment: dict) -> tuple[bool, bool]:
        payment_id = payment.get("id")
        if not payment_id:
            logger.warning("Payment notification without id", extra={"event": event})
            return False, False
        charge = await self.charges.find_by_payment_id(payment_id)
        if charge is None:
            logger.warning(
                f"Payment {payment_id} not found locally, notification skipped",
                extra={"payment_id": payment_id, "event": event},
            )
            return False, False

        raw_status = payment.get("status")
        if not is_known_provider_status(raw_status):
            logger.warning(
                f"Unknown provider status '{raw_status}', treating as PENDING",
                extra={"payment_id": payment_id, "event": event},
            )
        new_status = map_provider_status(raw_status)
        today = self.today()
        charge.status = new_status.value
        if is_paid(new_status):
            charge.payment_date = settle_payment_date(
                charge.payment_date, payment.get("paymentDate"), today,
            )
        logger.info(
            f"Charge {charge.id} -> {new_status.value}",
            extra={"charge_id": charge.id, "payment_id": payment_id},
        )

        contract = await self.contracts.get(charge.contract_id, include_deleted=True)
        if contract is None:
            return True, False
        previous = contract.status
        contract.status = resolve_payment_event(
            new_status, contract.status, contract.due_date, contract.charges, today,
        ).value
        if contract.status != previous:
            logger.info(
                f"Contract {contract.id}: {previous} -> {contract.status}",
                extra={"contract_id": contract.id, "payment_id": payment_id},
            )
        return True, contract.status != previous

    async def _apply_subscription(self, event: str | None, subscription: dict) -> bool:
        subscription_id = subscription.get("id")
        if not subscription_id:
            logger.warning("Subscription notification without id", extra={"event": event})
            return False
        contract = await self.contracts.find_by_subscription_id(subscription_id)
        if contract is None:
            logger.warning(
                f"Subscription {subscription_id} not found locally, notification skipped",
                extra={"subscription_id": subscription_id, "event": event},
            )
            return False

        outcome = resolve_subscription_event(
            event,
            subscription.get("status"),
            contract.status,
            contract.due_date,
            contract.charges,
            self.today(),
        )
        previous = (contract.status, contract.signature_status)
        contract.status = outcome.status.value
        if outcome.signature_status is not None:
            contract.signature_status = outcome.signature_status.value
        changed = (contract.status, contract.signature_status) != previous
        if changed:
            logger.info(
                f"Contract {contract.id} -> {contract.status} (subscription {subscription_id})",
                extra={"contract_id": contract.id, "subscription_id": subscription_id},
            )
        return changed
