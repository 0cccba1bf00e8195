"""Status Reconciler — maps provider status vocabulary onto local charge/contract states.

Invariants:
    - map_provider_status is total: unknown or missing values fall back to PENDING
    - A CANCELADO contract is never reopened by a recompute
    - Delinquent charges (OVERDUE, DUNNING_REQUESTED, CHARGEBACK_REQUESTED) dominate
      the recompute-from-children result on payment events
    - All functions take `today` explicitly — no clock reads in core

Design Decisions:
    - Lookup table over if/elif chain: the alias list is the whole policy and stays readable
    - RECEIVED_IN_CASH_UNDONE counts as paid, matching how the back-office has always
      reported it; changing it would silently move historical contracts out of PAGO
    - Subscription ACTIVE on a PENDENTE contract yields EM_DIA plus signature ASSINADO
      (ASSINADO is a signature state, not a contract state)
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from finnza.core.domain_types import ChargeStatus, ContractStatus, SignatureStatus
from finnza.core.repository_protocols import ChargeLike


_PROVIDER_ALIASES: dict[str, ChargeStatus] = {
    "RECEIVED": ChargeStatus.RECEIVED,
    "CONFIRMED": ChargeStatus.RECEIVED,
    "RECEIVED_IN_CASH": ChargeStatus.RECEIVED,
    "DUNNING_RECEIVED": ChargeStatus.DUNNING_RECEIVED,
    "PENDING": ChargeStatus.PENDING,
    "AWAITING_RISK_ANALYSIS": ChargeStatus.AWAITING_RISK_ANALYSIS,
    "OVERDUE": ChargeStatus.OVERDUE,
    "DUNNING_REQUESTED": ChargeStatus.DUNNING_REQUESTED,
    "REFUNDED": ChargeStatus.REFUNDED,
    "REFUND_REQUESTED": ChargeStatus.REFUNDED,
    "REFUND_IN_PROGRESS": ChargeStatus.REFUNDED,
    "CHARGEBACK_REQUESTED": ChargeStatus.CHARGEBACK_REQUESTED,
    "CHARGEBACK_DISPUTE": ChargeStatus.CHARGEBACK_DISPUTE,
    "AWAITING_CHARGEBACK_REVERSAL": ChargeStatus.AWAITING_CHARGEBACK_REVERSAL,
    "RECEIVED_IN_CASH_UNDONE": ChargeStatus.RECEIVED_IN_CASH_UNDONE,
}

PAID_STATUSES = frozenset({
    ChargeStatus.RECEIVED,
    ChargeStatus.RECEIVED_IN_CASH_UNDONE,
    ChargeStatus.DUNNING_RECEIVED,
})

DELINQUENT_STATUSES = frozenset({
    ChargeStatus.OVERDUE,
    ChargeStatus.DUNNING_REQUESTED,
    ChargeStatus.CHARGEBACK_REQUESTED,
})

SUBSCRIPTION_DELETED_EVENT = "SUBSCRIPTION_DELETED"


@dataclass(frozen=True)
class SubscriptionOutcome:
    """Result of reconciling a subscription notification."""
    status: ContractStatus
    signature_status: SignatureStatus | None = None


def is_known_provider_status(raw: str | None) -> bool:
    """True when the raw value is part of the provider vocabulary (or absent)."""
    return raw is None or raw.strip().upper() in _PROVIDER_ALIASES


def map_provider_status(raw: str | None) -> ChargeStatus:
    """Normalize a provider payment status. Case-insensitive; unknown -> PENDING."""
    if raw is None:
        return ChargeStatus.PENDING
    return _PROVIDER_ALIASES.get(raw.strip().upper(), ChargeStatus.PENDING)


def _as_status(value: str | ChargeStatus | None) -> ChargeStatus | None:
    if value is None:
        return None
    try:
        return ChargeStatus(value)
    except ValueError:
        return None


def is_paid(status: str | ChargeStatus | None) -> bool:
    return _as_status(status) in PAID_STATUSES


def is_delinquent(status: str | ChargeStatus | None) -> bool:
    return _as_status(status) in DELINQUENT_STATUSES


def is_pending_past_due(charge: ChargeLike, today: date) -> bool:
    """PENDING charge whose due date has already passed."""
    return (
        _as_status(charge.status) == ChargeStatus.PENDING
        and charge.due_date is not None
        and charge.due_date < today
    )


def recompute_contract_status(
    current: str | ContractStatus | None,
    due_date: date | None,
    charges: Iterable[ChargeLike],
    today: date,
) -> ContractStatus:
    """Derive contract status from its charges. Rule order is significant."""
    current_status = ContractStatus(current) if current else ContractStatus.PENDENTE
    if current_status == ContractStatus.CANCELADO:
        return current_status

    items = list(charges)
    if not items:
        return current_status

    if all(is_paid(c.status) for c in items):
        return ContractStatus.PAGO
    if any(is_delinquent(c.status) for c in items):
        return ContractStatus.VENCIDO
    if any(is_pending_past_due(c, today) for c in items):
        return ContractStatus.VENCIDO
    if any(_as_status(c.status) == ChargeStatus.PENDING for c in items):
        return ContractStatus.EM_DIA

    if (
        due_date is not None
        and due_date < today
        and current_status != ContractStatus.PAGO
    ):
        return ContractStatus.VENCIDO
    return current_status


def resolve_payment_event(
    new_charge_status: ChargeStatus,
    current: str | ContractStatus | None,
    due_date: date | None,
    charges: Iterable[ChargeLike],
    today: date,
) -> ContractStatus:
    """Contract status after one of its charges changed.

    A delinquent charge forces VENCIDO without looking at siblings.
    """
    if current == ContractStatus.CANCELADO:
        return ContractStatus.CANCELADO
    if new_charge_status in DELINQUENT_STATUSES:
        return ContractStatus.VENCIDO
    return recompute_contract_status(current, due_date, charges, today)


def resolve_subscription_event(
    event: str | None,
    subscription_status: str | None,
    current: str | ContractStatus | None,
    due_date: date | None,
    charges: Iterable[ChargeLike],
    today: date,
) -> SubscriptionOutcome:
    """Contract status after a subscription notification."""
    sub_status = (subscription_status or "").strip().upper()
    current_status = ContractStatus(current) if current else ContractStatus.PENDENTE

    if event == SUBSCRIPTION_DELETED_EVENT or sub_status == "CANCELED":
        return SubscriptionOutcome(
            ContractStatus.CANCELADO, SignatureStatus.CANCELADO,
        )
    if sub_status == "ACTIVE" and current_status == ContractStatus.PENDENTE:
        return SubscriptionOutcome(
            ContractStatus.EM_DIA, SignatureStatus.ASSINADO,
        )
    if sub_status == "OVERDUE" and current_status != ContractStatus.CANCELADO:
        return SubscriptionOutcome(ContractStatus.VENCIDO)
    return SubscriptionOutcome(
        recompute_contract_status(current_status, due_date, charges, today),
    )


def payment_date_from(raw: str | None, today: date) -> date:
    """Parse the provider paymentDate (ISO, possibly with time). Falls back to today."""
    if not raw:
        return today
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return today


def settle_payment_date(current: date | None, raw: str | None, today: date) -> date:
    """Payment date for a charge the provider reports as paid.

    A parseable provider date always wins, so an earlier "today" placeholder
    gets corrected. Without one, the stored date stays, else today.
    """
    if raw:
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            pass
    return current or today
