"""Contract Category — dashboard buckets (em dia / pendente / em atraso / inadimplente).

Invariants:
    - Two or more overdue installments always means INADIMPLENTE
    - Exactly one overdue installment always means EM_ATRASO
    - First matching rule wins; the order below is the policy
    - Totals sum contract amount (Decimal), never charge amounts

Design Decisions:
    - Separate from status_reconciler: categories are a read model for dashboards and
      never persisted, so they may disagree with status for a day without harm
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from finnza.core.domain_types import ChargeStatus, ContractCategory, ContractStatus
from finnza.core.repository_protocols import ChargeLike, ContractLike
from finnza.core.status_reconciler import is_delinquent, is_paid, is_pending_past_due


def count_overdue_installments(charges: Iterable[ChargeLike], today: date) -> int:
    return sum(
        1 for c in charges
        if is_delinquent(c.status) or is_pending_past_due(c, today)
    )


def classify_contract(
    status: str | ContractStatus | None,
    due_date: date | None,
    charges: Sequence[ChargeLike],
    today: date,
) -> ContractCategory:
    """Bucket a contract for the dashboard."""
    overdue = count_overdue_installments(charges, today)
    if overdue >= 2:
        return ContractCategory.INADIMPLENTE
    if overdue == 1:
        return ContractCategory.EM_ATRASO

    due_in_past = due_date is not None and due_date < today
    if status == ContractStatus.VENCIDO:
        return ContractCategory.EM_ATRASO
    if status == ContractStatus.EM_DIA and due_in_past:
        return ContractCategory.EM_ATRASO
    if status == ContractStatus.PAGO:
        return ContractCategory.EM_DIA
    if charges and any(is_paid(c.status) for c in charges):
        return ContractCategory.EM_DIA
    if (
        charges
        and all(c.status == ChargeStatus.PENDING for c in charges)
        and due_date is not None
        and not due_in_past
    ):
        return ContractCategory.EM_DIA
    if status == ContractStatus.EM_DIA:
        return ContractCategory.EM_DIA
    return ContractCategory.PENDENTE


@dataclass
class CategoryTotals:
    """Counts and amounts per dashboard category."""
    total_contracts: int = 0
    total_amount: Decimal = Decimal("0")
    counts: dict[ContractCategory, int] = field(
        default_factory=lambda: {c: 0 for c in ContractCategory},
    )
    amounts: dict[ContractCategory, Decimal] = field(
        default_factory=lambda: {c: Decimal("0") for c in ContractCategory},
    )

    def to_dict(self) -> dict:
        return {
            "total_contracts": self.total_contracts,
            "total_amount": self.total_amount,
            "em_dia": self.counts[ContractCategory.EM_DIA],
            "pendente": self.counts[ContractCategory.PENDENTE],
            "em_atraso": self.counts[ContractCategory.EM_ATRASO],
            "inadimplente": self.counts[ContractCategory.INADIMPLENTE],
            "amount_em_dia": self.amounts[ContractCategory.EM_DIA],
            "amount_pendente": self.amounts[ContractCategory.PENDENTE],
            "amount_em_atraso": self.amounts[ContractCategory.EM_ATRASO],
            "amount_inadimplente": self.amounts[ContractCategory.INADIMPLENTE],
        }


def summarize_categories(
    contracts: Iterable[ContractLike], today: date,
) -> CategoryTotals:
    totals = CategoryTotals()
    for contract in contracts:
        category = classify_contract(
            contract.status, contract.due_date, list(contract.charges), today,
        )
        amount = contract.amount or Decimal("0")
        totals.total_contracts += 1
        totals.total_amount += amount
        totals.counts[category] += 1
        totals.amounts[category] += amount
    return totals
