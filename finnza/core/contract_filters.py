"""Contract Filters — in-memory matching for the contract search screen."""

from dataclasses import dataclass
from datetime import date
from typing import Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ContractFilter:
    client_id: int | None = None
    status: str | None = None
    term: str | None = None
    due_from: date | None = None
    due_to: date | None = None
    paid_from: date | None = None
    paid_to: date | None = None

    @property
    def has_payment_range(self) -> bool:
        return self.paid_from is not None or self.paid_to is not None


def _in_range(value: date | None, start: date | None, end: date | None) -> bool:
    if value is None:
        return False
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def _matches_term(contract, term: str) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    client = getattr(contract, "client", None)
    haystack = [
        contract.title,
        getattr(client, "company_name", None),
        getattr(client, "trade_name", None),
    ]
    return any(h and needle in h.lower() for h in haystack)


def matches(contract, flt: ContractFilter) -> bool:
    """True when the contract satisfies every filter that is set."""
    if flt.client_id is not None and contract.client_id != flt.client_id:
        return False
    if flt.status and contract.status != flt.status:
        return False
    if flt.term and not _matches_term(contract, flt.term):
        return False
    if (flt.due_from or flt.due_to) and not _in_range(
        contract.due_date, flt.due_from, flt.due_to,
    ):
        return False
    if flt.has_payment_range and not any(
        _in_range(c.payment_date, flt.paid_from, flt.paid_to)
        for c in contract.charges
    ):
        return False
    return True


def paginate(items: Sequence[T], page: int, size: int) -> tuple[list[T], int]:
    """Zero-based page slice plus total count."""
    start = max(page, 0) * size
    return list(items[start:start + size]), len(items)
