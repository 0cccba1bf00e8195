"""Charge ORM — a billing item (cobrança) owned by a contract.

Invariants:
    - status is one of ChargeStatus (provider vocabulary after normalization)
    - asaas_payment_id is unique when present (webhook lookup key)
    - payment_date set only once the charge counts as paid
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finnza.core.domain_types import ChargeStatus
from finnza.core.status_reconciler import is_paid
from finnza.db.base import Base, TimestampMixin


class Charge(TimestampMixin, Base):
    __tablename__ = "charges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contract_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contracts.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(40), nullable=False, default=ChargeStatus.PENDING.value,
    )
    asaas_payment_id: Mapped[str | None] = mapped_column(
        String(50), nullable=True, unique=True,
    )
    payment_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    barcode: Mapped[str | None] = mapped_column(String(100), nullable=True)
    installment_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    contract: Mapped["Contract"] = relationship(
        "Contract", back_populates="charges",
    )

    @property
    def is_paid(self) -> bool:
        return is_paid(self.status)
