"""Contract ORM — aggregate root for billing: owns its charges.

Invariants:
    - amount is Numeric(15, 2) and required; due_date is required
    - status is one of ContractStatus; recomputed from charges by services
    - charges cascade (delete-orphan) and load eagerly ordered by due_date
    - asaas_subscription_id set only for RECORRENTE contracts

Design Decisions:
    - lazy="selectin" on charges and client: async sessions cannot lazy-load on
      attribute access, and every read path needs both
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Boolean, Date, ForeignKey, Integer, Numeric, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finnza.core.domain_types import ContractStatus, SignatureStatus
from finnza.db.base import Base, TimestampMixin


class Contract(TimestampMixin, Base):
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id"), nullable=False, index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    recurring_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(15, 2), nullable=True,
    )
    down_payment: Mapped[Decimal | None] = mapped_column(
        Numeric(15, 2), nullable=True,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ContractStatus.PENDENTE.value,
    )
    payment_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    service: Mapped[str | None] = mapped_column(String(50), nullable=True)
    contract_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    recurrence_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    sale_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    whatsapp: Mapped[str | None] = mapped_column(String(20), nullable=True)
    contract_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    signature_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SignatureStatus.PENDENTE.value,
    )
    project: Mapped[str | None] = mapped_column(String(100), nullable=True)
    asaas_subscription_id: Mapped[str | None] = mapped_column(
        String(50), nullable=True, index=True,
    )
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    client: Mapped["Client"] = relationship(
        "Client", lazy="selectin",
    )
    charges: Mapped[list["Charge"]] = relationship(
        "Charge", back_populates="contract",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Charge.due_date",
    )

    def soft_delete(self) -> None:
        self.deleted = True
