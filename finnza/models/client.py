"""Client ORM — billed party (pessoa física or jurídica) behind contracts.

Invariants:
    - document (CPF/CNPJ) and company_name are required
    - deleted=True hides the client from every repository finder
    - asaas_customer_id links to the provider customer once created

Design Decisions:
    - Soft delete over hard delete: contracts and charges keep their history
    - No contracts collection here: contract listings go through ContractRepository,
      so the relation is mapped one way (Contract.client)
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from finnza.db.base import Base, TimestampMixin


class Client(TimestampMixin, Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    trade_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    document: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    full_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    billing_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    billing_email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    responsible_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    responsible_cpf: Mapped[str | None] = mapped_column(String(20), nullable=True)
    asaas_customer_id: Mapped[str | None] = mapped_column(
        String(50), nullable=True, index=True,
    )
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def soft_delete(self) -> None:
        self.deleted = True

    def restore(self) -> None:
        self.deleted = False
