"""Contract Schemas — contract creation with embedded client data, responses, search.

Invariants:
    - ContractCreate.due_date strictly after today
    - ContractCreate.amount >= 0.01 with two decimal places
    - Client data requires company_name + document unless client_id is given
    - whatsapp in E.164-ish form (optional +, no leading zero, up to 15 digits)

Design Decisions:
    - Optional provider billing knobs (interest, fine, discount, installments) passed
      through to the payment provider only for UNICO contracts
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import (
    BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator,
)

from finnza.core.domain_types import ContractCategory, PaymentType
from finnza.schemas.client import ClientSummary


class ContractClientData(BaseModel):
    """Existing client reference or data to find-or-create one by document."""
    client_id: int | None = None
    company_name: str | None = Field(None, max_length=200)
    trade_name: str | None = Field(None, max_length=200)
    document: str | None = Field(None, max_length=20)
    full_address: str | None = Field(None, max_length=500)
    postal_code: str | None = Field(None, max_length=10)
    billing_phone: str | None = Field(None, max_length=20)
    billing_email: EmailStr | None = None
    responsible_name: str | None = Field(None, max_length=100)
    responsible_cpf: str | None = Field(None, max_length=20)

    @field_validator("document")
    @classmethod
    def digits_only(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return "".join(ch for ch in v if ch.isdigit()) or None

    @model_validator(mode="after")
    def require_identity(self):
        if self.client_id is None and not (self.company_name and self.document):
            raise ValueError(
                "client data requires company_name and document when client_id is absent",
            )
        return self


class ContractCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    content: str | None = None
    amount: Decimal = Field(ge=Decimal("0.01"), max_digits=15, decimal_places=2)
    recurring_amount: Decimal | None = Field(
        None, ge=Decimal("0.01"), max_digits=15, decimal_places=2,
    )
    down_payment: Decimal | None = Field(
        None, ge=Decimal("0"), max_digits=15, decimal_places=2,
    )
    due_date: date
    payment_type: PaymentType
    service: str | None = Field(None, max_length=50)
    contract_start: date | None = None
    recurrence_start: date | None = None
    sale_date: date | None = None
    whatsapp: str | None = Field(None, pattern=r"^\+?[1-9]\d{1,14}$")
    contract_link: str | None = Field(None, max_length=500)
    project: str | None = Field(None, max_length=100)

    # Provider billing options (UNICO only)
    billing_type: Literal["BOLETO", "PIX", "CREDIT_CARD", "UNDEFINED"] | None = None
    installment_count: int | None = Field(None, ge=2, le=60)
    interest_per_month: Decimal | None = Field(None, ge=Decimal("0"))
    late_fine_percent: Decimal | None = Field(None, ge=Decimal("0"))
    discount_percent: Decimal | None = Field(None, ge=Decimal("0"), le=Decimal("100"))
    discount_fixed: Decimal | None = Field(None, ge=Decimal("0"))
    discount_days_before_due: int | None = Field(None, ge=0)

    client: ContractClientData

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v

    @field_validator("due_date")
    @classmethod
    def due_date_in_future(cls, v: date) -> date:
        if v <= date.today():
            raise ValueError("due_date must be in the future")
        return v


class ChargeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: Decimal
    due_date: date
    payment_date: date | None = None
    status: str
    asaas_payment_id: str | None = None
    payment_link: str | None = None
    barcode: str | None = None
    installment_number: int | None = None


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    content: str | None = None
    client_id: int
    client: ClientSummary | None = None
    amount: Decimal
    recurring_amount: Decimal | None = None
    down_payment: Decimal | None = None
    due_date: date
    status: str
    category: ContractCategory | None = None
    payment_type: str | None = None
    service: str | None = None
    contract_start: date | None = None
    recurrence_start: date | None = None
    sale_date: date | None = None
    end_date: date | None = None
    whatsapp: str | None = None
    contract_link: str | None = None
    signature_status: str | None = None
    project: str | None = None
    asaas_subscription_id: str | None = None
    charges: list[ChargeResponse] = []
    created_at: datetime
    updated_at: datetime


class ContractPage(BaseModel):
    items: list[ContractResponse]
    total: int
    page: int
    size: int


class CategoryTotalsResponse(BaseModel):
    total_contracts: int
    total_amount: Decimal
    em_dia: int
    pendente: int
    em_atraso: int
    inadimplente: int
    amount_em_dia: Decimal
    amount_pendente: Decimal
    amount_em_atraso: Decimal
    amount_inadimplente: Decimal


class SyncAllResponse(BaseModel):
    synced: int
    failed: int


class ImportResponse(BaseModel):
    imported_contracts: int
    message: str
