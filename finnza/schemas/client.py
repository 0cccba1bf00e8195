"""Client Schemas — create/update payloads and public representation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _strip_digits(v: str) -> str:
    return "".join(ch for ch in v if ch.isdigit())


class ClientCreate(BaseModel):
    company_name: str = Field(min_length=1, max_length=200)
    trade_name: str | None = Field(None, max_length=200)
    document: str = Field(min_length=11, max_length=20)
    full_address: str | None = Field(None, max_length=500)
    postal_code: str | None = Field(None, max_length=10)
    billing_phone: str | None = Field(None, max_length=20)
    billing_email: EmailStr | None = None
    responsible_name: str | None = Field(None, max_length=100)
    responsible_cpf: str | None = Field(None, max_length=20)

    @field_validator("document")
    @classmethod
    def normalize_document(cls, v: str) -> str:
        digits = _strip_digits(v)
        if len(digits) not in (11, 14):
            raise ValueError("document must be a CPF (11 digits) or CNPJ (14 digits)")
        return digits


class ClientUpdate(BaseModel):
    company_name: str | None = Field(None, min_length=1, max_length=200)
    trade_name: str | None = Field(None, max_length=200)
    full_address: str | None = Field(None, max_length=500)
    postal_code: str | None = Field(None, max_length=10)
    billing_phone: str | None = Field(None, max_length=20)
    billing_email: EmailStr | None = None
    responsible_name: str | None = Field(None, max_length=100)
    responsible_cpf: str | None = Field(None, max_length=20)


class ClientSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: str
    trade_name: str | None = None
    document: str


class ClientResponse(ClientSummary):
    full_address: str | None = None
    postal_code: str | None = None
    billing_phone: str | None = None
    billing_email: str | None = None
    responsible_name: str | None = None
    responsible_cpf: str | None = None
    asaas_customer_id: str | None = None
    deleted: bool = False
    created_at: datetime
    updated_at: datetime
