"""Webhook Schemas — inbound payment-provider notifications.

Invariants:
    - Unknown top-level fields are preserved (provider adds fields without notice)
    - payment/subscription kept as raw dicts in provider field names (id, status, paymentDate)
"""

from pydantic import BaseModel, ConfigDict


class AsaasWebhookPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: str | None = None
    payment: dict | None = None
    subscription: dict | None = None


class WebhookAck(BaseModel):
    received: bool = True
    event: str | None = None
    charge_updated: bool = False
    contract_updated: bool = False
