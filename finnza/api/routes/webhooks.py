"""Webhook Routes — inbound payment-provider notifications (public).

Invariants:
    - When ASAAS_WEBHOOK_TOKEN is set, the asaas-access-token header must match (401 otherwise)
    - Always 200 with an acknowledgement once the payload is processed
"""

import hmac

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.config import Settings, get_settings
from finnza.core.errors import AuthenticationError
from finnza.infrastructure.database import get_db
from finnza.schemas.webhook import AsaasWebhookPayload, WebhookAck
from finnza.services.webhook_reconciler import WebhookReconciler

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])


@router.post("/asaas", response_model=WebhookAck)
async def asaas_webhook(
    payload: AsaasWebhookPayload,
    access_token: str | None = Header(None, alias="asaas-access-token"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    expected = settings.asaas_webhook_token
    if expected and not hmac.compare_digest(access_token or "", expected):
        raise AuthenticationError("Invalid webhook token")
    return await WebhookReconciler(db).handle(payload)
