"""Clint Routes — forwards contact payloads to the CRM webhook (public)."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from finnza.api.dependencies import get_crm_gateway
from finnza.core.repository_protocols import CrmGateway

router = APIRouter(prefix="/api/v1/clint", tags=["clint"])


@router.post("/webhook")
async def forward_contact(
    contact: dict[str, Any] = Body(...),
    crm: CrmGateway = Depends(get_crm_gateway),
):
    return await crm.forward(contact)
