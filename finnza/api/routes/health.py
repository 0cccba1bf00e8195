"""Health Routes — liveness, plus readiness that follows the database.

Invariants:
    - GET /health/ answers 200 while the process runs
    - GET /health/ready answers 503 when the database ping fails; partner
      gateways never fail readiness, their mode (mock or live) is only reported
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from finnza.api.dependencies import get_ledger_gateway, get_payment_gateway
from finnza.core.repository_protocols import LedgerGateway, PaymentGateway
from finnza.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "finnza-backoffice"


def _mode(gateway) -> str:
    return "mock" if gateway.mock_enabled else "live"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": SERVICE_NAME, "version": "1.0.0"}


@router.get("/ready")
async def readiness_check(
    payments: PaymentGateway = Depends(get_payment_gateway),
    ledger: LedgerGateway = Depends(get_ledger_gateway),
):
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        logger.error("Readiness failed: database unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {
            "database": "healthy",
            "asaas": _mode(payments),
            "bomcontrole": _mode(ledger),
        },
    }
