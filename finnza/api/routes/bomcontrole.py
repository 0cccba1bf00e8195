"""BomControle Routes — ledger queries and rate limiter administration.

Invariants:
    - Queries require FINANCEIRO; connection test and limiter admin require CONFIGURACOES
    - Movement period defaults to the current month when bounds are omitted
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from finnza.api.dependencies import (
    get_ledger_gateway, get_rate_limiter, require_permission,
)
from finnza.core.domain_types import Module
from finnza.core.repository_protocols import LedgerGateway
from finnza.infrastructure.rate_limiter import PartnerRateLimiter
from finnza.services.bomcontrole_service import (
    DEFAULT_PAGE_SIZE, BomControleService, MovementQuery,
)

router = APIRouter(prefix="/api/v1/bomcontrole", tags=["bomcontrole"])

_finance = [Depends(require_permission(Module.FINANCEIRO))]
_settings = [Depends(require_permission(Module.CONFIGURACOES))]


def get_bomcontrole_service(
    client: LedgerGateway = Depends(get_ledger_gateway),
    limiter: PartnerRateLimiter = Depends(get_rate_limiter),
) -> BomControleService:
    return BomControleService(client, limiter)


def movement_query(
    start_date: date | None = None,
    end_date: date | None = None,
    date_type: str | None = None,
    company_id: int | None = None,
    client_id: int | None = None,
    supplier_id: int | None = None,
    text: str | None = Query(None, max_length=200),
    category: str | None = None,
    kind: str | None = Query(None, pattern="^(despesa|receita)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=500),
) -> MovementQuery:
    return MovementQuery(
        start=start_date, end=end_date, date_type=date_type,
        company_id=company_id, client_id=client_id, supplier_id=supplier_id,
        text=text, category=category, kind=kind,
        page=page, page_size=page_size,
    )


@router.get("/test", dependencies=_settings)
async def test_connection(service: BomControleService = Depends(get_bomcontrole_service)):
    return await service.test_connection()


@router.get("/companies", dependencies=_finance)
async def list_companies(
    term: str | None = Query(None, max_length=200),
    service: BomControleService = Depends(get_bomcontrole_service),
):
    return await service.list_companies(term)


@router.get("/movements", dependencies=_finance)
async def search_movements(
    query: MovementQuery = Depends(movement_query),
    service: BomControleService = Depends(get_bomcontrole_service),
):
    return await service.search_movements(query)


@router.get("/payables", dependencies=_finance)
async def list_payables(
    query: MovementQuery = Depends(movement_query),
    service: BomControleService = Depends(get_bomcontrole_service),
):
    return await service.payables(query)


@router.get("/receivables", dependencies=_finance)
async def list_receivables(
    query: MovementQuery = Depends(movement_query),
    service: BomControleService = Depends(get_bomcontrole_service),
):
    return await service.receivables(query)


@router.get("/rate-limiter/stats", dependencies=_settings)
async def rate_limiter_stats(limiter: PartnerRateLimiter = Depends(get_rate_limiter)):
    return limiter.stats()


@router.post("/rate-limiter/clear-cache", dependencies=_settings)
async def clear_rate_limiter_cache(
    limiter: PartnerRateLimiter = Depends(get_rate_limiter),
):
    removed = limiter.clear_cache()
    return {"success": True, "message": f"Cache cleared ({removed} entries removed)"}
