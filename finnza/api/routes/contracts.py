"""Contract Routes — contract lifecycle, search, dashboard totals and provider sync.

Invariants:
    - Every route requires the CONTRATOS module
    - Literal paths (/search, /category-totals, /sync-all, /import-asaas, /client/..,
      /status/..) are declared before /{contract_id}
    - Single-contract reads sync with the provider; list reads only recompute locally
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.api.dependencies import get_payment_gateway, require_permission
from finnza.core.contract_filters import ContractFilter
from finnza.core.domain_types import ContractStatus, Module
from finnza.core.repository_protocols import PaymentGateway
from finnza.infrastructure.database import get_db
from finnza.schemas.contract import (
    CategoryTotalsResponse, ContractCreate, ContractPage, ContractResponse,
    ImportResponse, SyncAllResponse,
)
from finnza.services.asaas_import import AsaasImporter
from finnza.services.contract_service import ContractService

router = APIRouter(
    prefix="/api/v1/contracts",
    tags=["contracts"],
    dependencies=[Depends(require_permission(Module.CONTRATOS))],
)


def get_contract_service(
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> ContractService:
    return ContractService(db, gateway)


@router.post("", response_model=ContractResponse, status_code=status.HTTP_201_CREATED)
async def create_contract(
    body: ContractCreate, service: ContractService = Depends(get_contract_service),
):
    return service.to_response(await service.create(body))


@router.get("", response_model=ContractPage)
async def list_contracts(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    service: ContractService = Depends(get_contract_service),
):
    items, total = await service.list_page(page, size)
    return ContractPage(
        items=[service.to_response(c) for c in items],
        total=total, page=page, size=size,
    )


@router.get("/search", response_model=ContractPage)
async def search_contracts(
    client_id: int | None = None,
    status_filter: ContractStatus | None = Query(None, alias="status"),
    term: str | None = Query(None, max_length=200),
    due_from: date | None = None,
    due_to: date | None = None,
    paid_from: date | None = None,
    paid_to: date | None = None,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    service: ContractService = Depends(get_contract_service),
):
    flt = ContractFilter(
        client_id=client_id,
        status=status_filter.value if status_filter else None,
        term=term,
        due_from=due_from,
        due_to=due_to,
        paid_from=paid_from,
        paid_to=paid_to,
    )
    items, total = await service.search(flt, page, size)
    return ContractPage(
        items=[service.to_response(c) for c in items],
        total=total, page=page, size=size,
    )


@router.get("/category-totals", response_model=CategoryTotalsResponse)
async def category_totals(service: ContractService = Depends(get_contract_service)):
    return await service.category_totals()


@router.post("/sync-all", response_model=SyncAllResponse)
async def sync_all(service: ContractService = Depends(get_contract_service)):
    synced, failed = await service.sync_all()
    return SyncAllResponse(synced=synced, failed=failed)


@router.post("/import-asaas", response_model=ImportResponse)
async def import_from_asaas(
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    imported = await AsaasImporter(db, gateway).import_all()
    return ImportResponse(
        imported_contracts=imported,
        message=f"{imported} contratos importados do Asaas",
    )


@router.get("/client/{client_id}", response_model=list[ContractResponse])
async def contracts_by_client(
    client_id: int, service: ContractService = Depends(get_contract_service),
):
    return [service.to_response(c) for c in await service.by_client(client_id)]


@router.get("/status/{contract_status}", response_model=list[ContractResponse])
async def contracts_by_status(
    contract_status: ContractStatus,
    service: ContractService = Depends(get_contract_service),
):
    return [service.to_response(c) for c in await service.by_status(contract_status)]


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int, service: ContractService = Depends(get_contract_service),
):
    return service.to_response(await service.get(contract_id))


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contract(
    contract_id: int, service: ContractService = Depends(get_contract_service),
):
    await service.soft_delete(contract_id)


@router.post("/{contract_id}/sync", response_model=ContractResponse)
async def sync_contract(
    contract_id: int, service: ContractService = Depends(get_contract_service),
):
    contract = await service.get(contract_id, sync=False)
    return service.to_response(await service.sync_with_provider(contract))
