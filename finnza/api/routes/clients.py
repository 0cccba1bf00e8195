"""Client Routes — client CRUD, gated by the CONTRATOS module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.api.dependencies import require_permission
from finnza.core.domain_types import Module
from finnza.infrastructure.database import get_db
from finnza.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from finnza.services.client_service import ClientService

router = APIRouter(
    prefix="/api/v1/clients",
    tags=["clients"],
    dependencies=[Depends(require_permission(Module.CONTRATOS))],
)


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    term: str | None = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
):
    return await ClientService(db).list(term)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(client_id: int, db: AsyncSession = Depends(get_db)):
    return await ClientService(db).get(client_id)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(body: ClientCreate, db: AsyncSession = Depends(get_db)):
    return await ClientService(db).create(body)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int, body: ClientUpdate, db: AsyncSession = Depends(get_db),
):
    return await ClientService(db).update(client_id, body)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int, db: AsyncSession = Depends(get_db)):
    await ClientService(db).soft_delete(client_id)


@router.put("/{client_id}/restore", response_model=ClientResponse)
async def restore_client(client_id: int, db: AsyncSession = Depends(get_db)):
    return await ClientService(db).restore(client_id)
