"""Client Service — client CRUD plus find-or-create and provider customer linking.

Invariants:
    - document is unique among non-deleted clients (409 on duplicates)
    - find_or_create prefers client_id, then document, then creates
    - ensure_provider_customer never fails the caller: provider errors are logged

Design Decisions:
    - Provider customer linking lives here (not in ContractService) because importing
      and contract creation both need it
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.errors import ConflictError, FinnzaError, ResourceNotFoundError
from finnza.core.repository_protocols import PaymentGateway
from finnza.models.client import Client
from finnza.repositories.clients import ClientRepository
from finnza.schemas.client import ClientCreate, ClientUpdate
from finnza.schemas.contract import ContractClientData

logger = logging.getLogger(__name__)


def provider_customer_body(client: Client) -> dict:
    """Asaas customer payload for a local client."""
    body = {"name": client.company_name, "cpfCnpj": client.document}
    if client.billing_email:
        body["email"] = client.billing_email
    if client.postal_code:
        body["postalCode"] = client.postal_code
    if client.full_address:
        body["address"] = client.full_address
    return body


class ClientService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.clients = ClientRepository(db)

    async def list(self, term: str | None = None) -> list[Client]:
        if term and term.strip():
            return await self.clients.search(term)
        return await self.clients.list_active()

    async def get(self, client_id: int) -> Client:
        client = await self.clients.get(client_id)
        if not client:
            raise ResourceNotFoundError("Client", str(client_id))
        return client

    async def create(self, body: ClientCreate) -> Client:
        if await self.clients.find_by_document(body.document):
            raise ConflictError(
                f"A client with document {body.document} already exists",
                "CLIENT_DOCUMENT_IN_USE",
            )
        client = Client(**body.model_dump())
        self.db.add(client)
        await self.db.commit()
        await self.db.refresh(client)
        logger.info(f"Client {client.id} created")
        return client

    async def update(self, client_id: int, body: ClientUpdate) -> Client:
        client = await self.get(client_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            setattr(client, field, value)
        await self.db.commit()
        await self.db.refresh(client)
        return client

    async def soft_delete(self, client_id: int) -> None:
        client = await self.get(client_id)
        client.soft_delete()
        await self.db.commit()
        logger.info(f"Client {client_id} soft-deleted")

    async def restore(self, client_id: int) -> Client:
        client = await self.clients.get(client_id, include_deleted=True)
        if not client:
            raise ResourceNotFoundError("Client", str(client_id))
        client.restore()
        await self.db.commit()
        await self.db.refresh(client)
        return client

    async def find_or_create(self, data: ContractClientData) -> Client:
        """Resolve the client for a new contract without committing."""
        if data.client_id is not None:
            return await self.get(data.client_id)
        existing = await self.clients.find_by_document(data.document)
        if existing:
            return existing
        client = Client(**data.model_dump(exclude={"client_id"}))
        self.db.add(client)
        await self.db.flush()
        logger.info(f"Client {client.id} created from contract data")
        return client

    async def ensure_provider_customer(
        self, client: Client, gateway: PaymentGateway,
    ) -> str | None:
        """Link the client to a provider customer, creating it when missing."""
        if client.asaas_customer_id:
            return client.asaas_customer_id
        try:
            customer_id = await gateway.create_customer(provider_customer_body(client))
        except FinnzaError as e:
            logger.error(
                f"Could not create provider customer for client {client.id}: {e.message}",
                extra={"error_code": e.code},
            )
            return None
        client.asaas_customer_id = customer_id
        return customer_id
