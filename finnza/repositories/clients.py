"""Client repository."""

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.domain_types import ClientId
from finnza.models.client import Client


class ClientRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, client_id: ClientId, include_deleted: bool = False) -> Client | None:
        query = select(Client).where(Client.id == client_id)
        if not include_deleted:
            query = query.where(Client.deleted.is_(False))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_by_document(self, document: str) -> Client | None:
        result = await self.db.execute(
            select(Client)
            .where(Client.document == document)
            .where(Client.deleted.is_(False))
            .limit(1),
        )
        return result.scalar_one_or_none()

    async def find_by_asaas_customer_id(self, customer_id: str) -> Client | None:
        result = await self.db.execute(
            select(Client)
            .where(Client.asaas_customer_id == customer_id)
            .where(Client.deleted.is_(False))
            .limit(1),
        )
        return result.scalar_one_or_none()

    async def list_active(self) -> list[Client]:
        result = await self.db.execute(
            select(Client)
            .where(Client.deleted.is_(False))
            .order_by(Client.company_name),
        )
        return list(result.scalars().all())

    async def search(self, term: str) -> list[Client]:
        """Case-insensitive match on company or trade name."""
        pattern = f"%{term.strip().lower()}%"
        result = await self.db.execute(
            select(Client)
            .where(Client.deleted.is_(False))
            .where(or_(
                func.lower(Client.company_name).like(pattern),
                func.lower(Client.trade_name).like(pattern),
            ))
            .order_by(Client.company_name),
        )
        return list(result.scalars().all())
