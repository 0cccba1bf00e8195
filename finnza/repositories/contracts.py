"""Contract repository — every finder hides soft-deleted contracts."""

from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.domain_types import ClientId, ContractId, ContractStatus
from finnza.models.client import Client
from finnza.models.contract import Contract


class ContractRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _active(self):
        return select(Contract).where(Contract.deleted.is_(False))

    async def get(self, contract_id: ContractId, include_deleted: bool = False) -> Contract | None:
        query = select(Contract).where(Contract.id == contract_id)
        if not include_deleted:
            query = query.where(Contract.deleted.is_(False))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_page(self, limit: int, offset: int) -> tuple[list[Contract], int]:
        total = await self.db.scalar(
            select(func.count(Contract.id)).where(Contract.deleted.is_(False)),
        )
        result = await self.db.execute(
            self._active()
            .order_by(Contract.created_at.desc(), Contract.id.desc())
            .limit(limit)
            .offset(offset),
        )
        return list(result.scalars().all()), int(total or 0)

    async def list_active(self) -> list[Contract]:
        result = await self.db.execute(
            self._active().order_by(Contract.created_at.desc(), Contract.id.desc()),
        )
        return list(result.scalars().all())

    async def by_client(self, client_id: ClientId) -> list[Contract]:
        result = await self.db.execute(
            self._active()
            .where(Contract.client_id == client_id)
            .order_by(Contract.due_date),
        )
        return list(result.scalars().all())

    async def by_status(self, status: str) -> list[Contract]:
        result = await self.db.execute(
            self._active()
            .where(Contract.status == status)
            .order_by(Contract.due_date),
        )
        return list(result.scalars().all())

    async def overdue_as_of(self, day: date) -> list[Contract]:
        """Due before `day` and neither paid nor cancelled."""
        result = await self.db.execute(
            self._active()
            .where(Contract.due_date < day)
            .where(Contract.status.not_in([
                ContractStatus.PAGO.value, ContractStatus.CANCELADO.value,
            ]))
            .order_by(Contract.due_date),
        )
        return list(result.scalars().all())

    async def find_by_subscription_id(self, subscription_id: str) -> Contract | None:
        result = await self.db.execute(
            self._active()
            .where(Contract.asaas_subscription_id == subscription_id)
            .limit(1),
        )
        return result.scalar_one_or_none()

    async def known_subscription_ids(self) -> set[str]:
        result = await self.db.execute(
            select(Contract.asaas_subscription_id)
            .where(Contract.asaas_subscription_id.is_not(None)),
        )
        return set(result.scalars().all())

    async def search(self, client_id: int | None, term: str | None) -> list[Contract]:
        """Narrow by client and by term on title, company or trade name."""
        query = self._active().join(Client, Contract.client_id == Client.id)
        if client_id is not None:
            query = query.where(Contract.client_id == client_id)
        if term and term.strip():
            pattern = f"%{term.strip().lower()}%"
            query = query.where(or_(
                func.lower(Contract.title).like(pattern),
                func.lower(Client.company_name).like(pattern),
                func.lower(Client.trade_name).like(pattern),
            ))
        result = await self.db.execute(
            query.order_by(Contract.created_at.desc(), Contract.id.desc()),
        )
        return list(result.scalars().all())
