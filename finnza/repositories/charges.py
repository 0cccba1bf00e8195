"""Charge repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.domain_types import ContractId
from finnza.models.charge import Charge


class ChargeRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_payment_id(self, payment_id: str) -> Charge | None:
        result = await self.db.execute(
            select(Charge).where(Charge.asaas_payment_id == payment_id),
        )
        return result.scalar_one_or_none()

    async def by_contract(self, contract_id: ContractId) -> list[Charge]:
        result = await self.db.execute(
            select(Charge)
            .where(Charge.contract_id == contract_id)
            .order_by(Charge.due_date),
        )
        return list(result.scalars().all())

    async def known_payment_ids(self) -> set[str]:
        result = await self.db.execute(
            select(Charge.asaas_payment_id)
            .where(Charge.asaas_payment_id.is_not(None)),
        )
        return set(result.scalars().all())
