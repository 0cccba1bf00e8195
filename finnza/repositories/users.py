"""User repository."""

from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.domain_types import UserId
from finnza.models.user import User


@dataclass(frozen=True)
class UserQuery:
    term: str | None = None
    role: str | None = None
    status: str | None = None
    include_deleted: bool = False
    page: int = 0
    size: int = 20
    sort_by: str = "name"
    descending: bool = False


_SORTABLE = {
    "name": User.name,
    "email": User.email,
    "created_at": User.created_at,
    "last_login_at": User.last_login_at,
}


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: UserId, include_deleted: bool = False) -> User | None:
        query = select(User).where(User.id == user_id)
        if not include_deleted:
            query = query.where(User.deleted.is_(False))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower()),
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        return await self.find_by_email(email) is not None

    async def find_by_reset_token(self, token: str) -> User | None:
        result = await self.db.execute(
            select(User)
            .where(User.reset_token == token)
            .where(User.deleted.is_(False)),
        )
        return result.scalar_one_or_none()

    async def list_active(self) -> list[User]:
        result = await self.db.execute(
            select(User).where(User.deleted.is_(False)).order_by(User.name.asc()),
        )
        return list(result.scalars().all())

    async def count_all(self) -> int:
        return int(await self.db.scalar(select(func.count(User.id))) or 0)

    async def search(self, q: UserQuery) -> tuple[list[User], int]:
        query = select(User)
        if not q.include_deleted:
            query = query.where(User.deleted.is_(False))
        if q.term and q.term.strip():
            pattern = f"%{q.term.strip().lower()}%"
            query = query.where(or_(
                func.lower(User.name).like(pattern),
                func.lower(User.email).like(pattern),
            ))
        if q.role:
            query = query.where(User.role == q.role)
        if q.status:
            query = query.where(User.status == q.status)

        total = await self.db.scalar(
            select(func.count()).select_from(query.subquery()),
        )
        column = _SORTABLE.get(q.sort_by, User.name)
        query = query.order_by(column.desc() if q.descending else column.asc())
        result = await self.db.execute(
            query.limit(q.size).offset(q.page * q.size),
        )
        return list(result.scalars().all()), int(total or 0)
