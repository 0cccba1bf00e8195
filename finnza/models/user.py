"""User ORM — back-office operator with role, status and module permissions.

Invariants:
    - email is unique across all users (including soft-deleted ones)
    - password_hash never leaves the service layer
    - soft_delete stamps deleted_at; restore clears it
    - permissions load eagerly (selectin): every authorization check needs them
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finnza.core.domain_types import Module, UserRole, UserStatus
from finnza.db.base import Base, TimestampMixin, utcnow


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.CLIENTE.value,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserStatus.ATIVO.value,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    reset_token: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission", back_populates="user",
        cascade="all, delete-orphan", lazy="selectin",
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ATIVO and not self.deleted

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def grants(self) -> dict[Module, bool]:
        return {Module(p.module): p.enabled for p in self.permissions}

    def touch_last_login(self) -> None:
        self.last_login_at = utcnow()

    def soft_delete(self) -> None:
        self.deleted = True
        self.deleted_at = utcnow()

    def restore(self) -> None:
        self.deleted = False
        self.deleted_at = None
