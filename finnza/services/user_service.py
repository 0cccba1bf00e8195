"""User Service — user administration, permissions and self-service profile.

Invariants:
    - Email unique across all users, compared case-insensitively (409 EMAIL_IN_USE)
    - New users get default_permissions(role) unless an explicit key map is given
    - The first admin can only be created while the users table is empty
    - Soft delete and restore are state transitions: repeating one is a 400
    - Passwords stored only as PBKDF2 hashes (infrastructure/security.py)

Design Decisions:
    - Permission rows mutated through the relationship (delete-orphan cascade)
      so one commit persists the whole diff from plan_permission_update
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from finnza.core.domain_types import Module, UserRole, UserStatus
from finnza.core.errors import (
    BusinessRuleError, ConflictError, ResourceNotFoundError,
)
from finnza.core.permissions import default_permissions, plan_permission_update
from finnza.infrastructure.security import hash_password, verify_password
from finnza.models.permission import Permission
from finnza.models.user import User
from finnza.repositories.users import UserQuery, UserRepository
from finnza.schemas.user import (
    FirstAdminCreate, PasswordChange, UserCreate, UserSearch, UserUpdate,
)

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    # ─── Create ─────────────────────────────────────────────────

    async def create_first_admin(self, body: FirstAdminCreate) -> User:
        if await self.users.count_all() > 0:
            raise BusinessRuleError(
                "An administrator already exists", "FIRST_ADMIN_ALREADY_CREATED",
            )
        user = await self._insert(
            body.name.strip(), body.email, body.password,
            UserRole.ADMIN, UserStatus.ATIVO, default_permissions(UserRole.ADMIN),
        )
        logger.info(f"First administrator {user.id} created", extra={"user_id": user.id})
        return user

    async def create(self, body: UserCreate) -> User:
        if body.permissions is None:
            grants = default_permissions(body.role)
        else:
            plan = self._plan({}, body.permissions)
            grants = plan.upserts
        user = await self._insert(
            body.name, body.email, body.password, body.role, body.status, grants,
        )
        logger.info(f"User {user.id} created ({user.role})", extra={"user_id": user.id})
        return user

    async def _insert(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole,
        status: UserStatus,
        grants: dict[Module, bool],
    ) -> User:
        if await self.users.email_exists(email):
            raise ConflictError(f"Email {email} is already in use", "EMAIL_IN_USE")
        user = User(
            name=name,
            email=email.strip().lower(),
            password_hash=hash_password(password),
            role=role.value,
            status=status.value,
            deleted=False,
        )
        user.permissions = [
            Permission(module=module.value, enabled=enabled)
            for module, enabled in grants.items()
        ]
        self.db.add(user)
        await self.db.commit()
        return user

    # ─── Read ───────────────────────────────────────────────────

    async def get(self, user_id: int, include_deleted: bool = False) -> User:
        user = await self.users.get(user_id, include_deleted=include_deleted)
        if not user:
            raise ResourceNotFoundError("User", str(user_id))
        return user

    async def list_all(self) -> list[User]:
        return await self.users.list_active()

    async def search(self, body: UserSearch) -> tuple[list[User], int]:
        return await self.users.search(UserQuery(
            term=body.term,
            role=body.role.value if body.role else None,
            status=body.status.value if body.status else None,
            include_deleted=body.include_deleted,
            page=body.page,
            size=body.size,
            sort_by=body.sort_by,
            descending=body.sort_direction == "desc",
        ))

    # ─── Update ─────────────────────────────────────────────────

    async def update(self, user_id: int, body: UserUpdate) -> User:
        user = await self.get(user_id)
        changes = body.model_dump(exclude_unset=True, exclude_none=True)
        email = changes.pop("email", None)
        if email and email.strip().lower() != user.email.lower():
            if await self.users.email_exists(email):
                raise ConflictError(f"Email {email} is already in use", "EMAIL_IN_USE")
            user.email = email.strip().lower()
        password = changes.pop("password", None)
        if password:
            user.password_hash = hash_password(password)
        if "name" in changes:
            user.name = changes["name"].strip()
        if "role" in changes:
            user.role = UserRole(changes["role"]).value
        if "status" in changes:
            user.status = UserStatus(changes["status"]).value
        await self.db.commit()
        logger.info(f"User {user_id} updated", extra={"user_id": user_id})
        return user

    async def update_permissions(self, user_id: int, requested: dict[str, bool]) -> User:
        user = await self.get(user_id)
        plan = self._plan(user.grants, requested)

        by_module = {Module(p.module): p for p in user.permissions}
        for module, enabled in plan.upserts.items():
            if module in by_module:
                by_module[module].enabled = enabled
            else:
                user.permissions.append(Permission(module=module.value, enabled=enabled))
        for module in plan.removals:
            user.permissions.remove(by_module[module])

        await self.db.commit()
        logger.info(
            f"Permissions of user {user_id} updated: "
            f"{len(plan.upserts)} set, {len(plan.removals)} removed",
            extra={"user_id": user_id},
        )
        return user

    def _plan(self, existing: dict[Module, bool], requested: dict[str, bool]):
        plan = plan_permission_update(existing, requested)
        for key in plan.unknown_keys:
            logger.warning(f"Unknown permission key ignored: {key}")
        return plan

    # ─── Delete / restore ───────────────────────────────────────

    async def soft_delete(self, user_id: int) -> None:
        user = await self.get(user_id, include_deleted=True)
        if user.deleted:
            raise BusinessRuleError("User is already deleted", "USER_ALREADY_DELETED")
        user.soft_delete()
        await self.db.commit()
        logger.info(f"User {user_id} soft-deleted", extra={"user_id": user_id})

    async def restore(self, user_id: int) -> User:
        user = await self.get(user_id, include_deleted=True)
        if not user.deleted:
            raise BusinessRuleError("User is not deleted", "USER_NOT_DELETED")
        user.restore()
        await self.db.commit()
        logger.info(f"User {user_id} restored", extra={"user_id": user_id})
        return user

    async def delete_permanently(self, user_id: int) -> None:
        user = await self.get(user_id, include_deleted=True)
        await self.db.delete(user)
        await self.db.commit()
        logger.info(f"User {user_id} permanently deleted", extra={"user_id": user_id})

    # ─── Self-service ───────────────────────────────────────────

    async def update_profile(self, user: User, name: str) -> User:
        user.name = name.strip()
        await self.db.commit()
        return user

    async def change_password(self, user: User, body: PasswordChange) -> None:
        if not verify_password(user.password_hash, body.current_password):
            raise BusinessRuleError("Senha atual incorreta", "INVALID_CURRENT_PASSWORD")
        user.password_hash = hash_password(body.new_password)
        await self.db.commit()
        logger.info(f"User {user.id} changed password", extra={"user_id": user.id})
