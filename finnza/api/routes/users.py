"""User Routes — first-admin bootstrap, self-service profile and admin user management.

Invariants:
    - /users/first-admin is public; it only works on an empty users table
    - /users/me* require authentication only
    - Every other route requires ADMIN
    - /me routes declared before /{user_id} so the literal path wins
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.api.dependencies import get_current_user, require_admin
from finnza.infrastructure.database import get_db
from finnza.models.user import User
from finnza.schemas.auth import MessageResponse
from finnza.schemas.user import (
    FirstAdminCreate, PasswordChange, PermissionsUpdate, ProfileUpdate,
    UserCreate, UserPage, UserResponse, UserSearch, UserUpdate,
)
from finnza.services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post(
    "/first-admin", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_first_admin(body: FirstAdminCreate, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).create_first_admin(body)
    return UserResponse.from_user(user)


# ─── Self-service ───────────────────────────────────────────────

@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    return UserResponse.from_user(user)


@router.put("/me", response_model=UserResponse)
async def update_me(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await UserService(db).update_profile(user, body.name)
    return UserResponse.from_user(updated)


@router.put("/me/password", response_model=MessageResponse)
async def change_my_password(
    body: PasswordChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await UserService(db).change_password(user, body)
    return MessageResponse(message="Senha alterada com sucesso")


# ─── Administration ─────────────────────────────────────────────

@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return UserResponse.from_user(await UserService(db).create(body))


@router.get("", response_model=list[UserResponse])
async def list_users(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return [UserResponse.from_user(u) for u in await UserService(db).list_all()]


@router.post("/search", response_model=UserPage)
async def search_users(
    body: UserSearch,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    items, total = await UserService(db).search(body)
    return UserPage(
        items=[UserResponse.from_user(u) for u in items],
        total=total, page=body.page, size=body.size,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return UserResponse.from_user(await UserService(db).get(user_id))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return UserResponse.from_user(await UserService(db).update(user_id, body))


@router.put("/{user_id}/permissions", response_model=UserResponse)
async def update_user_permissions(
    user_id: int,
    body: PermissionsUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).update_permissions(user_id, body.permissions)
    return UserResponse.from_user(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await UserService(db).soft_delete(user_id)


@router.put("/{user_id}/restore", response_model=UserResponse)
async def restore_user(
    user_id: int,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return UserResponse.from_user(await UserService(db).restore(user_id))


@router.delete("/{user_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_permanently(
    user_id: int,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await UserService(db).delete_permanently(user_id)
