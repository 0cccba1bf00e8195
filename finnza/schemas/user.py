"""User Schemas — user management payloads and the public user representation.

Invariants:
    - name 3-100 chars, password >= 6 chars, email syntactically valid
    - password hashes never appear in any response model
    - role/status rendered lowercase; permissions keyed by camelCase module keys
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from finnza.core.domain_types import UserRole, UserStatus
from finnza.core.permissions import permission_map


class UserCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: UserRole
    status: UserStatus = UserStatus.ATIVO
    permissions: dict[str, bool] | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class FirstAdminCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=6, max_length=128)
    role: UserRole | None = None
    status: UserStatus | None = None


class PermissionsUpdate(BaseModel):
    permissions: dict[str, bool]


class ProfileUpdate(BaseModel):
    name: str = Field(min_length=3, max_length=100)


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


class UserSearch(BaseModel):
    term: str | None = Field(None, max_length=100)
    role: UserRole | None = None
    status: UserStatus | None = None
    include_deleted: bool = False
    page: int = Field(0, ge=0)
    size: int = Field(20, ge=1, le=100)
    sort_by: Literal["name", "email", "created_at", "last_login_at"] = "name"
    sort_direction: Literal["asc", "desc"] = "asc"


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    status: str
    last_login_at: datetime | None = None
    created_at: datetime
    deleted: bool = False
    permissions: dict[str, bool]

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role.lower(),
            status=user.status.lower(),
            last_login_at=user.last_login_at,
            created_at=user.created_at,
            deleted=user.deleted,
            permissions=permission_map(user.grants),
        )


class UserPage(BaseModel):
    items: list[UserResponse]
    total: int
    page: int
    size: int
