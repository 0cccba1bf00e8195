"""Auth Service — login, password recovery and bearer-token resolution.

Invariants:
    - Every login failure (unknown email, deleted or inactive user, bad password)
      gives the same 401 message: the response never reveals which check failed
    - forgot_password answers identically whether or not the email exists
    - Reset tokens are single-use uuid4 strings with a settings-driven TTL
    - resolve_user returns only active, non-deleted users

Design Decisions:
    - Only the user id of an issued reset token is logged: outbound email is not part
      of this service and the token itself never reaches the logs
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from finnza.config import Settings
from finnza.core.errors import AuthenticationError, BusinessRuleError
from finnza.infrastructure.security import (
    create_access_token, decode_access_token, hash_password, verify_password,
)
from finnza.models.user import User
from finnza.repositories.users import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Email ou senha inválidos"


def _aware(moment: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


class AuthService:
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings
        self.users = UserRepository(db)

    async def login(self, email: str, password: str) -> tuple[str, User]:
        user = await self.users.find_by_email(email)
        if (
            user is None
            or not user.is_active
            or not verify_password(user.password_hash, password)
        ):
            logger.warning("Login rejected")
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = create_access_token(
            user.id, user.email, user.role,
            self.settings.jwt_secret, self.settings.jwt_expiration_hours,
        )
        user.touch_last_login()
        await self.db.commit()
        logger.info(f"User {user.id} logged in", extra={"user_id": user.id})
        return token, user

    async def forgot_password(self, email: str) -> None:
        user = await self.users.find_by_email(email)
        if user is None or user.deleted:
            logger.info("Password reset requested for unknown email")
            return
        user.reset_token = str(uuid.uuid4())
        user.reset_token_expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=self.settings.password_reset_ttl_minutes,
        )
        await self.db.commit()
        logger.info(
            f"Password reset token issued for user {user.id}",
            extra={"user_id": user.id},
        )

    async def reset_password(self, token: str, new_password: str) -> None:
        user = await self.users.find_by_reset_token(token)
        if user is None or user.reset_token_expires_at is None:
            raise BusinessRuleError("Token inválido", "INVALID_RESET_TOKEN")
        if _aware(user.reset_token_expires_at) < datetime.now(timezone.utc):
            raise BusinessRuleError("Token expirado", "EXPIRED_RESET_TOKEN")

        user.password_hash = hash_password(new_password)
        user.reset_token = None
        user.reset_token_expires_at = None
        await self.db.commit()
        logger.info(f"User {user.id} reset password", extra={"user_id": user.id})

    async def resolve_user(self, token: str) -> User:
        user_id = decode_access_token(token, self.settings.jwt_secret)
        if user_id is None:
            raise AuthenticationError("Invalid or expired token")
        user = await self.users.get(user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Invalid or expired token")
        return user
