"""API Dependencies — bearer authentication, permission guards and partner gateways.

Invariants:
    - Missing or invalid bearer token → 401 (AuthenticationError), never 403
    - require_permission(module): ADMIN always passes, others need an enabled grant
    - Gateways resolved through small dependency functions so tests can override them

Design Decisions:
    - HTTPBearer(auto_error=False): the FinnzaError handler renders 401 in the
      standard envelope instead of FastAPI's default 403 body
"""

from typing import Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.config import Settings, get_settings
from finnza.core.domain_types import Module
from finnza.core.errors import AuthenticationError, PermissionDeniedError
from finnza.core.permissions import has_permission
from finnza.core.repository_protocols import CrmGateway, LedgerGateway, PaymentGateway
from finnza.infrastructure import partners
from finnza.infrastructure.database import get_db
from finnza.infrastructure.rate_limiter import PartnerRateLimiter
from finnza.models.user import User
from finnza.services.auth_service import AuthService

bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return await AuthService(db, settings).resolve_user(credentials.credentials)


def require_permission(module: Module) -> Callable:
    async def guard(user: User = Depends(get_current_user)) -> User:
        if not has_permission(user.role, user.grants, module):
            raise PermissionDeniedError(module.value)
        return user
    return guard


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError("ADMIN")
    return user


# ─── Partner gateways ───────────────────────────────────────────

def get_payment_gateway() -> PaymentGateway:
    return partners.get_asaas_client()


def get_ledger_gateway() -> LedgerGateway:
    return partners.get_bomcontrole_client()


def get_crm_gateway() -> CrmGateway:
    return partners.get_clint_client()


def get_rate_limiter() -> PartnerRateLimiter:
    return partners.get_bomcontrole_limiter()
