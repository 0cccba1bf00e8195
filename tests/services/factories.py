"""Test Factories — users, bearer headers and billing data written straight to the DB.

Invariants:
    - Rows are committed so API requests (separate sessions) can see them
    - Tokens minted with the real security helpers: the auth dependency runs end to end
"""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from finnza.config import get_settings
from finnza.core.domain_types import Module, UserRole
from finnza.core.permissions import default_permissions
from finnza.infrastructure.security import create_access_token, hash_password
from finnza.models.charge import Charge
from finnza.models.client import Client
from finnza.models.contract import Contract
from finnza.models.permission import Permission
from finnza.models.user import User


async def make_user(
    db: AsyncSession,
    email: str,
    role: UserRole = UserRole.CLIENTE,
    password: str = "secret123",
    grants: dict[Module, bool] | None = None,
) -> User:
    user = User(
        name=email.split("@")[0].title(),
        email=email,
        password_hash=hash_password(password),
        role=role.value,
        status="ATIVO",
        deleted=False,
    )
    grants = default_permissions(role) if grants is None else grants
    user.permissions = [
        Permission(module=m.value, enabled=enabled) for m, enabled in grants.items()
    ]
    db.add(user)
    await db.commit()
    return user


def bearer(user: User) -> dict[str, str]:
    settings = get_settings()
    token = create_access_token(
        user.id, user.email, user.role, settings.jwt_secret, settings.jwt_expiration_hours,
    )
    return {"Authorization": f"Bearer {token}"}


async def make_contract(
    db: AsyncSession,
    *,
    title: str = "Consultoria mensal",
    amount: str = "1000.00",
    due_in_days: int = 10,
    status: str = "PENDENTE",
    charges: list[dict] | None = None,
    subscription_id: str | None = None,
    company_name: str = "Acme Ltda",
    document: str = "12345678000199",
) -> Contract:
    """Contract with its own client; each dict in `charges` becomes one Charge."""
    client = Client(company_name=company_name, document=document, deleted=False)
    db.add(client)
    await db.flush()
    contract = Contract(
        title=title,
        client_id=client.id,
        amount=Decimal(amount),
        due_date=date.today() + timedelta(days=due_in_days),
        status=status,
        payment_type="RECORRENTE" if subscription_id else "UNICO",
        asaas_subscription_id=subscription_id,
        signature_status="PENDENTE",
        deleted=False,
    )
    contract.client = client
    contract.charges = [
        Charge(
            amount=Decimal(c.get("amount", amount)),
            due_date=c.get("due_date", contract.due_date),
            status=c.get("status", "PENDING"),
            payment_date=c.get("payment_date"),
            asaas_payment_id=c.get("payment_id"),
            installment_number=i,
        )
        for i, c in enumerate(charges or [], start=1)
    ]
    db.add(contract)
    await db.commit()
    return contract
