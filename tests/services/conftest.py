"""Service test fixtures — async DB, FastAPI test client, fake partners and users.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - Partner gateways overridden with in-memory fakes (fake_gateways.py)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - Row and token helpers live in factories.py so test modules import a plain module
"""

import httpx
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from finnza.api.dependencies import (
    get_crm_gateway, get_ledger_gateway, get_payment_gateway, get_rate_limiter,
)
from finnza.core.domain_types import UserRole
from finnza.db.base import Base
from finnza.infrastructure.clint_client import ClintClient
from finnza.infrastructure.database import get_db, DatabaseSessionManager
from finnza.infrastructure.rate_limiter import PartnerRateLimiter
import finnza.infrastructure.database as db_module
from finnza.main import app
from tests.services.factories import bearer, make_user
from tests.services.fake_gateways import FakeLedger, FakePaymentGateway


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


# ─── Partner fakes ──────────────────────────────────────────────

@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def limiter():
    async def no_sleep(_seconds):
        return None
    return PartnerRateLimiter(partner="BomControle", sleep=no_sleep)


@pytest.fixture
def crm_requests():
    """Requests received by the fake Clint webhook."""
    return []


@pytest.fixture
def crm(crm_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        crm_requests.append(request)
        return httpx.Response(200, json={"ok": True})
    return ClintClient(
        "https://clint.example/hook", transport=httpx.MockTransport(handler),
    )


@pytest.fixture
async def client(test_engine, test_session_factory, payment_gateway, ledger, limiter, crm):
    """FastAPI test client with DB and partner dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    app.dependency_overrides[get_ledger_gateway] = lambda: ledger
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_crm_gateway] = lambda: crm

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Users & tokens ─────────────────────────────────────────────

@pytest.fixture
async def admin_user(test_db):
    return await make_user(test_db, "admin@finnza.test", UserRole.ADMIN)


@pytest.fixture
async def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
async def operator_user(test_db):
    """Non-admin user with the default CLIENTE grants."""
    return await make_user(test_db, "operator@finnza.test")


@pytest.fixture
async def operator_headers(operator_user):
    return bearer(operator_user)

