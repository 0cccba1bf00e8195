"""Asaas Import — back-filling contracts from provider subscriptions and payments.

Invariants:
    - Subscriptions become RECORRENTE contracts with one charge per payment
    - Standalone payments become UNICO contracts
    - Re-running the import creates nothing new
    - Mock provider imports nothing
    - A failing record is rolled back alone; the rest still import
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from finnza.api.dependencies import get_payment_gateway
from finnza.main import app
from finnza.models.client import Client
from finnza.models.contract import Contract
from finnza.services.asaas_import import AsaasImporter, one_month_after
from tests.services.fake_gateways import FakePaymentGateway, partner_down

URL = "/api/v1/contracts/import-asaas"


def seed_provider(gateway: FakePaymentGateway) -> None:
    gateway.customers["cus_1"] = {
        "id": "cus_1", "name": "Hooli Ltda", "cpfCnpj": "44.555.666/0001-77",
        "email": "contas@hooli.test",
    }
    gateway.subscriptions["sub_1"] = {
        "id": "sub_1", "customer": "cus_1", "value": 250, "nextDueDate": "2026-05-10",
        "description": "Mensalidade Hooli",
    }
    gateway.payments["pay_2"] = {
        "id": "pay_2", "customer": "cus_1", "subscription": "sub_1", "value": 250,
        "dueDate": "2026-05-10", "status": "PENDING",
    }
    gateway.payments["pay_1"] = {
        "id": "pay_1", "customer": "cus_1", "subscription": "sub_1", "value": 250,
        "dueDate": "2026-04-10", "status": "RECEIVED", "paymentDate": "2026-04-09",
    }
    gateway.payments["pay_9"] = {
        "id": "pay_9", "customer": "cus_1", "value": 0,
        "dueDate": "2026-06-01", "status": "PENDING",
    }


async def test_import_creates_contracts_and_charges(client, operator_headers, payment_gateway, test_db):
    seed_provider(payment_gateway)
    res = await client.post(URL, headers=operator_headers)
    assert res.status_code == 200
    assert res.json() == {
        "imported_contracts": 2, "message": "2 contratos importados do Asaas",
    }

    contracts = (await test_db.execute(select(Contract).order_by(Contract.id))).scalars().all()
    recurring, single = contracts
    assert recurring.payment_type == "RECORRENTE"
    assert recurring.title == "Mensalidade Hooli"
    assert recurring.amount == Decimal("500.00")
    assert [c.asaas_payment_id for c in recurring.charges] == ["pay_1", "pay_2"]
    assert recurring.charges[0].payment_date == date(2026, 4, 9)

    assert single.payment_type == "UNICO"
    assert single.amount == Decimal("0.01")
    assert single.title == "Contrato - Hooli Ltda"

    clients = (await test_db.execute(select(Client))).scalars().all()
    assert len(clients) == 1
    assert clients[0].document == "44555666000177"
    assert clients[0].asaas_customer_id == "cus_1"


async def test_import_is_idempotent(client, operator_headers, payment_gateway):
    seed_provider(payment_gateway)
    await client.post(URL, headers=operator_headers)
    res = await client.post(URL, headers=operator_headers)
    assert res.json()["imported_contracts"] == 0


async def test_import_links_existing_client_by_document(test_db, payment_gateway):
    existing = Client(company_name="Hooli", document="44555666000177", deleted=False)
    test_db.add(existing)
    await test_db.commit()
    seed_provider(payment_gateway)

    await AsaasImporter(test_db, payment_gateway).import_all()

    await test_db.refresh(existing)
    assert existing.asaas_customer_id == "cus_1"
    clients = (await test_db.execute(select(Client))).scalars().all()
    assert len(clients) == 1


async def test_import_skips_records_without_customer(test_db, payment_gateway):
    payment_gateway.payments["pay_1"] = {
        "id": "pay_1", "value": 10, "dueDate": "2026-06-01", "status": "PENDING",
    }
    assert await AsaasImporter(test_db, payment_gateway).import_all() == 0


async def test_mock_provider_imports_nothing(client, operator_headers):
    mock_gateway = FakePaymentGateway(mock_enabled=True)
    seed_provider(mock_gateway)
    app.dependency_overrides[get_payment_gateway] = lambda: mock_gateway
    res = await client.post(URL, headers=operator_headers)
    assert res.json()["imported_contracts"] == 0


def test_one_month_after_clamps_to_month_end():
    assert one_month_after(date(2026, 1, 31)) == date(2026, 2, 28)
    assert one_month_after(date(2026, 12, 15)) == date(2027, 1, 15)


def seed_second_customer(gateway: FakePaymentGateway) -> None:
    gateway.customers["cus_2"] = {
        "id": "cus_2", "name": "Pied Piper SA", "cpfCnpj": "99.888.777/0001-66",
    }
    gateway.subscriptions["sub_2"] = {
        "id": "sub_2", "customer": "cus_2", "value": 90, "nextDueDate": "2026-05-20",
    }
    gateway.payments["pay_20"] = {
        "id": "pay_20", "customer": "cus_2", "subscription": "sub_2", "value": 90,
        "dueDate": "2026-05-20", "status": "PENDING",
    }


class BrokenSaveImporter(AsaasImporter):
    """Database write fails for one subscription's contract."""

    async def _save(self, contract):
        if contract.asaas_subscription_id == "sub_1":
            await self.db.flush()
            raise OperationalError("INSERT INTO contracts", {}, Exception("disk I/O error"))
        await super()._save(contract)


async def test_database_failure_skips_only_that_record(test_db, payment_gateway):
    seed_provider(payment_gateway)
    seed_second_customer(payment_gateway)

    imported = await BrokenSaveImporter(test_db, payment_gateway).import_all()

    assert imported == 2
    contracts = (await test_db.execute(select(Contract))).scalars().all()
    assert sorted(c.asaas_subscription_id or "-" for c in contracts) == ["-", "sub_2"]
    single = next(c for c in contracts if c.asaas_subscription_id is None)
    assert [ch.asaas_payment_id for ch in single.charges] == ["pay_9"]


class FlakyListGateway(FakePaymentGateway):
    async def list_payments(self, subscription_id=None):
        if subscription_id == "sub_1":
            raise partner_down()
        return await super().list_payments(subscription_id)


async def test_provider_failure_discards_client_created_for_record(test_db):
    gateway = FlakyListGateway()
    seed_provider(gateway)
    del gateway.payments["pay_9"]
    seed_second_customer(gateway)

    imported = await AsaasImporter(test_db, gateway).import_all()

    assert imported == 1
    clients = (await test_db.execute(select(Client))).scalars().all()
    assert [c.asaas_customer_id for c in clients] == ["cus_2"]
    contracts = (await test_db.execute(select(Contract))).scalars().all()
    assert [c.asaas_subscription_id for c in contracts] == ["sub_2"]
