"""Repositories — finders that hide soft-deleted rows and date-based queries."""

from datetime import date, timedelta

from finnza.db.base import Base
from finnza.repositories.charges import ChargeRepository
from finnza.repositories.clients import ClientRepository
from finnza.repositories.contracts import ContractRepository
from tests.services.factories import make_contract


async def test_overdue_as_of_skips_paid_cancelled_and_deleted(test_db):
    today = date.today()
    late = await make_contract(test_db, title="Late", due_in_days=-5, status="EM_DIA", document="1")
    await make_contract(test_db, title="Paid", due_in_days=-5, status="PAGO", document="2")
    await make_contract(test_db, title="Cancelled", due_in_days=-5, status="CANCELADO", document="3")
    await make_contract(test_db, title="Future", due_in_days=5, status="EM_DIA", document="4")
    deleted = await make_contract(test_db, title="Deleted", due_in_days=-5, document="5")
    deleted.soft_delete()
    await test_db.commit()

    overdue = await ContractRepository(test_db).overdue_as_of(today)
    assert [c.id for c in overdue] == [late.id]


async def test_charges_by_contract_ordered_by_due_date(test_db):
    today = date.today()
    contract = await make_contract(test_db, charges=[
        {"due_date": today + timedelta(days=60), "payment_id": "pay_b"},
        {"due_date": today + timedelta(days=30), "payment_id": "pay_a"},
    ])
    charges = await ChargeRepository(test_db).by_contract(contract.id)
    assert [c.asaas_payment_id for c in charges] == ["pay_a", "pay_b"]
    assert await ChargeRepository(test_db).known_payment_ids() == {"pay_a", "pay_b"}


async def test_soft_deleted_client_hidden_from_finders(test_db):
    contract = await make_contract(test_db, document="12345678909")
    repo = ClientRepository(test_db)
    contract.client.soft_delete()
    await test_db.commit()

    assert await repo.get(contract.client_id) is None
    assert await repo.get(contract.client_id, include_deleted=True) is not None
    assert await repo.find_by_document("12345678909") is None
    assert await repo.list_active() == []


async def test_contract_search_by_term_matches_trade_name(test_db):
    contract = await make_contract(test_db, company_name="Razão Social Ltda")
    contract.client.trade_name = "Marca Fantasia"
    await test_db.commit()
    found = await ContractRepository(test_db).search(None, "fantasia")
    assert [c.id for c in found] == [contract.id]


def test_relationships_use_supported_loaders():
    lazies = {
        f"{mapper.class_.__name__}.{rel.key}": rel.lazy
        for mapper in Base.registry.mappers
        for rel in mapper.relationships
    }
    assert "noload" not in lazies.values()
    assert lazies["Contract.client"] == "selectin"


async def test_contract_client_loads_without_reverse_collection(test_db):
    contract = await make_contract(test_db, company_name="Initech")
    loaded = await ContractRepository(test_db).get(contract.id)
    assert loaded.client.company_name == "Initech"
    assert await ContractRepository(test_db).by_client(loaded.client_id) == [loaded]
