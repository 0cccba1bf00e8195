"""Asaas Webhook — charge and contract reconciliation from provider notifications.

Invariants:
    - Unknown payment/subscription ids are acknowledged and ignored
    - Paid notifications set payment_date once; existing dates are kept
    - Delinquent notifications force the contract to VENCIDO
    - Cancelled contracts stay cancelled
    - Configured webhook token must match the asaas-access-token header
"""

from datetime import date

from finnza.config import get_settings
from finnza.main import app
from finnza.models.charge import Charge
from finnza.models.contract import Contract
from tests.services.factories import make_contract

URL = "/api/v1/webhooks/asaas"


async def _contract(db, contract_id: int) -> Contract:
    return await db.get(Contract, contract_id, populate_existing=True)


async def _charge(db, contract: Contract, index: int = 0) -> Charge:
    return await db.get(Charge, contract.charges[index].id, populate_existing=True)


# ─── Payments ───────────────────────────────────────────────────

async def test_payment_received_pays_contract(client, test_db):
    contract = await make_contract(test_db, status="EM_DIA", charges=[{"payment_id": "pay_1"}])
    res = await client.post(URL, json={
        "event": "PAYMENT_RECEIVED",
        "payment": {"id": "pay_1", "status": "RECEIVED", "paymentDate": "2026-03-10"},
    })
    assert res.status_code == 200
    assert res.json() == {
        "received": True, "event": "PAYMENT_RECEIVED",
        "charge_updated": True, "contract_updated": True,
    }
    charge = await _charge(test_db, contract)
    assert charge.status == "RECEIVED"
    assert charge.payment_date == date(2026, 3, 10)
    assert (await _contract(test_db, contract.id)).status == "PAGO"


async def test_payment_confirmed_alias_counts_as_received(client, test_db):
    contract = await make_contract(test_db, charges=[{"payment_id": "pay_1"}])
    await client.post(URL, json={
        "event": "PAYMENT_CONFIRMED", "payment": {"id": "pay_1", "status": "CONFIRMED"},
    })
    charge = await _charge(test_db, contract)
    assert charge.status == "RECEIVED"
    assert charge.payment_date == date.today()


async def test_provider_payment_date_replaces_stored_one(client, test_db):
    contract = await make_contract(test_db, charges=[
        {"payment_id": "pay_1", "status": "RECEIVED", "payment_date": date(2026, 1, 5)},
    ])
    await client.post(URL, json={
        "event": "PAYMENT_RECEIVED",
        "payment": {"id": "pay_1", "status": "RECEIVED", "paymentDate": "2026-02-01"},
    })
    assert (await _charge(test_db, contract)).payment_date == date(2026, 2, 1)


async def test_confirmed_placeholder_date_corrected_by_received(client, test_db):
    contract = await make_contract(test_db, charges=[{"payment_id": "pay_1"}])
    await client.post(URL, json={
        "event": "PAYMENT_CONFIRMED", "payment": {"id": "pay_1", "status": "CONFIRMED"},
    })
    assert (await _charge(test_db, contract)).payment_date == date.today()

    await client.post(URL, json={
        "event": "PAYMENT_RECEIVED",
        "payment": {"id": "pay_1", "status": "RECEIVED", "paymentDate": "2026-02-01"},
    })
    assert (await _charge(test_db, contract)).payment_date == date(2026, 2, 1)


async def test_stored_payment_date_kept_without_provider_date(client, test_db):
    contract = await make_contract(test_db, charges=[
        {"payment_id": "pay_1", "status": "RECEIVED", "payment_date": date(2026, 1, 5)},
    ])
    await client.post(URL, json={
        "event": "PAYMENT_RECEIVED", "payment": {"id": "pay_1", "status": "RECEIVED"},
    })
    assert (await _charge(test_db, contract)).payment_date == date(2026, 1, 5)


async def test_overdue_payment_forces_vencido(client, test_db):
    contract = await make_contract(test_db, status="PAGO", charges=[
        {"payment_id": "pay_1", "status": "RECEIVED"},
        {"payment_id": "pay_2"},
    ])
    res = await client.post(URL, json={
        "event": "PAYMENT_OVERDUE", "payment": {"id": "pay_2", "status": "OVERDUE"},
    })
    assert res.json()["contract_updated"] is True
    assert (await _contract(test_db, contract.id)).status == "VENCIDO"


async def test_unknown_status_becomes_pending(client, test_db):
    contract = await make_contract(test_db, charges=[{"payment_id": "pay_1", "status": "OVERDUE"}])
    await client.post(URL, json={
        "event": "PAYMENT_UPDATED", "payment": {"id": "pay_1", "status": "SOMETHING_NEW"},
    })
    assert (await _charge(test_db, contract)).status == "PENDING"


async def test_unknown_payment_is_acknowledged(client):
    res = await client.post(URL, json={
        "event": "PAYMENT_RECEIVED", "payment": {"id": "pay_404", "status": "RECEIVED"},
    })
    assert res.status_code == 200
    assert res.json()["charge_updated"] is False
    assert res.json()["contract_updated"] is False


async def test_payment_never_reopens_cancelled_contract(client, test_db):
    contract = await make_contract(test_db, status="CANCELADO", charges=[{"payment_id": "pay_1"}])
    res = await client.post(URL, json={
        "event": "PAYMENT_OVERDUE", "payment": {"id": "pay_1", "status": "OVERDUE"},
    })
    assert res.json()["charge_updated"] is True
    assert res.json()["contract_updated"] is False
    assert (await _contract(test_db, contract.id)).status == "CANCELADO"


async def test_event_without_objects(client):
    res = await client.post(URL, json={"event": "PAYMENT_CREATED", "extra": 1})
    assert res.status_code == 200
    assert res.json()["event"] == "PAYMENT_CREATED"


# ─── Subscriptions ──────────────────────────────────────────────

async def test_subscription_deleted_cancels_contract(client, test_db):
    contract = await make_contract(test_db, status="EM_DIA", subscription_id="sub_1")
    res = await client.post(URL, json={
        "event": "SUBSCRIPTION_DELETED", "subscription": {"id": "sub_1", "status": "ACTIVE"},
    })
    assert res.json()["contract_updated"] is True
    reloaded = await _contract(test_db, contract.id)
    assert reloaded.status == "CANCELADO"
    assert reloaded.signature_status == "CANCELADO"


async def test_active_subscription_activates_pending_contract(client, test_db):
    contract = await make_contract(test_db, status="PENDENTE", subscription_id="sub_1")
    await client.post(URL, json={
        "event": "SUBSCRIPTION_UPDATED", "subscription": {"id": "sub_1", "status": "ACTIVE"},
    })
    reloaded = await _contract(test_db, contract.id)
    assert reloaded.status == "EM_DIA"
    assert reloaded.signature_status == "ASSINADO"


async def test_overdue_subscription_marks_vencido(client, test_db):
    contract = await make_contract(test_db, status="EM_DIA", subscription_id="sub_1")
    await client.post(URL, json={
        "event": "SUBSCRIPTION_UPDATED", "subscription": {"id": "sub_1", "status": "OVERDUE"},
    })
    assert (await _contract(test_db, contract.id)).status == "VENCIDO"


async def test_unknown_subscription_is_acknowledged(client):
    res = await client.post(URL, json={
        "event": "SUBSCRIPTION_DELETED", "subscription": {"id": "sub_404"},
    })
    assert res.status_code == 200
    assert res.json()["contract_updated"] is False


# ─── Token ──────────────────────────────────────────────────────

async def test_configured_token_must_match(client):
    settings = get_settings().model_copy(update={"asaas_webhook_token": "s3cret"})
    app.dependency_overrides[get_settings] = lambda: settings

    denied = await client.post(URL, json={"event": "PAYMENT_CREATED"})
    assert denied.status_code == 401

    allowed = await client.post(
        URL, json={"event": "PAYMENT_CREATED"}, headers={"asaas-access-token": "s3cret"},
    )
    assert allowed.status_code == 200
