"""Client Routes — CRUD with document normalization and soft delete."""

from finnza.core.domain_types import Module
from tests.services.factories import bearer, make_contract, make_user

URL = "/api/v1/clients"


async def test_create_normalizes_document(client, operator_headers):
    res = await client.post(URL, json={
        "company_name": "Initech", "document": "123.456.789-09",
    }, headers=operator_headers)
    assert res.status_code == 201
    assert res.json()["document"] == "12345678909"
    assert res.json()["deleted"] is False


async def test_create_rejects_bad_document(client, operator_headers):
    res = await client.post(URL, json={
        "company_name": "Initech", "document": "123.456.789",
    }, headers=operator_headers)
    assert res.status_code == 400


async def test_duplicate_document_is_conflict(client, operator_headers):
    body = {"company_name": "Initech", "document": "12345678909"}
    await client.post(URL, json=body, headers=operator_headers)
    res = await client.post(URL, json=body, headers=operator_headers)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CLIENT_DOCUMENT_IN_USE"


async def test_list_and_search(client, operator_headers, test_db):
    await make_contract(test_db, company_name="Acme Ltda", document="11111111111")
    await make_contract(test_db, company_name="Globex SA", document="22222222222")

    res = await client.get(URL, headers=operator_headers)
    assert [c["company_name"] for c in res.json()] == ["Acme Ltda", "Globex SA"]

    res = await client.get(f"{URL}?term=glob", headers=operator_headers)
    assert [c["company_name"] for c in res.json()] == ["Globex SA"]


async def test_update_partial(client, operator_headers):
    created = (await client.post(URL, json={
        "company_name": "Initech", "document": "12345678909",
    }, headers=operator_headers)).json()
    res = await client.put(
        f"{URL}/{created['id']}", json={"trade_name": "Initech Brasil"},
        headers=operator_headers,
    )
    assert res.status_code == 200
    assert res.json()["trade_name"] == "Initech Brasil"
    assert res.json()["company_name"] == "Initech"


async def test_soft_delete_and_restore(client, operator_headers):
    created = (await client.post(URL, json={
        "company_name": "Initech", "document": "12345678909",
    }, headers=operator_headers)).json()
    url = f"{URL}/{created['id']}"

    assert (await client.delete(url, headers=operator_headers)).status_code == 204
    assert (await client.get(url, headers=operator_headers)).status_code == 404

    res = await client.put(f"{url}/restore", headers=operator_headers)
    assert res.status_code == 200
    assert (await client.get(url, headers=operator_headers)).status_code == 200


async def test_clients_require_contracts_module(client, test_db):
    user = await make_user(test_db, "fin@finnza.test", grants={Module.FINANCEIRO: True})
    res = await client.get(URL, headers=bearer(user))
    assert res.status_code == 403
