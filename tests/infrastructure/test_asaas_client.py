"""Asaas Client — transport-level tests with httpx.MockTransport.

Tests cover:
    - Mock mode: synthetic ids, no network
    - Offset pagination until hasMore is false
    - 404 on get_payment → None; other errors → PartnerAPIError
    - create_customer reuses an existing customer with the same document
"""

import json

import httpx
import pytest

from finnza.core.errors import PartnerAPIError
from finnza.infrastructure.asaas_client import PAGE_SIZE, AsaasClient

BASE = "https://asaas.example/api/v3"


def make_client(handler) -> AsaasClient:
    return AsaasClient("key", base_url=BASE, transport=httpx.MockTransport(handler))


async def test_mock_mode_without_api_key():
    def handler(request):
        raise AssertionError("mock mode must not hit the network")

    client = AsaasClient("", base_url=BASE, transport=httpx.MockTransport(handler))
    assert client.mock_enabled
    payment = await client.create_payment({"customer": "cus_1", "value": 10.0})
    assert payment["id"].startswith("pay_")
    assert payment["status"] == "PENDING"
    subscription = await client.create_subscription({"customer": "cus_1"})
    assert subscription["id"].startswith("sub_")
    assert (await client.create_customer({"name": "X"})).startswith("cus_")
    assert await client.list_subscriptions() == []
    await client.aclose()


async def test_forced_mock_mode_with_key():
    client = AsaasClient("key", base_url=BASE, mock_enabled=True)
    assert client.mock_enabled
    await client.aclose()


async def test_list_payments_follows_pagination():
    offsets = []

    def handler(request: httpx.Request) -> httpx.Response:
        offset = int(request.url.params["offset"])
        offsets.append(offset)
        assert request.url.params["subscription"] == "sub_1"
        assert request.headers["access_token"] == "key"
        return httpx.Response(200, json={
            "data": [{"id": f"pay_{offset}"}],
            "hasMore": offset == 0,
        })

    client = make_client(handler)
    payments = await client.list_payments("sub_1")
    assert [p["id"] for p in payments] == ["pay_0", f"pay_{PAGE_SIZE}"]
    assert offsets == [0, PAGE_SIZE]
    await client.aclose()


async def test_get_payment_not_found_returns_none():
    client = make_client(lambda request: httpx.Response(404, json={}))
    assert await client.get_payment("pay_gone") is None
    await client.aclose()


async def test_error_response_raises_partner_error():
    client = make_client(lambda request: httpx.Response(400, text="bad"))
    with pytest.raises(PartnerAPIError) as exc_info:
        await client.create_payment({"customer": "cus_1"})
    assert exc_info.value.status_code == 400
    await client.aclose()


async def test_create_payment_defaults_to_boleto():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"id": "pay_1", "status": "PENDING"})

    client = make_client(handler)
    await client.create_payment({"customer": "cus_1", "value": 99.9})
    assert bodies[0]["billingType"] == "BOLETO"
    await client.aclose()


async def test_create_customer_reuses_existing_document():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        return httpx.Response(200, json={"data": [{"id": "cus_existing"}]})

    client = make_client(handler)
    customer_id = await client.create_customer({"name": "Acme", "cpfCnpj": "123"})
    assert customer_id == "cus_existing"
    await client.aclose()
