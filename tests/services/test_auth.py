"""Auth Routes — login, forgot-password and reset-password flows.

Invariants:
    - Every login failure returns the same 401 message
    - forgot-password answers identically for known and unknown emails
    - Reset tokens are single-use and expire
"""

import logging
from datetime import datetime, timedelta, timezone

from finnza.infrastructure.security import decode_access_token
from finnza.config import get_settings
from finnza.models.user import User
from finnza.services.auth_service import INVALID_CREDENTIALS
from tests.services.factories import make_user

FORGOT_MESSAGE = "Se o email estiver cadastrado, as instruções foram enviadas"


async def test_login_returns_token_and_user(client, operator_user, test_db):
    res = await client.post("/api/v1/auth/login", json={
        "email": "OPERATOR@finnza.test", "password": "secret123",
    })
    assert res.status_code == 200
    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "operator@finnza.test"
    assert decode_access_token(body["token"], get_settings().jwt_secret) == operator_user.id

    refreshed = await test_db.get(User, operator_user.id, populate_existing=True)
    assert refreshed.last_login_at is not None


async def test_login_wrong_password(client, operator_user):
    res = await client.post("/api/v1/auth/login", json={
        "email": "operator@finnza.test", "password": "wrong",
    })
    assert res.status_code == 401
    assert res.json()["error"]["message"] == INVALID_CREDENTIALS


async def test_login_unknown_email_same_message(client):
    res = await client.post("/api/v1/auth/login", json={
        "email": "unknown@finnza.test", "password": "whatever",
    })
    assert res.status_code == 401
    assert res.json()["error"]["message"] == INVALID_CREDENTIALS


async def test_login_inactive_user_rejected(client, test_db):
    user = await make_user(test_db, "idle@finnza.test")
    user.status = "INATIVO"
    await test_db.commit()
    res = await client.post("/api/v1/auth/login", json={
        "email": "idle@finnza.test", "password": "secret123",
    })
    assert res.status_code == 401


async def test_forgot_password_unknown_email_gives_same_answer(client):
    res = await client.post("/api/v1/auth/forgot-password", json={"email": "unknown@finnza.test"})
    assert res.status_code == 200
    assert res.json()["message"] == FORGOT_MESSAGE


async def test_forgot_password_never_logs_the_token(client, operator_user, test_db, caplog):
    caplog.set_level(logging.DEBUG)
    await client.post(
        "/api/v1/auth/forgot-password", json={"email": "operator@finnza.test"},
    )
    user = await test_db.get(User, operator_user.id, populate_existing=True)
    assert user.reset_token
    assert user.reset_token not in caplog.text
    assert f"user {user.id}" in caplog.text


async def test_reset_password_flow(client, operator_user, test_db):
    res = await client.post(
        "/api/v1/auth/forgot-password", json={"email": "operator@finnza.test"},
    )
    assert res.json()["message"] == FORGOT_MESSAGE

    user = await test_db.get(User, operator_user.id, populate_existing=True)
    token = user.reset_token
    assert token

    res = await client.post("/api/v1/auth/reset-password", json={
        "token": token, "new_password": "nova-senha",
    })
    assert res.status_code == 200
    assert res.json()["message"] == "Senha redefinida com sucesso"

    login = await client.post("/api/v1/auth/login", json={
        "email": "operator@finnza.test", "password": "nova-senha",
    })
    assert login.status_code == 200

    reused = await client.post("/api/v1/auth/reset-password", json={
        "token": token, "new_password": "outra-senha",
    })
    assert reused.status_code == 400
    assert reused.json()["error"]["code"] == "INVALID_RESET_TOKEN"


async def test_reset_password_expired_token(client, operator_user, test_db):
    operator_user.reset_token = "expired-token"
    operator_user.reset_token_expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    await test_db.commit()

    res = await client.post("/api/v1/auth/reset-password", json={
        "token": "expired-token", "new_password": "nova-senha",
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "EXPIRED_RESET_TOKEN"


async def test_reset_password_unknown_token(client):
    res = await client.post("/api/v1/auth/reset-password", json={
        "token": "does-not-exist", "new_password": "nova-senha",
    })
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Token inválido"
