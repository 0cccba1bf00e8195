"""Security Primitives — PBKDF2 password hashing and HS256 JWT access tokens.

Invariants:
    - Stored hashes are base64(salt[32] + pbkdf2_sha256(password, salt, 100_000))
    - verify_password never raises: malformed hashes simply fail verification
    - decode_access_token returns the user id or None (expired, tampered, malformed)

Design Decisions:
    - hashlib PBKDF2 over bcrypt: no native extension to build in slim images
    - Comparison via hmac.compare_digest: constant time
"""

import base64
import hashlib
import hmac
import logging
import os
from datetime import datetime, timedelta, timezone

import jwt

logger = logging.getLogger(__name__)

_SALT_BYTES = 32
_ITERATIONS = 100_000
_ALGORITHM = "HS256"


def hash_password(password: str, salt: bytes | None = None) -> str:
    if not salt:
        salt = os.urandom(_SALT_BYTES)
    key = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, _ITERATIONS,
    )
    return base64.b64encode(salt + key).decode("ascii")


def verify_password(stored_hash: str, provided_password: str) -> bool:
    try:
        decoded = base64.b64decode(stored_hash.encode("ascii"))
    except (ValueError, UnicodeEncodeError) as e:
        logger.warning(f"Malformed password hash: {e}")
        return False
    salt, stored_key = decoded[:_SALT_BYTES], decoded[_SALT_BYTES:]
    key = hashlib.pbkdf2_hmac(
        "sha256", provided_password.encode("utf-8"), salt, _ITERATIONS,
    )
    return hmac.compare_digest(key, stored_key)


def create_access_token(
    user_id: int, email: str, role: str, secret: str, expiration_hours: int,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=expiration_hours),
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def decode_access_token(token: str, secret: str) -> int | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning("Access token expired")
        return None
    except jwt.InvalidTokenError:
        logger.warning("Invalid access token")
        return None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
