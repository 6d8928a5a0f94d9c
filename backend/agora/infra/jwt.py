"""Centralised JWT helpers for session tokens.

Uses HS256 with the application's secret key. Validates standard claims
and expected issuer/audience values.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from agora.settings import settings


ISSUER = "agora-api"
AUDIENCE = "agora-web"
ACCESS = "access"
REFRESH = "refresh"


def _encode(user_id: int, token_type: str, ttl_seconds: int) -> str:
    now = int(time.time())
    body: Dict[str, Any] = {
        "iss": ISSUER,
        "aud": AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "sub": str(user_id),
        "typ": token_type,
    }
    return jwt.encode(body, settings.secret_key, algorithm="HS256")


def encode_access(user_id: int) -> str:
    return _encode(user_id, ACCESS, settings.access_ttl_minutes * 60)


def encode_refresh(user_id: int) -> str:
    return _encode(user_id, REFRESH, settings.refresh_ttl_days * 86400)


def decode(token: str, *, expected_type: str = ACCESS) -> dict[str, object]:
    """Decode and validate a session token.

    Raises jwt.InvalidTokenError subclasses on failure.
    """
    options = {"require": ["exp", "iat", "iss", "aud", "sub"]}
    payload = jwt.decode(
        token,
        settings.secret_key,
        algorithms=["HS256"],
        audience=AUDIENCE,
        issuer=ISSUER,
        leeway=5,
        options=options,
    )
    if payload.get("typ") != expected_type:
        raise InvalidTokenError(f"wrong_token_type:{payload.get('typ')}")
    return payload  # type: ignore[return-value]


def decode_access(token: str) -> dict[str, object]:
    return decode(token, expected_type=ACCESS)
