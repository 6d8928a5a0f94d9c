"""Cookie helpers for the session access token.

The access cookie is httpOnly and scoped to the whole site so read endpoints can
resolve an optional viewer without a Bearer header.
"""

from __future__ import annotations

from fastapi import Response

from agora.settings import settings


def set_access_cookie(response: Response, *, access_token: str) -> None:
    max_age = int(settings.access_ttl_minutes) * 60
    response.set_cookie(
        key=settings.access_cookie_name,
        value=access_token,
        max_age=max_age,
        expires=max_age,
        path="/",
        secure=bool(settings.cookie_secure) or settings.is_prod(),
        httponly=True,
        samesite="lax",
        domain=settings.cookie_domain or None,
    )


def clear_access_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.access_cookie_name,
        path="/",
        domain=settings.cookie_domain or None,
    )
