"""Authentication helpers for FastAPI endpoints.

Access tokens arrive either as a Bearer credential or in the access cookie the
social login flow sets. Anonymous callers are allowed on read endpoints through
`get_optional_user`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from agora.infra import jwt as jwt_helper
from agora.obs import logging as obs_logging
from agora.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: int
	token_type: str = jwt_helper.ACCESS


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")

	sub = str(payload.get("sub") or "").strip()
	if not sub.isdigit():
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	return AuthenticatedUser(id=int(sub))


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
	if credentials and credentials.scheme.lower() == "bearer" and credentials.credentials:
		return credentials.credentials
	cookie = request.cookies.get(settings.access_cookie_name)
	return cookie or None


async def get_current_user(
	request: Request,
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user or reject the request with 401."""
	token = _extract_token(request, credentials)
	if not token:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	user = verify_access_jwt(token)
	obs_logging.bind_context(user_id=str(user.id))
	return user


async def get_optional_user(
	request: Request,
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[AuthenticatedUser]:
	"""Resolve the caller if a valid token is present, otherwise treat them as anonymous."""
	token = _extract_token(request, credentials)
	if not token:
		return None
	try:
		user = verify_access_jwt(token)
	except HTTPException:
		return None
	obs_logging.bind_context(user_id=str(user.id))
	return user
