from __future__ import annotations

import time

import jwt
import pytest
from fastapi import HTTPException

from agora.infra import jwt as jwt_helper
from agora.infra.auth import verify_access_jwt
from agora.settings import settings


def test_access_token_round_trip():
	token = jwt_helper.encode_access(17)

	payload = jwt_helper.decode_access(token)

	assert payload["sub"] == "17"
	assert payload["typ"] == jwt_helper.ACCESS
	assert payload["iss"] == jwt_helper.ISSUER


def test_refresh_token_is_not_accepted_as_access():
	refresh = jwt_helper.encode_refresh(17)

	with pytest.raises(jwt.InvalidTokenError):
		jwt_helper.decode_access(refresh)
	assert jwt_helper.decode(refresh, expected_type=jwt_helper.REFRESH)["sub"] == "17"


def test_verify_access_jwt_returns_user():
	user = verify_access_jwt(jwt_helper.encode_access(23))
	assert user.id == 23


def test_expired_token_is_rejected():
	now = int(time.time())
	token = jwt.encode(
		{
			"iss": jwt_helper.ISSUER,
			"aud": jwt_helper.AUDIENCE,
			"iat": now - 7200,
			"exp": now - 3600,
			"sub": "5",
			"typ": jwt_helper.ACCESS,
		},
		settings.secret_key,
		algorithm="HS256",
	)

	with pytest.raises(HTTPException) as exc:
		verify_access_jwt(token)
	assert exc.value.status_code == 401
	assert exc.value.detail == "invalid_token"


def test_non_numeric_subject_is_rejected():
	now = int(time.time())
	token = jwt.encode(
		{
			"iss": jwt_helper.ISSUER,
			"aud": jwt_helper.AUDIENCE,
			"iat": now,
			"exp": now + 60,
			"sub": "not-a-number",
			"typ": jwt_helper.ACCESS,
		},
		settings.secret_key,
		algorithm="HS256",
	)

	with pytest.raises(HTTPException):
		verify_access_jwt(token)


def test_token_signed_with_other_key_is_rejected():
	forged = jwt.encode({"sub": "1"}, "another-secret-key-0123456789abcdef", algorithm="HS256")

	with pytest.raises(HTTPException):
		verify_access_jwt(forged)
