from __future__ import annotations

import json

import httpx
import pytest

from agora.identity.exceptions import ProviderNotSupportedError, SocialLoginError
from agora.identity.models import ProviderProfile, SocialUser
from agora.identity.service import SocialLoginService
from agora.infra import jwt as jwt_helper


class _FakeUsers:
	def __init__(self, existing: SocialUser | None = None) -> None:
		self.existing = existing
		self.created: list[ProviderProfile] = []

	async def find_by_social_id(self, social_code: int, social_id: str):
		return self.existing

	async def create_social_user(self, profile: ProviderProfile) -> SocialUser:
		self.created.append(profile)
		return SocialUser(user_id=100 + len(self.created), email=profile.email)


def _transport(routes: dict[str, httpx.Response], seen: list[httpx.Request] | None = None) -> httpx.MockTransport:
	def handler(request: httpx.Request) -> httpx.Response:
		if seen is not None:
			seen.append(request)
		key = f"{request.method} {request.url.host}{request.url.path}"
		return routes.get(key, httpx.Response(404))

	return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_kakao_first_login_creates_user_without_email():
	users = _FakeUsers()
	seen: list[httpx.Request] = []
	transport = _transport(
		{
			"POST kauth.kakao.com/oauth/token": httpx.Response(200, json={"access_token": "kakao-token"}),
			"GET kapi.kakao.com/v2/user/me": httpx.Response(
				200,
				json={
					"id": 123456,
					"kakao_account": {"profile": {"nickname": "Minji", "profile_image_url": "https://img/k.png"}},
				},
			),
		},
		seen,
	)
	service = SocialLoginService(users, transport=transport)

	result = await service.login("kakao", "auth-code", "https://app/callback")

	assert result.email_required is True
	profile = users.created[0]
	assert (profile.social_code, profile.social_id, profile.nickname) == (1, "123456", "Minji")
	assert profile.image_url == "https://img/k.png"
	assert jwt_helper.decode_access(result.access_token)["sub"] == "101"
	assert jwt_helper.decode(result.refresh_token, expected_type=jwt_helper.REFRESH)["sub"] == "101"
	assert seen[1].headers["Authorization"] == "Bearer kakao-token"


@pytest.mark.asyncio
async def test_github_form_encoded_token_and_login_fallback():
	users = _FakeUsers()
	transport = _transport(
		{
			"POST github.com/login/oauth/access_token": httpx.Response(
				200,
				text="access_token=gh-token&scope=&token_type=bearer",
				headers={"content-type": "application/x-www-form-urlencoded"},
			),
			"GET api.github.com/user": httpx.Response(
				200,
				json={"id": 9, "login": "octocat", "name": None, "email": "o@example.com", "avatar_url": "https://a"},
			),
		}
	)
	service = SocialLoginService(users, transport=transport)

	result = await service.login("github", "code", "https://app/callback")

	assert result.email_required is False
	assert users.created[0].nickname == "octocat"
	assert users.created[0].social_code == 2


@pytest.mark.asyncio
async def test_google_returning_user_is_not_recreated():
	users = _FakeUsers(existing=SocialUser(user_id=55, email="g@example.com"))
	transport = _transport(
		{
			"POST oauth2.googleapis.com/token": httpx.Response(200, json={"access_token": "g-token"}),
			"GET www.googleapis.com/userinfo/v2/me": httpx.Response(
				200, json={"id": "g-1", "name": "Gil", "email": "g@example.com", "picture": "https://p"}
			),
		}
	)
	service = SocialLoginService(users, transport=transport)

	result = await service.login("google", "code", "https://app/callback")

	assert users.created == []
	assert jwt_helper.decode_access(result.access_token)["sub"] == "55"
	assert result.email_required is False


@pytest.mark.asyncio
async def test_provider_error_becomes_social_login_error():
	transport = _transport({"POST kauth.kakao.com/oauth/token": httpx.Response(400, json={"error": "invalid_grant"})})
	service = SocialLoginService(_FakeUsers(), transport=transport)

	with pytest.raises(SocialLoginError):
		await service.login("kakao", "bad", "https://app/callback")


@pytest.mark.asyncio
async def test_missing_profile_field_becomes_social_login_error():
	transport = _transport(
		{
			"POST oauth2.googleapis.com/token": httpx.Response(200, json={"access_token": "g-token"}),
			"GET www.googleapis.com/userinfo/v2/me": httpx.Response(200, content=json.dumps({"email": "x"})),
		}
	)
	service = SocialLoginService(_FakeUsers(), transport=transport)

	with pytest.raises(SocialLoginError):
		await service.login("google", "code", "https://app/callback")


@pytest.mark.asyncio
async def test_unknown_provider():
	with pytest.raises(ProviderNotSupportedError):
		await SocialLoginService(_FakeUsers()).login("myspace", "code", "https://app/callback")
