"""Provider adapters for Kakao, GitHub and Google authorization-code logins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs

import httpx

from agora.identity.exceptions import ProviderNotSupportedError, SocialLoginError
from agora.identity.models import ProviderProfile
from agora.settings import settings

KAKAO = 1
GITHUB = 2
GOOGLE = 3


@dataclass(frozen=True, slots=True)
class ProviderConfig:
	name: str
	social_code: int
	token_url: str
	profile_url: str
	client_id: Optional[str]
	client_secret: Optional[str]


class SocialProvider:
	"""Exchange an authorization code and fetch the account behind it."""

	config: ProviderConfig

	def __init__(self, config: ProviderConfig) -> None:
		self.config = config

	@property
	def name(self) -> str:
		return self.config.name

	def token_params(self, code: str, redirect_uri: str) -> Dict[str, str]:
		return {
			"grant_type": "authorization_code",
			"code": code,
			"client_id": self.config.client_id or "",
			"client_secret": self.config.client_secret or "",
			"redirect_uri": redirect_uri,
		}

	def read_access_token(self, response: httpx.Response) -> Optional[str]:
		return response.json().get("access_token")

	def parse_profile(self, payload: Mapping[str, Any]) -> ProviderProfile:
		raise NotImplementedError

	async def exchange_code(self, http: httpx.AsyncClient, code: str, redirect_uri: str) -> str:
		response = await http.post(
			self.config.token_url,
			data=self.token_params(code, redirect_uri),
			headers={"Accept": "application/json"},
		)
		response.raise_for_status()
		token = self.read_access_token(response)
		if not token:
			raise SocialLoginError()
		return str(token)

	async def fetch_profile(self, http: httpx.AsyncClient, access_token: str) -> ProviderProfile:
		response = await http.get(
			self.config.profile_url,
			headers={"Authorization": f"Bearer {access_token}"},
		)
		response.raise_for_status()
		return self.parse_profile(response.json())

	async def authenticate(self, http: httpx.AsyncClient, code: str, redirect_uri: str) -> ProviderProfile:
		"""Run the full exchange; every transport or payload problem becomes SocialLoginError."""
		try:
			token = await self.exchange_code(http, code, redirect_uri)
			return await self.fetch_profile(http, token)
		except SocialLoginError:
			raise
		except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
			raise SocialLoginError() from exc


class KakaoProvider(SocialProvider):
	def parse_profile(self, payload: Mapping[str, Any]) -> ProviderProfile:
		account = payload.get("kakao_account") or {}
		profile = account.get("profile") or {}
		return ProviderProfile(
			provider=self.name,
			social_code=self.config.social_code,
			social_id=str(payload["id"]),
			nickname=str(profile["nickname"]),
			email=account.get("email") or None,
			image_url=profile.get("profile_image_url"),
		)


class GithubProvider(SocialProvider):
	def token_params(self, code: str, redirect_uri: str) -> Dict[str, str]:
		params = super().token_params(code, redirect_uri)
		params.pop("grant_type")
		return params

	def read_access_token(self, response: httpx.Response) -> Optional[str]:
		# GitHub answers form-encoded unless the Accept header was honoured
		content_type = response.headers.get("content-type", "")
		if "json" in content_type:
			return response.json().get("access_token")
		values = parse_qs(response.text).get("access_token")
		return values[0] if values else None

	def parse_profile(self, payload: Mapping[str, Any]) -> ProviderProfile:
		return ProviderProfile(
			provider=self.name,
			social_code=self.config.social_code,
			social_id=str(payload["id"]),
			nickname=str(payload.get("name") or payload["login"]),
			email=payload.get("email") or None,
			image_url=payload.get("avatar_url"),
		)


class GoogleProvider(SocialProvider):
	def parse_profile(self, payload: Mapping[str, Any]) -> ProviderProfile:
		return ProviderProfile(
			provider=self.name,
			social_code=self.config.social_code,
			social_id=str(payload["id"]),
			nickname=str(payload["name"]),
			email=payload.get("email") or None,
			image_url=payload.get("picture"),
		)


def _build_providers() -> Dict[str, SocialProvider]:
	return {
		"kakao": KakaoProvider(
			ProviderConfig(
				name="kakao",
				social_code=KAKAO,
				token_url="https://kauth.kakao.com/oauth/token",
				profile_url="https://kapi.kakao.com/v2/user/me",
				client_id=settings.kakao_client_id,
				client_secret=settings.kakao_client_secret,
			)
		),
		"github": GithubProvider(
			ProviderConfig(
				name="github",
				social_code=GITHUB,
				token_url="https://github.com/login/oauth/access_token",
				profile_url="https://api.github.com/user",
				client_id=settings.github_client_id,
				client_secret=settings.github_client_secret,
			)
		),
		"google": GoogleProvider(
			ProviderConfig(
				name="google",
				social_code=GOOGLE,
				token_url="https://oauth2.googleapis.com/token",
				profile_url="https://www.googleapis.com/userinfo/v2/me",
				client_id=settings.google_client_id,
				client_secret=settings.google_client_secret,
			)
		),
	}


def get_provider(name: str) -> SocialProvider:
	provider = _build_providers().get(name.lower())
	if provider is None:
		raise ProviderNotSupportedError()
	return provider


__all__ = ["GITHUB", "GOOGLE", "KAKAO", "SocialProvider", "get_provider"]
