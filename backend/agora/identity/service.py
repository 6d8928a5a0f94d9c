"""Social login orchestration."""

from __future__ import annotations

from typing import Optional

import httpx

from agora.identity import oauth
from agora.identity.exceptions import SocialLoginError
from agora.identity.models import LoginResult
from agora.identity.repo import SocialUsersRepository
from agora.infra import jwt as jwt_helper
from agora.obs import logging as obs_logging
from agora.obs import metrics as obs_metrics
from agora.settings import settings

logger = obs_logging.get_logger("agora.identity")


class SocialLoginService:
	def __init__(
		self,
		repository: SocialUsersRepository | None = None,
		*,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.repo = repository or SocialUsersRepository()
		self._transport = transport

	def _client(self) -> httpx.AsyncClient:
		return httpx.AsyncClient(timeout=settings.oauth_http_timeout_seconds, transport=self._transport)

	async def login(self, provider_name: str, code: str, redirect_uri: str) -> LoginResult:
		"""Exchange `code` with the provider, provision the local user on first login and issue tokens."""
		provider = oauth.get_provider(provider_name)
		try:
			async with self._client() as http:
				profile = await provider.authenticate(http, code, redirect_uri)
		except SocialLoginError:
			obs_metrics.inc_social_login(provider.name, "rejected")
			logger.warning("social_login_rejected", extra={"provider": provider.name})
			raise
		user = await self.repo.find_by_social_id(profile.social_code, profile.social_id)
		if user is None:
			user = await self.repo.create_social_user(profile)
			obs_metrics.inc_social_login(provider.name, "created")
			logger.info("social_user_created", extra={"provider": provider.name, "user_id": user.user_id})
		else:
			obs_metrics.inc_social_login(provider.name, "ok")
		return LoginResult(
			access_token=jwt_helper.encode_access(user.user_id),
			refresh_token=jwt_helper.encode_refresh(user.user_id),
			email_required=not user.email,
		)
