"""Exceptions raised by the social login flow."""

from __future__ import annotations

from fastapi import status


class IdentityError(Exception):
	"""Base class for identity errors surfaced to the API."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "identity_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class SocialLoginError(IdentityError):
	"""The provider rejected the code or returned an unusable profile."""

	status_code = status.HTTP_401_UNAUTHORIZED
	detail = "social_login_failed"


class ProviderNotSupportedError(IdentityError):
	status_code = status.HTTP_404_NOT_FOUND
	detail = "provider_not_supported"
