"""Identity data carried between the provider adapters, repository and service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class ProviderProfile:
	"""Normalised account data returned by an identity provider."""

	provider: str
	social_code: int
	social_id: str
	nickname: str
	email: Optional[str] = None
	image_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SocialUser:
	user_id: int
	email: Optional[str]


@dataclass(frozen=True, slots=True)
class LoginResult:
	access_token: str
	refresh_token: str
	email_required: bool
