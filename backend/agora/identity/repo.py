"""Persistence for locally provisioned social accounts."""

from __future__ import annotations

from typing import Optional

from agora.identity.models import ProviderProfile, SocialUser
from agora.infra.postgres import get_pool


class SocialUsersRepository:
	async def find_by_social_id(self, social_code: int, social_id: str) -> Optional[SocialUser]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			record = await conn.fetchrow(
				"SELECT user_id, email FROM app_user WHERE social_code=$1 AND social_id=$2",
				social_code,
				social_id,
			)
		return SocialUser(user_id=int(record["user_id"]), email=record["email"]) if record else None

	async def create_social_user(self, profile: ProviderProfile) -> SocialUser:
		"""Insert the account and its profile together; a concurrent first login reuses the winner's row."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				record = await conn.fetchrow(
					"""
					INSERT INTO app_user (email, social_code, social_type, social_id)
					VALUES ($1, $2, $3, $4)
					ON CONFLICT (social_code, social_id) DO NOTHING
					RETURNING user_id, email
					""",
					profile.email,
					profile.social_code,
					profile.provider,
					profile.social_id,
				)
				if record is None:
					record = await conn.fetchrow(
						"SELECT user_id, email FROM app_user WHERE social_code=$1 AND social_id=$2",
						profile.social_code,
						profile.social_id,
					)
					return SocialUser(user_id=int(record["user_id"]), email=record["email"])
				await conn.execute(
					"""
					INSERT INTO user_profile (user_id, nickname, image_url)
					VALUES ($1, $2, $3)
					""",
					record["user_id"],
					profile.nickname,
					profile.image_url,
				)
		return SocialUser(user_id=int(record["user_id"]), email=record["email"])
