"""Async repository helpers for the discussions domain."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Iterable, Optional, Sequence

import asyncpg

from agora.discussions.domain import models
from agora.discussions.domain.exceptions import PersistenceError
from agora.infra.postgres import get_pool
from agora.obs import logging as obs_logging
from agora.obs import metrics as obs_metrics

logger = obs_logging.get_logger("agora.discussions.repo")

_STORAGE_FAULTS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

_ORDER_COLUMNS = {
	"created_at": "d.created_at",
	"view_count": "d.view_count",
}

_DISCUSSION_COLUMNS = """
	d.discussion_id AS id,
	d.user_id,
	d.title,
	d.content,
	d.thumbnail,
	d.start_time,
	d.end_time,
	d.view_count,
	d.like_count,
	d.created_at,
	d.updated_at,
	COALESCE(
		(SELECT array_agg(c.category ORDER BY c.position) FROM discussion_category c
		WHERE c.discussion_id = d.discussion_id),
		'{}'::text[]
	) AS categories,
	COALESCE(
		(SELECT array_agg(i.url ORDER BY i.position) FROM discussion_image i
		WHERE i.discussion_id = d.discussion_id),
		'{}'::text[]
	) AS images
"""


@asynccontextmanager
async def _storage_errors(operation: str) -> AsyncIterator[None]:
	"""Translate driver faults into PersistenceError once any open transaction has rolled back."""
	try:
		yield
	except _STORAGE_FAULTS as exc:
		logger.error(
			"persistence_failure",
			extra={"operation": operation, "error": type(exc).__name__},
			exc_info=True,
		)
		obs_metrics.inc_persistence_error(operation)
		raise PersistenceError(operation) from exc


def _to_discussion(record: asyncpg.Record) -> models.Discussion:
	payload = dict(record)
	payload["categories"] = list(payload.get("categories") or [])
	payload["images"] = list(payload.get("images") or [])
	return models.Discussion.model_validate(payload)


class DiscussionsRepository:
	"""Thin data-access layer around asyncpg."""

	# --- Discussion lifecycle ---------------------------------------------

	async def create_discussion(
		self,
		*,
		user_id: int,
		title: str,
		content: str,
		thumbnail: str,
		start_time: datetime,
		end_time: datetime,
		categories: Sequence[str],
		images: Sequence[str],
	) -> models.Discussion:
		async with _storage_errors("create_discussion"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				async with conn.transaction():
					record = await conn.fetchrow(
						"""
						INSERT INTO discussion (user_id, title, content, thumbnail, start_time, end_time,
							view_count, like_count)
						VALUES ($1, $2, $3, $4, $5, $6, 0, 0)
						RETURNING discussion_id
						""",
						user_id,
						title,
						content,
						thumbnail,
						start_time,
						end_time,
					)
					discussion_id = int(record["discussion_id"])
					await self._write_children(conn, discussion_id, categories, images)
					created = await self._fetch_discussion(conn, discussion_id)
		assert created is not None
		return created

	async def get_discussion(self, discussion_id: int) -> models.Discussion | None:
		async with _storage_errors("get_discussion"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				return await self._fetch_discussion(conn, discussion_id)

	async def update_discussion(
		self,
		discussion_id: int,
		*,
		title: str,
		content: str,
		thumbnail: str,
		start_time: datetime,
		end_time: datetime,
		categories: Sequence[str],
		images: Sequence[str],
	) -> bool:
		"""Overwrite the row and replace its category and image sets. False when the row is gone."""
		async with _storage_errors("update_discussion"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				async with conn.transaction():
					updated = await conn.fetchval(
						"""
						UPDATE discussion
						SET title=$2, content=$3, thumbnail=$4, start_time=$5, end_time=$6, updated_at=NOW()
						WHERE discussion_id=$1
						RETURNING discussion_id
						""",
						discussion_id,
						title,
						content,
						thumbnail,
						start_time,
						end_time,
					)
					if updated is None:
						return False
					await conn.execute("DELETE FROM discussion_category WHERE discussion_id=$1", discussion_id)
					await conn.execute("DELETE FROM discussion_image WHERE discussion_id=$1", discussion_id)
					await self._write_children(conn, discussion_id, categories, images)
		return True

	async def delete_discussion(self, discussion_id: int) -> bool:
		"""Remove the discussion and every row hanging off it in one transaction."""
		async with _storage_errors("delete_discussion"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				async with conn.transaction():
					# Parent row first, same order as the toggles
					locked = await conn.fetchval(
						"SELECT discussion_id FROM discussion WHERE discussion_id=$1 FOR UPDATE",
						discussion_id,
					)
					if locked is None:
						return False
					for table in (
						"discussion_category",
						"discussion_image",
						"discussion_bookmark",
						"discussion_like",
						"discussion_participant",
						"discussion_ban",
					):
						await conn.execute(f"DELETE FROM {table} WHERE discussion_id=$1", discussion_id)
					deleted = await conn.fetchval(
						"DELETE FROM discussion WHERE discussion_id=$1 RETURNING discussion_id",
						discussion_id,
					)
		return deleted is not None

	async def list_discussions(self, *, offset: int, limit: int, order: str) -> models.DiscussionPage:
		order_column = _ORDER_COLUMNS.get(order, _ORDER_COLUMNS["created_at"])
		query = f"""
			SELECT {_DISCUSSION_COLUMNS}
			FROM discussion d
			ORDER BY {order_column} DESC, d.discussion_id DESC
			LIMIT $1 OFFSET $2
		"""
		async with _storage_errors("list_discussions"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				async with conn.transaction(isolation="repeatable_read", readonly=True):
					total = await conn.fetchval("SELECT COUNT(*) FROM discussion")
					rows = await conn.fetch(query, limit, offset)
		return models.DiscussionPage(items=[_to_discussion(row) for row in rows], total=int(total or 0))

	# --- Views ------------------------------------------------------------

	async def increment_view(self, discussion_id: int) -> int | None:
		async with _storage_errors("increment_view"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				value = await conn.fetchval(
					"""
					UPDATE discussion SET view_count = view_count + 1
					WHERE discussion_id=$1
					RETURNING view_count
					""",
					discussion_id,
				)
		return int(value) if value is not None else None

	# --- Bookmarks and likes ----------------------------------------------

	async def toggle_bookmark(self, user_id: int, discussion_id: int) -> bool | None:
		"""Flip the bookmark row. Returns True when added, False when removed, None if no discussion."""
		async with _storage_errors("toggle_bookmark"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				async with conn.transaction():
					if not await self._lock_discussion(conn, discussion_id):
						return None
					inserted = await conn.fetchval(
						"""
						INSERT INTO discussion_bookmark (user_id, discussion_id)
						VALUES ($1, $2)
						ON CONFLICT (user_id, discussion_id) DO NOTHING
						RETURNING 1
						""",
						user_id,
						discussion_id,
					)
					if inserted is None:
						await conn.execute(
							"DELETE FROM discussion_bookmark WHERE user_id=$1 AND discussion_id=$2",
							user_id,
							discussion_id,
						)
		return inserted is not None

	async def toggle_like(self, user_id: int, discussion_id: int) -> tuple[bool, int] | None:
		"""Flip the like row and move the counter with it. Returns (liked, like_count)."""
		async with _storage_errors("toggle_like"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				async with conn.transaction():
					if not await self._lock_discussion(conn, discussion_id):
						return None
					inserted = await conn.fetchval(
						"""
						INSERT INTO discussion_like (user_id, discussion_id)
						VALUES ($1, $2)
						ON CONFLICT (user_id, discussion_id) DO NOTHING
						RETURNING 1
						""",
						user_id,
						discussion_id,
					)
					if inserted is not None:
						count = await conn.fetchval(
							"UPDATE discussion SET like_count = like_count + 1 WHERE discussion_id=$1 RETURNING like_count",
							discussion_id,
						)
					else:
						await conn.execute(
							"DELETE FROM discussion_like WHERE user_id=$1 AND discussion_id=$2",
							user_id,
							discussion_id,
						)
						count = await conn.fetchval(
							"""
							UPDATE discussion SET like_count = GREATEST(like_count - 1, 0)
							WHERE discussion_id=$1
							RETURNING like_count
							""",
							discussion_id,
						)
		return inserted is not None, int(count)

	async def fetch_viewer_flags(self, viewer_id: int, discussion_ids: Sequence[int]) -> models.ViewerFlags:
		if not discussion_ids:
			return models.ViewerFlags()
		async with _storage_errors("fetch_viewer_flags"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				rows = await conn.fetch(
					"""
					SELECT 'bookmark' AS kind, discussion_id FROM discussion_bookmark
					WHERE user_id=$1 AND discussion_id = ANY($2::bigint[])
					UNION ALL
					SELECT 'like' AS kind, discussion_id FROM discussion_like
					WHERE user_id=$1 AND discussion_id = ANY($2::bigint[])
					""",
					viewer_id,
					list(discussion_ids),
				)
		flags = models.ViewerFlags()
		for row in rows:
			target = flags.bookmarked if row["kind"] == "bookmark" else flags.liked
			target.add(int(row["discussion_id"]))
		return flags

	# --- Participation ----------------------------------------------------

	async def is_banned(self, user_id: int, discussion_id: int) -> bool:
		"""A ban row without a discussion applies to every discussion."""
		async with _storage_errors("is_banned"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				banned = await conn.fetchval(
					"""
					SELECT EXISTS (
						SELECT 1 FROM discussion_ban
						WHERE user_id=$1 AND (discussion_id=$2 OR discussion_id IS NULL)
					)
					""",
					user_id,
					discussion_id,
				)
		return bool(banned)

	async def add_participant(self, user_id: int, discussion_id: int) -> bool | None:
		"""Insert the participation row. False if it already existed, None if no discussion."""
		try:
			async with _storage_errors("add_participant"):
				pool = await get_pool()
				async with pool.acquire() as conn:
					inserted = await conn.fetchval(
						"""
						INSERT INTO discussion_participant (user_id, discussion_id)
						VALUES ($1, $2)
						ON CONFLICT (user_id, discussion_id) DO NOTHING
						RETURNING 1
						""",
						user_id,
						discussion_id,
					)
		except PersistenceError as exc:
			if isinstance(exc.__cause__, asyncpg.ForeignKeyViolationError):
				return None
			raise
		return inserted is not None

	async def remove_participant(self, user_id: int, discussion_id: int) -> bool:
		async with _storage_errors("remove_participant"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				removed = await conn.fetchval(
					"""
					DELETE FROM discussion_participant
					WHERE user_id=$1 AND discussion_id=$2
					RETURNING 1
					""",
					user_id,
					discussion_id,
				)
		return removed is not None

	# --- Profiles ---------------------------------------------------------

	async def get_profile(self, user_id: int) -> models.UserProfile | None:
		async with _storage_errors("get_profile"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				record = await conn.fetchrow(
					"SELECT user_id, nickname, image_url FROM user_profile WHERE user_id=$1",
					user_id,
				)
		return models.UserProfile.model_validate(dict(record)) if record else None

	async def fetch_nicknames(self, user_ids: Iterable[int]) -> dict[int, str]:
		unique_ids = sorted({int(user_id) for user_id in user_ids})
		if not unique_ids:
			return {}
		async with _storage_errors("fetch_nicknames"):
			pool = await get_pool()
			async with pool.acquire() as conn:
				rows = await conn.fetch(
					"SELECT user_id, nickname FROM user_profile WHERE user_id = ANY($1::bigint[])",
					unique_ids,
				)
		return {int(row["user_id"]): row["nickname"] for row in rows}

	# --- Internal helpers -------------------------------------------------

	@staticmethod
	async def _fetch_discussion(conn: asyncpg.Connection, discussion_id: int) -> Optional[models.Discussion]:
		record = await conn.fetchrow(
			f"SELECT {_DISCUSSION_COLUMNS} FROM discussion d WHERE d.discussion_id=$1",
			discussion_id,
		)
		return _to_discussion(record) if record else None

	@staticmethod
	async def _lock_discussion(conn: asyncpg.Connection, discussion_id: int) -> bool:
		# Serializes toggles per discussion without blocking child-row foreign key checks
		locked = await conn.fetchval(
			"SELECT discussion_id FROM discussion WHERE discussion_id=$1 FOR NO KEY UPDATE",
			discussion_id,
		)
		return locked is not None

	@staticmethod
	async def _write_children(
		conn: asyncpg.Connection,
		discussion_id: int,
		categories: Sequence[str],
		images: Sequence[str],
	) -> None:
		# Both sets land inside the caller's transaction; asyncpg runs one statement per connection at a time
		if categories:
			await conn.executemany(
				"INSERT INTO discussion_category (discussion_id, position, category) VALUES ($1, $2, $3)",
				[(discussion_id, idx, category) for idx, category in enumerate(categories)],
			)
		if images:
			await conn.executemany(
				"INSERT INTO discussion_image (discussion_id, position, url) VALUES ($1, $2, $3)",
				[(discussion_id, idx, url) for idx, url in enumerate(images)],
			)
