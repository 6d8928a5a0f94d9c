"""Storage and cache contracts the discussion engines depend on.

`DiscussionsRepository` (asyncpg) and `ViewDedupCache` (Redis) are the production
implementations; tests provide in-memory doubles with the same shape.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Protocol, Sequence

from agora.discussions.domain import models


class DiscussionStore(Protocol):
	"""Persistence operations for discussions and their engagement rows.

	Every mutating call is atomic on its own: create/update/delete run in one
	transaction, toggles flip the row and any counter together.
	"""

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
	) -> models.Discussion: ...

	async def get_discussion(self, discussion_id: int) -> models.Discussion | None: ...

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
	) -> bool: ...

	async def delete_discussion(self, discussion_id: int) -> bool: ...

	async def list_discussions(self, *, offset: int, limit: int, order: str) -> models.DiscussionPage: ...

	async def increment_view(self, discussion_id: int) -> int | None: ...

	async def toggle_bookmark(self, user_id: int, discussion_id: int) -> bool | None: ...

	async def toggle_like(self, user_id: int, discussion_id: int) -> tuple[bool, int] | None: ...

	async def fetch_viewer_flags(self, viewer_id: int, discussion_ids: Sequence[int]) -> models.ViewerFlags: ...

	async def is_banned(self, user_id: int, discussion_id: int) -> bool: ...

	async def add_participant(self, user_id: int, discussion_id: int) -> bool | None: ...

	async def remove_participant(self, user_id: int, discussion_id: int) -> bool: ...

	async def get_profile(self, user_id: int) -> models.UserProfile | None: ...

	async def fetch_nicknames(self, user_ids: Iterable[int]) -> dict[int, str]: ...


class ViewCache(Protocol):
	"""Ephemeral seen-markers keyed by visitor address and discussion."""

	async def has(self, key: str) -> bool: ...

	async def set(self, key: str, ttl: int) -> None: ...

	async def claim(self, key: str, ttl: int) -> bool: ...

	async def release(self, key: str) -> None: ...
