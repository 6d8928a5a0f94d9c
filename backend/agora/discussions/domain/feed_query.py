"""Paginated listing and detail assembly for discussions.

Both read paths enrich rows with the author's nickname and, for signed-in
viewers, whether the viewer bookmarked or liked each discussion. The detail
path additionally counts a view once per visitor address within the dedup TTL.
"""

from __future__ import annotations

import math
from typing import Any

from redis.exceptions import RedisError

from agora.discussions.domain import models, policies, repo as repo_module
from agora.discussions.domain.ports import DiscussionStore, ViewCache
from agora.discussions.infra.view_cache import ViewDedupCache, view_key
from agora.discussions.schemas import dto
from agora.infra.auth import AuthenticatedUser
from agora.obs import logging as obs_logging
from agora.obs import metrics as obs_metrics
from agora.settings import settings

logger = obs_logging.get_logger("agora.discussions.feed")


def _summary(
	discussion: models.Discussion,
	*,
	nickname: str | None,
	flags: models.ViewerFlags,
) -> dto.DiscussionSummary:
	return dto.DiscussionSummary(
		discussion_id=discussion.id,
		thumbnail=discussion.thumbnail,
		title=discussion.title,
		created_at=discussion.created_at,
		categories=list(discussion.categories),
		bookmarked=discussion.id in flags.bookmarked,
		liked=discussion.id in flags.liked,
		like=discussion.like_count,
		view=discussion.view_count,
		nickname=nickname,
	)


class DiscussionFeedQuery:
	def __init__(
		self,
		repository: DiscussionStore | None = None,
		cache: ViewCache | None = None,
		*,
		page_size: int | None = None,
		view_ttl_seconds: int | None = None,
	) -> None:
		self.repo = repository or repo_module.DiscussionsRepository()
		self.cache = cache or ViewDedupCache()
		self._page_size = page_size
		self._view_ttl = view_ttl_seconds

	@property
	def page_size(self) -> int:
		return self._page_size or settings.discussion_page_size

	@property
	def view_ttl(self) -> int:
		return self._view_ttl or settings.view_dedup_ttl_seconds

	async def _viewer_flags(self, viewer: AuthenticatedUser | None, ids: list[int]) -> models.ViewerFlags:
		if viewer is None or not ids:
			return models.ViewerFlags()
		return await self.repo.fetch_viewer_flags(viewer.id, ids)

	async def list_by_page(
		self,
		page: Any,
		sort: str | None,
		viewer: AuthenticatedUser | None,
	) -> dto.DiscussionListResponse:
		"""Return one page of summaries; `page` may be any raw query value."""
		current = policies.parse_page(page, page_size=self.page_size)
		size = self.page_size
		result = await self.repo.list_discussions(
			offset=policies.page_offset(current, size),
			limit=size,
			order=policies.resolve_order(sort),
		)
		ids = [item.id for item in result.items]
		nicknames = await self.repo.fetch_nicknames({item.user_id for item in result.items})
		flags = await self._viewer_flags(viewer, ids)
		summaries = [
			_summary(item, nickname=nicknames.get(item.user_id), flags=flags)
			for item in result.items
		]
		total_pages = math.ceil(result.total / size) if size else 0
		return dto.DiscussionListResponse(has_more=total_pages > current, discussions=summaries)

	async def get_detail(
		self,
		discussion_id: int,
		viewer: AuthenticatedUser | None,
		visitor_ip: str,
	) -> dto.DiscussionDetailResponse | None:
		discussion = await self.repo.get_discussion(discussion_id)
		if discussion is None:
			return None
		flags = await self._viewer_flags(viewer, [discussion.id])
		profile = await self.repo.get_profile(discussion.user_id)
		view = await self.increase_view_count(visitor_ip, discussion)
		return dto.DiscussionDetailResponse(
			discussion_id=discussion.id,
			user_id=discussion.user_id,
			nickname=profile.nickname if profile else None,
			title=discussion.title,
			content=discussion.content,
			thumbnail=discussion.thumbnail,
			categories=list(discussion.categories),
			images=list(discussion.images),
			start_time=discussion.start_time,
			end_time=discussion.end_time,
			created_at=discussion.created_at,
			updated_at=discussion.updated_at,
			like=discussion.like_count,
			view=view,
			bookmarked=discussion.id in flags.bookmarked,
			liked=discussion.id in flags.liked,
		)

	async def increase_view_count(self, visitor_ip: str, discussion: models.Discussion) -> int:
		"""Count one view per (visitor, discussion) within the TTL and return the view count.

		The seen-marker is claimed with SET NX before the counter moves, so two
		simultaneous requests from one visitor increment at most once. When the
		cache is unavailable the view is not counted.
		"""
		key = view_key(visitor_ip, discussion.id)
		try:
			claimed = await self.cache.claim(key, self.view_ttl)
		except RedisError:
			logger.warning("view_cache_unavailable", extra={"discussion_id": discussion.id})
			obs_metrics.inc_view(False)
			return discussion.view_count
		if not claimed:
			obs_metrics.inc_view(False)
			return discussion.view_count
		try:
			updated = await self.repo.increment_view(discussion.id)
		except Exception:
			await self._release_quietly(key)
			raise
		if updated is None:
			# Deleted between load and increment.
			await self._release_quietly(key)
			obs_metrics.inc_view(False)
			return discussion.view_count
		obs_metrics.inc_view(True)
		return updated

	async def _release_quietly(self, key: str) -> None:
		try:
			await self.cache.release(key)
		except RedisError:
			logger.warning("view_cache_release_failed", extra={"key": key})
