"""Bookmark, like and participation flows."""

from __future__ import annotations

from agora.discussions.domain import repo as repo_module
from agora.discussions.domain.outcomes import BookmarkToggle, JoinOutcome, LeaveOutcome, LikeToggle
from agora.discussions.domain.ports import DiscussionStore
from agora.infra.auth import AuthenticatedUser
from agora.obs import metrics as obs_metrics


class EngagementService:
	def __init__(self, repository: DiscussionStore | None = None) -> None:
		self.repo = repository or repo_module.DiscussionsRepository()

	async def toggle_bookmark(self, user: AuthenticatedUser, discussion_id: int) -> BookmarkToggle | None:
		"""Returns None when the discussion does not exist."""
		added = await self.repo.toggle_bookmark(user.id, discussion_id)
		if added is None:
			return None
		obs_metrics.inc_bookmark_toggle(added)
		return BookmarkToggle(added=added)

	async def toggle_like(self, user: AuthenticatedUser, discussion_id: int) -> LikeToggle | None:
		"""Flip the like and report the counter as it stands after the flip."""
		result = await self.repo.toggle_like(user.id, discussion_id)
		if result is None:
			return None
		liked, like_count = result
		obs_metrics.inc_like_toggle(liked)
		return LikeToggle(liked=liked, like_count=like_count)

	async def join_discussion(self, user: AuthenticatedUser, discussion_id: int) -> JoinOutcome:
		if await self.repo.is_banned(user.id, discussion_id):
			outcome = JoinOutcome.BANNED
		else:
			created = await self.repo.add_participant(user.id, discussion_id)
			if created is None:
				outcome = JoinOutcome.NOT_FOUND
			elif created:
				outcome = JoinOutcome.JOINED
			else:
				outcome = JoinOutcome.ALREADY_PARTICIPATING
		obs_metrics.inc_participation("join", outcome.value)
		return outcome

	async def leave_discussion(self, user: AuthenticatedUser, discussion_id: int) -> LeaveOutcome:
		# Ban status wins over participation state, same precedence as joining
		if await self.repo.is_banned(user.id, discussion_id):
			outcome = LeaveOutcome.BANNED
		elif await self.repo.remove_participant(user.id, discussion_id):
			outcome = LeaveOutcome.LEFT
		else:
			outcome = LeaveOutcome.NOT_PARTICIPATING
		obs_metrics.inc_participation("leave", outcome.value)
		return outcome
