"""Service layer orchestrating the discussion lifecycle."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from agora.discussions.domain import models, policies, repo as repo_module
from agora.discussions.domain.outcomes import AuthorCheck, DeleteOutcome, UpdateOutcome
from agora.discussions.domain.ports import DiscussionStore
from agora.discussions.schemas import dto
from agora.infra.auth import AuthenticatedUser
from agora.obs import logging as obs_logging
from agora.obs import metrics as obs_metrics
from agora.settings import settings

logger = obs_logging.get_logger("agora.discussions")


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class DiscussionsService:
	"""Create, update and delete discussions on behalf of their authors."""

	def __init__(
		self,
		repository: DiscussionStore | None = None,
		*,
		clock: Callable[[], datetime] = _utcnow,
		max_categories: int | None = None,
	) -> None:
		self.repo = repository or repo_module.DiscussionsRepository()
		self._clock = clock
		self._max_categories = max_categories

	def _validate(self, payload: dto.DiscussionWriteRequest) -> None:
		policies.validate_discussion_input(
			title=payload.title,
			content=payload.content,
			thumbnail=payload.thumbnail,
			categories=payload.category,
			start_time=payload.start_time,
			end_time=payload.end_time,
			max_categories=self._max_categories or settings.discussion_max_categories,
			now=self._clock(),
		)

	async def create_discussion(
		self,
		user: AuthenticatedUser,
		payload: dto.DiscussionWriteRequest,
	) -> models.Discussion:
		self._validate(payload)
		discussion = await self.repo.create_discussion(
			user_id=user.id,
			title=payload.title or "",
			content=payload.content or "",
			thumbnail=payload.thumbnail or "",
			start_time=payload.start_time,  # type: ignore[arg-type]
			end_time=payload.end_time,  # type: ignore[arg-type]
			categories=list(payload.category),
			images=list(payload.image),
		)
		obs_metrics.inc_discussion_created()
		logger.info("discussion_created", extra={"discussion_id": discussion.id, "author_id": user.id})
		return discussion

	async def update_discussion(
		self,
		user: AuthenticatedUser,
		discussion_id: int,
		payload: dto.DiscussionWriteRequest,
	) -> UpdateOutcome:
		self._validate(payload)
		discussion = await self.repo.get_discussion(discussion_id)
		if discussion is None:
			outcome = UpdateOutcome.NOT_FOUND
		elif policies.check_author(discussion.user_id, user.id) is AuthorCheck.NOT_AUTHOR:
			outcome = UpdateOutcome.NOT_AUTHOR
		else:
			updated = await self.repo.update_discussion(
				discussion_id,
				title=payload.title or "",
				content=payload.content or "",
				thumbnail=payload.thumbnail or "",
				start_time=payload.start_time,  # type: ignore[arg-type]
				end_time=payload.end_time,  # type: ignore[arg-type]
				categories=list(payload.category),
				images=list(payload.image),
			)
			outcome = UpdateOutcome.UPDATED if updated else UpdateOutcome.NOT_FOUND
		obs_metrics.inc_discussion_mutation("update", outcome.value)
		return outcome

	async def delete_discussion(self, user: AuthenticatedUser, discussion_id: int) -> DeleteOutcome:
		discussion = await self.repo.get_discussion(discussion_id)
		if discussion is None:
			outcome = DeleteOutcome.NOT_FOUND
		elif policies.check_author(discussion.user_id, user.id) is AuthorCheck.NOT_AUTHOR:
			outcome = DeleteOutcome.NOT_AUTHOR
		else:
			deleted = await self.repo.delete_discussion(discussion_id)
			outcome = DeleteOutcome.DELETED if deleted else DeleteOutcome.NOT_FOUND
		obs_metrics.inc_discussion_mutation("delete", outcome.value)
		if outcome is DeleteOutcome.DELETED:
			logger.info("discussion_deleted", extra={"discussion_id": discussion_id, "author_id": user.id})
		return outcome
