from __future__ import annotations

import asyncio

import pytest

from agora.discussions.domain.engagement_service import EngagementService
from agora.discussions.domain.outcomes import JoinOutcome, LeaveOutcome
from agora.infra.auth import AuthenticatedUser

USER = AuthenticatedUser(id=3)


@pytest.fixture()
def service(store) -> EngagementService:
	return EngagementService(store)


@pytest.mark.asyncio
async def test_bookmark_toggle_flips_membership(service, store):
	discussion = store.seed()

	first = await service.toggle_bookmark(USER, discussion.id)
	second = await service.toggle_bookmark(USER, discussion.id)

	assert first.added is True
	assert second.added is False
	assert store.bookmarks == set()


@pytest.mark.asyncio
async def test_bookmark_on_missing_discussion_returns_none(service):
	assert await service.toggle_bookmark(USER, 404) is None


@pytest.mark.asyncio
async def test_like_toggle_reports_post_toggle_count(service, store):
	discussion = store.seed(like_count=4)

	liked = await service.toggle_like(USER, discussion.id)
	assert (liked.liked, liked.like_count) == (True, 5)

	unliked = await service.toggle_like(USER, discussion.id)
	assert (unliked.liked, unliked.like_count) == (False, 4)


@pytest.mark.asyncio
async def test_concurrent_like_toggles_keep_counter_consistent(service, store):
	discussion = store.seed()

	results = await asyncio.gather(*(service.toggle_like(USER, discussion.id) for _ in range(2)))

	assert sorted(result.liked for result in results) == [False, True]
	assert store.discussions[discussion.id].like_count == 0
	assert store.likes == set()


@pytest.mark.asyncio
async def test_like_counter_matches_rows_across_users(service, store):
	discussion = store.seed()
	users = [AuthenticatedUser(id=uid) for uid in range(1, 6)]

	await asyncio.gather(*(service.toggle_like(user, discussion.id) for user in users))
	await service.toggle_like(users[0], discussion.id)

	assert store.discussions[discussion.id].like_count == len(store.likes) == 4


@pytest.mark.asyncio
async def test_join_then_join_again(service, store):
	discussion = store.seed()

	assert await service.join_discussion(USER, discussion.id) is JoinOutcome.JOINED
	assert await service.join_discussion(USER, discussion.id) is JoinOutcome.ALREADY_PARTICIPATING


@pytest.mark.asyncio
async def test_join_missing_discussion(service):
	assert await service.join_discussion(USER, 77) is JoinOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_banned_user_cannot_join(service, store):
	discussion = store.seed()
	store.bans.add((USER.id, discussion.id))

	assert await service.join_discussion(USER, discussion.id) is JoinOutcome.BANNED
	assert store.participants == set()


@pytest.mark.asyncio
async def test_global_ban_applies_to_every_discussion(service, store):
	discussion = store.seed()
	store.bans.add((USER.id, None))

	assert await service.join_discussion(USER, discussion.id) is JoinOutcome.BANNED


@pytest.mark.asyncio
async def test_leave_after_join(service, store):
	discussion = store.seed()
	await service.join_discussion(USER, discussion.id)

	assert await service.leave_discussion(USER, discussion.id) is LeaveOutcome.LEFT
	assert await service.leave_discussion(USER, discussion.id) is LeaveOutcome.NOT_PARTICIPATING


@pytest.mark.asyncio
async def test_banned_non_participant_gets_banned_on_leave(service, store):
	discussion = store.seed()
	store.bans.add((USER.id, discussion.id))

	assert await service.leave_discussion(USER, discussion.id) is LeaveOutcome.BANNED
