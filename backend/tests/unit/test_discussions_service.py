from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from agora.discussions.domain.exceptions import ValidationError
from agora.discussions.domain.outcomes import DeleteOutcome, UpdateOutcome
from agora.discussions.domain.services import DiscussionsService
from agora.discussions.schemas import dto
from agora.infra.auth import AuthenticatedUser

NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


def _payload(**overrides) -> dto.DiscussionWriteRequest:
	fields = dict(
		title="Remote work",
		content="Is it here to stay?",
		thumbnail="thumb.png",
		category=["work", "society"],
		image=["a.png", "b.png"],
		start_time=NOW + timedelta(hours=1),
		end_time=NOW + timedelta(days=1),
	)
	fields.update(overrides)
	return dto.DiscussionWriteRequest(**fields)


@pytest.fixture()
def service(store) -> DiscussionsService:
	return DiscussionsService(store, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_create_persists_children_and_zero_counters(service, store):
	owner = AuthenticatedUser(id=11)

	created = await service.create_discussion(owner, _payload())

	stored = store.discussions[created.id]
	assert stored.user_id == 11
	assert stored.categories == ["work", "society"]
	assert stored.images == ["a.png", "b.png"]
	assert stored.view_count == 0
	assert stored.like_count == 0


@pytest.mark.asyncio
async def test_create_rejects_invalid_input_without_writing(service, store):
	with pytest.raises(ValidationError):
		await service.create_discussion(AuthenticatedUser(id=1), _payload(category=["a", "b", "c", "d"]))
	assert store.discussions == {}


@pytest.mark.asyncio
async def test_update_replaces_child_sets_for_owner(service, store):
	existing = store.seed(user_id=5, categories=["old"], images=["old.png"])

	outcome = await service.update_discussion(
		AuthenticatedUser(id=5),
		existing.id,
		_payload(title="Renamed", category=["new"], image=[]),
	)

	assert outcome is UpdateOutcome.UPDATED
	stored = store.discussions[existing.id]
	assert stored.title == "Renamed"
	assert stored.categories == ["new"]
	assert stored.images == []
	assert stored.user_id == 5


@pytest.mark.asyncio
async def test_update_by_other_user_is_not_author(service, store):
	existing = store.seed(user_id=5, title="Original")

	outcome = await service.update_discussion(AuthenticatedUser(id=6), existing.id, _payload(title="Hijack"))

	assert outcome is UpdateOutcome.NOT_AUTHOR
	assert store.discussions[existing.id].title == "Original"


@pytest.mark.asyncio
async def test_update_missing_discussion(service):
	outcome = await service.update_discussion(AuthenticatedUser(id=5), 999, _payload())
	assert outcome is UpdateOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_delete_cascades_engagement_rows(service, store):
	existing = store.seed(user_id=5)
	store.likes.add((9, existing.id))
	store.bookmarks.add((9, existing.id))
	store.participants.add((9, existing.id))

	outcome = await service.delete_discussion(AuthenticatedUser(id=5), existing.id)

	assert outcome is DeleteOutcome.DELETED
	assert existing.id not in store.discussions
	assert not store.likes and not store.bookmarks and not store.participants


@pytest.mark.asyncio
async def test_delete_requires_owner_and_existence(service, store):
	existing = store.seed(user_id=5)

	assert await service.delete_discussion(AuthenticatedUser(id=6), existing.id) is DeleteOutcome.NOT_AUTHOR
	assert existing.id in store.discussions
	assert await service.delete_discussion(AuthenticatedUser(id=5), 12345) is DeleteOutcome.NOT_FOUND
	assert await service.delete_discussion(AuthenticatedUser(id=5), existing.id) is DeleteOutcome.DELETED
	assert await service.delete_discussion(AuthenticatedUser(id=5), existing.id) is DeleteOutcome.NOT_FOUND
