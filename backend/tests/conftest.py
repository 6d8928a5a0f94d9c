import asyncio
import itertools
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("ENV", "test")

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from agora.discussions.domain import models
from agora.infra import jwt as jwt_helper
from agora.infra import postgres
from agora.main import app


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from agora.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


def auth_headers(user_id: int) -> dict[str, str]:
	return {"Authorization": f"Bearer {jwt_helper.encode_access(user_id)}"}


@pytest.fixture()
def bearer():
	return auth_headers


class InMemoryDiscussionStore:
	"""Dict-backed stand-in for DiscussionsRepository.

	A single lock plays the part of the row lock the SQL toggles take.
	"""

	def __init__(self) -> None:
		self.discussions: dict[int, models.Discussion] = {}
		self.bookmarks: set[tuple[int, int]] = set()
		self.likes: set[tuple[int, int]] = set()
		self.participants: set[tuple[int, int]] = set()
		self.bans: set[tuple[int, int | None]] = set()
		self.profiles: dict[int, models.UserProfile] = {}
		self.view_increments = 0
		self._ids = itertools.count(1)
		self._lock = asyncio.Lock()

	def seed(self, *, user_id: int = 1, created_offset: int = 0, view_count: int = 0, **fields) -> models.Discussion:
		now = datetime.now(timezone.utc)
		discussion_id = next(self._ids)
		discussion = models.Discussion(
			id=discussion_id,
			user_id=user_id,
			title=fields.get("title", f"Discussion {discussion_id}"),
			content=fields.get("content", "body"),
			thumbnail=fields.get("thumbnail", "thumb.png"),
			start_time=now + timedelta(days=1),
			end_time=now + timedelta(days=2),
			view_count=view_count,
			like_count=fields.get("like_count", 0),
			categories=list(fields.get("categories", [])),
			images=list(fields.get("images", [])),
			created_at=now + timedelta(seconds=created_offset),
		)
		self.discussions[discussion_id] = discussion
		return discussion

	async def create_discussion(self, *, user_id, title, content, thumbnail, start_time, end_time, categories, images):
		discussion_id = next(self._ids)
		discussion = models.Discussion(
			id=discussion_id,
			user_id=user_id,
			title=title,
			content=content,
			thumbnail=thumbnail,
			start_time=start_time,
			end_time=end_time,
			categories=list(categories),
			images=list(images),
			created_at=datetime.now(timezone.utc),
		)
		self.discussions[discussion_id] = discussion
		return discussion

	async def get_discussion(self, discussion_id: int):
		discussion = self.discussions.get(discussion_id)
		return discussion.model_copy(deep=True) if discussion else None

	async def update_discussion(self, discussion_id: int, **fields) -> bool:
		current = self.discussions.get(discussion_id)
		if current is None:
			return False
		categories = fields.pop("categories")
		images = fields.pop("images")
		self.discussions[discussion_id] = current.model_copy(
			update={**fields, "categories": list(categories), "images": list(images), "updated_at": datetime.now(timezone.utc)}
		)
		return True

	async def delete_discussion(self, discussion_id: int) -> bool:
		if self.discussions.pop(discussion_id, None) is None:
			return False
		for rows in (self.bookmarks, self.likes, self.participants):
			rows.difference_update({row for row in rows if row[1] == discussion_id})
		self.bans.difference_update({row for row in self.bans if row[1] == discussion_id})
		return True

	async def list_discussions(self, *, offset: int, limit: int, order: str):
		key = (lambda d: (d.view_count, d.id)) if order == "view_count" else (lambda d: (d.created_at, d.id))
		rows = sorted(self.discussions.values(), key=key, reverse=True)
		return models.DiscussionPage(items=rows[offset:offset + limit], total=len(rows))

	async def increment_view(self, discussion_id: int):
		discussion = self.discussions.get(discussion_id)
		if discussion is None:
			return None
		discussion.view_count += 1
		self.view_increments += 1
		return discussion.view_count

	async def toggle_bookmark(self, user_id: int, discussion_id: int):
		async with self._lock:
			if discussion_id not in self.discussions:
				return None
			key = (user_id, discussion_id)
			if key in self.bookmarks:
				self.bookmarks.discard(key)
				return False
			self.bookmarks.add(key)
			return True

	async def toggle_like(self, user_id: int, discussion_id: int):
		async with self._lock:
			discussion = self.discussions.get(discussion_id)
			if discussion is None:
				return None
			key = (user_id, discussion_id)
			# Yield inside the critical section so racing callers really interleave
			await asyncio.sleep(0)
			if key in self.likes:
				self.likes.discard(key)
				discussion.like_count -= 1
				return False, discussion.like_count
			self.likes.add(key)
			discussion.like_count += 1
			return True, discussion.like_count

	async def fetch_viewer_flags(self, viewer_id: int, discussion_ids: Sequence[int]):
		wanted = set(discussion_ids)
		return models.ViewerFlags(
			bookmarked={d for (u, d) in self.bookmarks if u == viewer_id and d in wanted},
			liked={d for (u, d) in self.likes if u == viewer_id and d in wanted},
		)

	async def is_banned(self, user_id: int, discussion_id: int) -> bool:
		return (user_id, discussion_id) in self.bans or (user_id, None) in self.bans

	async def add_participant(self, user_id: int, discussion_id: int):
		if discussion_id not in self.discussions:
			return None
		key = (user_id, discussion_id)
		if key in self.participants:
			return False
		self.participants.add(key)
		return True

	async def remove_participant(self, user_id: int, discussion_id: int) -> bool:
		key = (user_id, discussion_id)
		if key not in self.participants:
			return False
		self.participants.discard(key)
		return True

	async def get_profile(self, user_id: int):
		return self.profiles.get(user_id)

	async def fetch_nicknames(self, user_ids: Iterable[int]):
		return {uid: self.profiles[uid].nickname for uid in set(user_ids) if uid in self.profiles}


@pytest.fixture()
def store() -> InMemoryDiscussionStore:
	return InMemoryDiscussionStore()
