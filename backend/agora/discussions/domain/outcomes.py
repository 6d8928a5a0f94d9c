"""Closed outcome types returned by the discussion engines.

Expected domain results (missing discussion, wrong author, banned user ...) are values,
not exceptions. Each operation has its own enum so callers can map every member.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AuthorCheck(Enum):
	AUTHOR = "author"
	NOT_AUTHOR = "not_author"


class UpdateOutcome(Enum):
	UPDATED = "updated"
	NOT_FOUND = "not_found"
	NOT_AUTHOR = "not_author"


class DeleteOutcome(Enum):
	DELETED = "deleted"
	NOT_FOUND = "not_found"
	NOT_AUTHOR = "not_author"


class JoinOutcome(Enum):
	JOINED = "joined"
	NOT_FOUND = "not_found"
	BANNED = "banned"
	ALREADY_PARTICIPATING = "already_participating"


class LeaveOutcome(Enum):
	LEFT = "left"
	BANNED = "banned"
	NOT_PARTICIPATING = "not_participating"


@dataclass(frozen=True, slots=True)
class BookmarkToggle:
	added: bool


@dataclass(frozen=True, slots=True)
class LikeToggle:
	liked: bool
	like_count: int
