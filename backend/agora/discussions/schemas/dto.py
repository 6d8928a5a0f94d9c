"""Pydantic schemas for the discussions API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DiscussionWriteRequest(CamelModel):
	"""Full field set for create and update; categories and images are replaced wholesale."""

	title: Optional[str] = None
	content: Optional[str] = None
	thumbnail: Optional[str] = None
	category: List[str] = Field(default_factory=list)
	image: List[str] = Field(default_factory=list)
	start_time: Optional[datetime] = None
	end_time: Optional[datetime] = None


class DiscussionCreatedResponse(CamelModel):
	message: str = "created"
	discussion_id: int


class MessageResponse(CamelModel):
	message: str


class DiscussionSummary(CamelModel):
	discussion_id: int
	thumbnail: str
	title: str
	created_at: datetime
	categories: List[str]
	bookmarked: bool = False
	liked: bool = False
	like: int
	view: int
	nickname: Optional[str] = None


class DiscussionListResponse(CamelModel):
	has_more: bool
	discussions: List[DiscussionSummary]


class DiscussionDetailResponse(CamelModel):
	discussion_id: int
	user_id: int
	nickname: Optional[str] = None
	title: str
	content: str
	thumbnail: str
	categories: List[str]
	images: List[str]
	start_time: datetime
	end_time: datetime
	created_at: datetime
	updated_at: Optional[datetime] = None
	like: int
	view: int
	bookmarked: bool = False
	liked: bool = False


class BookmarkToggleResponse(CamelModel):
	added: bool


class LikeToggleResponse(CamelModel):
	liked: bool
	like_count: int
