"""Domain models for discussion entities."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Discussion(BaseModel):
	"""A discussion thread together with its category and image sets."""

	id: int
	user_id: int
	title: str
	content: str
	thumbnail: str
	start_time: datetime
	end_time: datetime
	view_count: int = 0
	like_count: int = 0
	categories: list[str] = Field(default_factory=list)
	images: list[str] = Field(default_factory=list)
	created_at: datetime
	updated_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class DiscussionPage(BaseModel):
	"""One page of discussions plus the total number of rows."""

	items: list[Discussion]
	total: int


class ViewerFlags(BaseModel):
	"""Which discussions of a page the viewer bookmarked or liked."""

	bookmarked: set[int] = Field(default_factory=set)
	liked: set[int] = Field(default_factory=set)


class UserProfile(BaseModel):
	user_id: int
	nickname: str
	image_url: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)
