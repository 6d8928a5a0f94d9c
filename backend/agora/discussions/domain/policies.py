"""Input and authorization policies for discussion operations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Sequence

from agora.discussions.domain.exceptions import ValidationError
from agora.discussions.domain.outcomes import AuthorCheck

SORT_BY_VIEWS = "views"
ORDER_BY_CREATED = "created_at"
ORDER_BY_VIEWS = "view_count"

# Largest value a BIGINT column or OFFSET accepts
PG_BIGINT_MAX = 2**63 - 1


def _aware(value: datetime) -> datetime:
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value


def ensure_required_fields(**fields: Any) -> None:
	for name, value in fields.items():
		if value is None or value == "":
			raise ValidationError(f"missing_{name}")


def ensure_category_limit(categories: Sequence[str], *, limit: int) -> None:
	if len(categories) > limit:
		raise ValidationError("too_many_categories")


def ensure_time_window(start_time: datetime, end_time: datetime, *, now: datetime) -> None:
	"""startTime may not lie in the past and endTime must come strictly after it."""
	start = _aware(start_time)
	end = _aware(end_time)
	if start < _aware(now):
		raise ValidationError("start_time_in_past")
	if end <= start:
		raise ValidationError("end_time_before_start")


def validate_discussion_input(
	*,
	title: str | None,
	content: str | None,
	thumbnail: str | None,
	categories: Sequence[str],
	start_time: datetime | None,
	end_time: datetime | None,
	max_categories: int,
	now: datetime | None = None,
) -> None:
	ensure_required_fields(
		title=title,
		content=content,
		thumbnail=thumbnail,
		start_time=start_time,
		end_time=end_time,
	)
	ensure_category_limit(categories, limit=max_categories)
	assert start_time is not None and end_time is not None
	ensure_time_window(start_time, end_time, now=now or datetime.now(timezone.utc))


def check_author(owner_id: int, requester_id: int) -> AuthorCheck:
	"""Shared ownership guard for update and delete."""
	if int(owner_id) != int(requester_id):
		return AuthorCheck.NOT_AUTHOR
	return AuthorCheck.AUTHOR


def parse_page(raw: Any, *, page_size: int = 1) -> int:
	"""Pages start at 1; anything unparsable or below 1 falls back to the first page.

	Pages past the last representable offset are pinned to it, which reads as an empty page.
	"""
	try:
		page = int(raw)
	except (TypeError, ValueError):
		return 1
	if page < 1:
		return 1
	return min(page, PG_BIGINT_MAX // max(1, page_size) + 1)


def resolve_order(sort: str | None) -> str:
	if sort == SORT_BY_VIEWS:
		return ORDER_BY_VIEWS
	return ORDER_BY_CREATED


def page_offset(page: int, page_size: int) -> int:
	return (page - 1) * page_size
