"""Bookmark, like and participation routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from agora.discussions.api._errors import not_found, to_http_error
from agora.discussions.api._params import DiscussionId
from agora.discussions.domain.engagement_service import EngagementService
from agora.discussions.domain.outcomes import JoinOutcome, LeaveOutcome
from agora.discussions.schemas import dto
from agora.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["discussions:engagement"])
_service = EngagementService()

_JOIN_RESPONSES: dict[JoinOutcome, tuple[int, str]] = {
	JoinOutcome.JOINED: (status.HTTP_201_CREATED, "joined"),
	JoinOutcome.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "discussion_not_found"),
	JoinOutcome.BANNED: (status.HTTP_403_FORBIDDEN, "banned"),
	JoinOutcome.ALREADY_PARTICIPATING: (status.HTTP_409_CONFLICT, "already_participating"),
}

_LEAVE_RESPONSES: dict[LeaveOutcome, tuple[int, str]] = {
	LeaveOutcome.LEFT: (status.HTTP_200_OK, "left"),
	LeaveOutcome.BANNED: (status.HTTP_403_FORBIDDEN, "banned"),
	LeaveOutcome.NOT_PARTICIPATING: (status.HTTP_404_NOT_FOUND, "not_participating"),
}


@router.post("/discussions/{discussion_id}/bookmark", response_model=dto.BookmarkToggleResponse)
async def toggle_bookmark_endpoint(
	discussion_id: DiscussionId,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.BookmarkToggleResponse:
	try:
		result = await _service.toggle_bookmark(auth_user, discussion_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	if result is None:
		raise not_found()
	return dto.BookmarkToggleResponse(added=result.added)


@router.post("/discussions/{discussion_id}/like", response_model=dto.LikeToggleResponse)
async def toggle_like_endpoint(
	discussion_id: DiscussionId,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.LikeToggleResponse:
	try:
		result = await _service.toggle_like(auth_user, discussion_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	if result is None:
		raise not_found()
	return dto.LikeToggleResponse(liked=result.liked, like_count=result.like_count)


@router.post("/discussions/{discussion_id}/participants", response_model=dto.MessageResponse, status_code=201)
async def join_discussion_endpoint(
	discussion_id: DiscussionId,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.MessageResponse:
	try:
		outcome = await _service.join_discussion(auth_user, discussion_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	code, message = _JOIN_RESPONSES[outcome]
	if code >= 400:
		raise HTTPException(status_code=code, detail=message)
	return dto.MessageResponse(message=message)


@router.delete("/discussions/{discussion_id}/participants", response_model=dto.MessageResponse)
async def leave_discussion_endpoint(
	discussion_id: DiscussionId,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.MessageResponse:
	try:
		outcome = await _service.leave_discussion(auth_user, discussion_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	code, message = _LEAVE_RESPONSES[outcome]
	if code >= 400:
		raise HTTPException(status_code=code, detail=message)
	return dto.MessageResponse(message=message)
