"""Discussion CRUD, listing and detail routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from agora.discussions.api._errors import not_found, to_http_error
from agora.discussions.api._params import DiscussionId
from agora.discussions.domain.feed_query import DiscussionFeedQuery
from agora.discussions.domain.outcomes import DeleteOutcome, UpdateOutcome
from agora.discussions.domain.services import DiscussionsService
from agora.discussions.schemas import dto
from agora.infra.auth import AuthenticatedUser, get_current_user, get_optional_user

router = APIRouter(tags=["discussions"])
_service = DiscussionsService()
_feed = DiscussionFeedQuery()

_UPDATE_RESPONSES: dict[UpdateOutcome, tuple[int, str]] = {
	UpdateOutcome.UPDATED: (status.HTTP_200_OK, "updated"),
	UpdateOutcome.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "discussion_not_found"),
	UpdateOutcome.NOT_AUTHOR: (status.HTTP_403_FORBIDDEN, "not_author"),
}

_DELETE_RESPONSES: dict[DeleteOutcome, tuple[int, str]] = {
	DeleteOutcome.DELETED: (status.HTTP_200_OK, "deleted"),
	DeleteOutcome.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "discussion_not_found"),
	DeleteOutcome.NOT_AUTHOR: (status.HTTP_403_FORBIDDEN, "not_author"),
}


def _client_ip(request: Request) -> str:
	return request.client.host if request.client else "unknown"


def _message_or_raise(code: int, message: str) -> dto.MessageResponse:
	if code >= 400:
		raise HTTPException(status_code=code, detail=message)
	return dto.MessageResponse(message=message)


@router.post("/discussions", response_model=dto.DiscussionCreatedResponse, status_code=201)
async def create_discussion_endpoint(
	payload: dto.DiscussionWriteRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.DiscussionCreatedResponse:
	try:
		discussion = await _service.create_discussion(auth_user, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.DiscussionCreatedResponse(discussion_id=discussion.id)


@router.get("/discussions", response_model=dto.DiscussionListResponse)
async def list_discussions_endpoint(
	page: Optional[str] = Query(default=None),
	sort: Optional[str] = Query(default=None),
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dto.DiscussionListResponse:
	try:
		return await _feed.list_by_page(page, sort, viewer)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/discussions/{discussion_id}", response_model=dto.DiscussionDetailResponse)
async def get_discussion_endpoint(
	discussion_id: DiscussionId,
	request: Request,
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dto.DiscussionDetailResponse:
	try:
		detail = await _feed.get_detail(discussion_id, viewer, _client_ip(request))
	except Exception as exc:
		raise to_http_error(exc) from exc
	if detail is None:
		raise not_found()
	return detail


@router.put("/discussions/{discussion_id}", response_model=dto.MessageResponse)
async def update_discussion_endpoint(
	discussion_id: DiscussionId,
	payload: dto.DiscussionWriteRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.MessageResponse:
	try:
		outcome = await _service.update_discussion(auth_user, discussion_id, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return _message_or_raise(*_UPDATE_RESPONSES[outcome])


@router.delete("/discussions/{discussion_id}", response_model=dto.MessageResponse)
async def delete_discussion_endpoint(
	discussion_id: DiscussionId,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dto.MessageResponse:
	try:
		outcome = await _service.delete_discussion(auth_user, discussion_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return _message_or_raise(*_DELETE_RESPONSES[outcome])
