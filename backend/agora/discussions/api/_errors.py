"""Error translation helpers for the discussions API."""

from __future__ import annotations

from fastapi import HTTPException, status

from agora.discussions.domain import exceptions
from agora.obs import logging as obs_logging

logger = obs_logging.get_logger("agora.discussions.api")


def to_http_error(exc: Exception) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	if isinstance(exc, HTTPException):
		return exc
	if isinstance(exc, exceptions.DiscussionError):
		return HTTPException(status_code=exc.status_code, detail=exc.detail)
	logger.exception("discussion_request_failed", extra={"error": type(exc).__name__})
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal_error")


def not_found() -> HTTPException:
	return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exceptions.NotFoundError.detail)
