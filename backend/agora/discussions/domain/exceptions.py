"""Custom exceptions for discussion services."""

from __future__ import annotations

from fastapi import status


class DiscussionError(Exception):
	"""Base class for discussion related errors."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "discussion_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class ValidationError(DiscussionError):
	"""Raised when a discussion payload breaks an input rule."""

	status_code = status.HTTP_400_BAD_REQUEST
	detail = "invalid_discussion_input"


class NotFoundError(DiscussionError):
	"""Thrown when a discussion is missing."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "discussion_not_found"


class PersistenceError(DiscussionError):
	"""Raised when the storage layer fails; the open transaction has been rolled back."""

	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	detail = "internal_error"

	def __init__(self, operation: str) -> None:
		super().__init__()
		self.operation = operation

	def __str__(self) -> str:
		return f"{self.detail}:{self.operation}"
