"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from agora.obs import logging as obs_logging
from agora.obs import middleware
from agora.settings import settings

_logging_configured = False


def init(app: FastAPI) -> None:
	global _logging_configured
	middleware.install(app, enabled=settings.obs_enabled)
	if settings.obs_enabled and not _logging_configured:
		obs_logging.configure_logging()
		_logging_configured = True


__all__ = ["init"]
