"""FastAPI routers for the discussions domain."""

from __future__ import annotations

from fastapi import APIRouter

from agora.discussions.api import discussions, engagement

router = APIRouter(prefix="/api/discussions/v1")

router.include_router(discussions.router)
router.include_router(engagement.router)

__all__ = ["router"]
