"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agora.api import ops
from agora.api.errors import install_error_handlers
from agora.discussions.api import router as discussions_router
from agora.identity.api import router as identity_router
from agora.infra import postgres
from agora.infra.redis import close_redis
from agora.obs import init as obs_init
from agora.obs import logging as obs_logging
from agora.settings import settings

logger = obs_logging.get_logger("agora.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	logger.info("startup_complete", extra={"environment": settings.environment})
	try:
		yield
	finally:
		await postgres.close_pool()
		await close_redis()


app = FastAPI(title="Agora Discussions", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins or [])
if not allow_origins:
	allow_origins = ["http://localhost:3000"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)

app.include_router(ops.router)
app.include_router(identity_router)
app.include_router(discussions_router)
