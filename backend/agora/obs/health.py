"""Liveness and readiness probes."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Tuple

from agora.infra.postgres import get_pool
from agora.infra.redis import redis_client
from agora.obs import logging as obs_logging

_PROBE_TIMEOUT_SECONDS = 2.0

logger = obs_logging.get_logger("agora.health")


async def liveness() -> Dict[str, str]:
	return {"status": "ok"}


async def _check_postgres() -> bool:
	pool = await get_pool()
	async with pool.acquire() as conn:
		await conn.execute("SELECT 1")
	return True


async def _check_redis() -> bool:
	return bool(await redis_client.ping())


async def readiness() -> Tuple[int, Dict[str, Any]]:
	checks: Dict[str, str] = {}
	for name, probe in (("postgres", _check_postgres), ("redis", _check_redis)):
		try:
			ok = await asyncio.wait_for(probe(), timeout=_PROBE_TIMEOUT_SECONDS)
		except Exception as exc:
			logger.warning("readiness_probe_failed", extra={"dependency": name, "error": type(exc).__name__})
			ok = False
		checks[name] = "ok" if ok else "down"
	healthy = all(value == "ok" for value in checks.values())
	return (200 if healthy else 503), {"status": "ok" if healthy else "degraded", "checks": checks}
