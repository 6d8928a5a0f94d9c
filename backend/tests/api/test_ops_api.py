from __future__ import annotations

import pytest

from agora.obs import health
from agora.settings import settings


@pytest.mark.asyncio
async def test_liveness(api_client):
	resp = await api_client.get("/health/live")
	assert resp.status_code == 200
	assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_readiness_reports_down_dependency(api_client, monkeypatch):
	async def _pg_down():
		raise ConnectionRefusedError("no postgres")

	monkeypatch.setattr(health, "_check_postgres", _pg_down)

	resp = await api_client.get("/health/ready")

	assert resp.status_code == 503
	assert resp.json()["checks"] == {"postgres": "down", "redis": "ok"}


@pytest.mark.asyncio
async def test_metrics_require_admin_token(api_client, monkeypatch):
	monkeypatch.setattr(settings, "obs_metrics_public", False)
	monkeypatch.setattr(settings, "obs_admin_token", "ops-secret")

	denied = await api_client.get("/metrics")
	allowed = await api_client.get("/metrics", headers={"X-Admin-Token": "ops-secret"})

	assert denied.status_code == 403
	assert allowed.status_code == 200
	assert "agora_http_requests_total" in allowed.text


@pytest.mark.asyncio
async def test_request_id_header_is_echoed(api_client):
	resp = await api_client.get("/health/live", headers={"X-Request-Id": "abc-123"})
	assert resp.headers["X-Request-Id"] == "abc-123"
