"""ASGI middleware for request ids, access logging and HTTP metrics."""

from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from agora.obs import logging as obs_logging
from agora.obs import metrics

REQUEST_ID_HEADER = "X-Request-Id"

_access_log = obs_logging.get_logger("agora.http")


def _route_template(request: Request) -> str:
	# Templated path keeps metric label cardinality bounded
	route = request.scope.get("route")
	return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
	"""Tag every request with an id; when instrumentation is on, also log and time it."""

	def __init__(self, app, *, enabled: bool = True) -> None:
		super().__init__(app)
		self.enabled = enabled

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
		request.state.request_id = request_id
		if not self.enabled:
			response = await call_next(request)
			response.headers.setdefault(REQUEST_ID_HEADER, request_id)
			return response

		token = obs_logging.bind_context(
			request_id=request_id,
			client_ip=request.client.host if request.client else None,
		)
		started = time.perf_counter()
		try:
			response = await call_next(request)
		except Exception:
			self._record(request, 500, started)
			_access_log.exception("http_request_error", extra={"method": request.method, "path": request.url.path})
			obs_logging.reset_context(token)
			raise
		self._record(request, response.status_code, started)
		response.headers.setdefault(REQUEST_ID_HEADER, request_id)
		obs_logging.reset_context(token)
		return response

	@staticmethod
	def _record(request: Request, status_code: int, started: float) -> None:
		elapsed = time.perf_counter() - started
		route = _route_template(request)
		metrics.observe_request(route, request.method, status_code, elapsed)
		_access_log.info(
			"http_request",
			extra={
				"status": status_code,
				"method": request.method,
				"route": route,
				"latency_ms": round(elapsed * 1000, 3),
			},
		)


def install(app, *, enabled: bool = True) -> None:
	app.add_middleware(ObservabilityMiddleware, enabled=enabled)
