"""ASGI middleware for request metrics and access logs."""

from __future__ import annotations

import time
from typing import Optional
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ndrop.obs import logging as obs_logging
from ndrop.obs import metrics
from ndrop.settings import settings

# Probe traffic is counted but not access-logged.
_QUIET_PATHS = ("/health/", "/metrics")


def _route_template(request: Request) -> str:
	route = request.scope.get("route")
	if route and getattr(route, "path", None):
		return route.path  # type: ignore[return-value]
	return "unmatched"


def _client_ip(request: Request) -> Optional[str]:
	forwarded = request.headers.get("X-Forwarded-For")
	if forwarded:
		return forwarded.split(",", 1)[0].strip() or None
	return request.client.host if request.client else None


class ObservabilityMiddleware(BaseHTTPMiddleware):
	"""Time each request, record it in Prometheus and emit one access log line.

	The route label is the matched path template, so ``/api/events/{event_id}/...``
	stays a single series. Unmatched paths share the ``unmatched`` label.
	"""

	def __init__(self, app, *, enabled: bool = True) -> None:
		super().__init__(app)
		self._enabled = enabled
		self._logger = obs_logging.get_logger("ndrop.http")

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		if not settings.obs_enabled or not self._enabled:
			return await call_next(request)

		request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-Id") or str(uuid4())
		request.state.request_id = request_id
		tokens = obs_logging.bind_context(
			request_id=request_id,
			route=request.url.path,
			client_ip=_client_ip(request),
		)
		start = time.perf_counter()
		status_code = 500
		try:
			response = await call_next(request)
			status_code = response.status_code
		except Exception:
			self._logger.exception("http_request_error", extra={"method": request.method})
			raise
		finally:
			elapsed = time.perf_counter() - start
			route = _route_template(request)
			metrics.observe_request(route, request.method, status_code, elapsed)
			if not request.url.path.startswith(_QUIET_PATHS):
				self._logger.info(
					"http_request",
					extra={
						"status": status_code,
						"method": request.method,
						"latency_ms": round(elapsed * 1000, 3),
						"route_template": route,
					},
				)
			obs_logging.reset_context(tokens)
			obs_logging.clear_context()

		response.headers.setdefault("X-Request-Id", request_id)
		return response


def install(app, *, enabled: bool = True) -> None:
	app.add_middleware(ObservabilityMiddleware, enabled=enabled)
