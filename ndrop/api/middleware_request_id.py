"""Bind a request id to request.state and echo it as X-Request-Id.

Inbound ids from a proxy are reused when they look sane; anything longer than
the cap or empty is replaced with a fresh uuid4.
"""

from __future__ import annotations

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ndrop.api.request_id import REQUEST_ID_ATTR

_MAX_INBOUND_LEN = 128


def _pick_request_id(raw: str | None) -> str:
    candidate = (raw or "").strip()
    if not candidate or len(candidate) > _MAX_INBOUND_LEN:
        return str(uuid.uuid4())
    return candidate


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        rid = _pick_request_id(request.headers.get("X-Request-Id"))
        setattr(request.state, REQUEST_ID_ATTR, rid)
        response = await call_next(request)
        response.headers.setdefault("X-Request-Id", rid)
        return response
