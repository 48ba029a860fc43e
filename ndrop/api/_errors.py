"""Error translation helpers for route handlers."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ndrop.domain import exceptions

logger = logging.getLogger(__name__)


def to_http_error(exc: Exception) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	if isinstance(exc, HTTPException):
		return exc
	if isinstance(exc, exceptions.NdropError):
		return HTTPException(status_code=exc.status_code, detail=exc.detail)
	logger.error("unhandled error in route handler", exc_info=exc)
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="server_error")
