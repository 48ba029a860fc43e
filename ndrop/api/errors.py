"""Global error handlers rendering every failure as {"error", "request_id"}."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ndrop.api.request_id import get_request_id
from ndrop.domain.exceptions import NdropError

logger = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"error": exc.detail, "request_id": rid}
        return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

    @app.exception_handler(NdropError)
    async def domain_exc_handler(request: Request, exc: NdropError):  # type: ignore[override]
        rid = get_request_id(request)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail, "request_id": rid})

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"error": "missing_fields", "errors": jsonable_encoder(exc.errors()), "request_id": rid}
        return JSONResponse(status_code=400, content=payload)

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):  # type: ignore[override]
        rid = get_request_id(request)
        logger.error("unhandled exception", extra={"path": request.url.path}, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "server_error", "request_id": rid})
