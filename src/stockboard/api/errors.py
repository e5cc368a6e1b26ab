"""Map core failures to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockboard.errors import NotFoundError, SourceUnavailableError, StockboardError

logger = logging.getLogger(__name__)


def _body(exc: StockboardError) -> dict:
    return {"error": exc.code, "message": exc.message}


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning("%s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=404, content=_body(exc))


async def source_unavailable_handler(request: Request, exc: SourceUnavailableError) -> JSONResponse:
    logger.warning("%s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=503, content=_body(exc))


async def stockboard_error_handler(request: Request, exc: StockboardError) -> JSONResponse:
    logger.error("%s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=500, content=_body(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(SourceUnavailableError, source_unavailable_handler)
    app.add_exception_handler(StockboardError, stockboard_error_handler)
