"""Dependency injection for the FastAPI application."""

from __future__ import annotations

from fastapi import Request

from stockboard.service import StockDataService


def get_service(request: Request) -> StockDataService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise RuntimeError("StockDataService not initialised")
    return service
