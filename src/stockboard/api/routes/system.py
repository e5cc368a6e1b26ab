"""System health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from stockboard.api.deps import get_service
from stockboard.service import StockDataService

router = APIRouter()


@router.get("/health")
def health(service: StockDataService = Depends(get_service)) -> dict:
    database = service.registry.health_check()
    data_dir = service.history.data_dir.is_dir()
    return {
        "status": "ok" if database and data_dir else "degraded",
        "database": database,
        "dataDir": data_dir,
    }
