"""Stock endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from stockboard.api.deps import get_service
from stockboard.service import StockDataService
from stockboard.views import format_price_point, format_stock

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stocks")
def list_stocks(service: StockDataService = Depends(get_service)) -> list[dict]:
    stocks = service.list_stocks()
    logger.info("GET /stocks: returning %d stocks", len(stocks))
    return [format_stock(s) for s in stocks]


@router.get("/stocks/{ticker}")
def get_stock(ticker: str, service: StockDataService = Depends(get_service)) -> dict:
    return format_stock(service.get_stock(ticker))


@router.get("/stocks/{ticker}/history")
def get_stock_history(ticker: str, service: StockDataService = Depends(get_service)) -> list[dict]:
    """Daily close price and volume for a ticker, oldest first, timestamps in UTC."""
    history = service.get_history(ticker)
    logger.info("GET /stocks/%s/history: %d points", ticker, len(history))
    return [format_price_point(p) for p in history]
