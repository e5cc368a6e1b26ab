"""Prediction endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from stockboard.api.deps import get_service
from stockboard.service import StockDataService
from stockboard.views import format_predictions

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/predictions/{ticker}")
def get_predictions(ticker: str, service: StockDataService = Depends(get_service)) -> list[dict]:
    """Predictions for a ticker, newest first.

    The ``id`` field is a display number (1..N in this response), not a
    stable identifier.
    """
    predictions = service.get_predictions(ticker)
    logger.info("GET /predictions/%s: %d predictions", ticker, len(predictions))
    return format_predictions(predictions)
