from __future__ import annotations

from stockboard.models.prediction import Prediction
from stockboard.models.price import (
    BarRecord,
    DropReason,
    ParseReport,
    PricePoint,
    RecordOutcome,
)
from stockboard.models.stock import Stock

__all__ = [
    # stock
    "Stock",
    # prediction
    "Prediction",
    # price history
    "BarRecord",
    "DropReason",
    "ParseReport",
    "PricePoint",
    "RecordOutcome",
]
