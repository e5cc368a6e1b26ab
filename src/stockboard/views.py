"""JSON shaping for API and CLI output.

Prediction ``id`` in the output is a display number (1..N in response
order), assigned here at serialization time. It is not the storage id and
must not be used to look a prediction up again.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from stockboard.models.prediction import Prediction
from stockboard.models.price import PricePoint
from stockboard.models.stock import Stock


def _float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def format_stock(s: Stock) -> dict:
    return {"id": s.id, "ticker": s.ticker, "name": s.name}


def format_prediction(p: Prediction, display_id: int) -> dict:
    return {
        "id": display_id,
        "stockId": p.stock_id,
        "messageId": p.message_id,
        "predictionType": p.prediction_type,
        "targetPrice": _float(p.target_price),
        "targetChangePercent": _float(p.target_change_percent),
        "period": p.period,
        "recommendation": p.recommendation,
        "direction": p.direction,
        "justificationText": p.justification_text,
        "message": p.message_text,
        "predictedAt": p.predicted_at_epoch,
    }


def format_predictions(predictions: Iterable[Prediction]) -> list[dict]:
    return [format_prediction(p, i) for i, p in enumerate(predictions, 1)]


def format_price_point(p: PricePoint) -> dict:
    return {
        "stockId": p.stock_id,
        "timestamp": p.iso_timestamp,
        "price": p.price,
        "volume": p.volume,
    }
