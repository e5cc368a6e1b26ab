from __future__ import annotations

import logging
from decimal import Decimal

import psycopg

from stockboard.errors import SourceUnavailableError, StockNotFoundError
from stockboard.models.prediction import Prediction
from stockboard.models.stock import Stock
from stockboard.registry.db import Database

logger = logging.getLogger(__name__)


PREDICTIONS_QUERY = """
    SELECT
        p.id, p.message_id, p.stock_id, p.prediction_type,
        p.target_price, p.target_change_percent, p.period,
        p.recommendation, p.direction, p.justification_text,
        m.text AS message_text, p.predicted_at
    FROM predictions p
    LEFT JOIN messages m ON p.message_id = m.telegram_id
    WHERE p.stock_id = %s
    ORDER BY p.predicted_at DESC, p.id DESC
"""


def _decimal(value) -> Decimal | None:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


class Registry:
    """Query layer bridging Python models and the stocks/predictions schema."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def _query(
        self, operation: str, query: str, params: tuple | None = None, ticker: str | None = None,
    ) -> list[dict]:
        try:
            return self._db.execute(query, params)
        except psycopg.Error as e:
            raise SourceUnavailableError(operation, str(e), ticker=ticker) from e

    def health_check(self) -> bool:
        return self._db.health_check()

    # ------------------------------------------------------------------
    # Stocks
    # ------------------------------------------------------------------

    def list_stocks(self) -> list[Stock]:
        """Return every stock, ordered by id."""
        rows = self._query("querying stocks", "SELECT id, ticker, name FROM stocks ORDER BY id")
        return [Stock(id=r["id"], ticker=r["ticker"], name=r["name"]) for r in rows]

    def get_stock(self, ticker: str) -> Stock:
        """Look up the stock whose ticker matches exactly (case-sensitive)."""
        rows = self._query(
            "getting stock",
            "SELECT id, ticker, name FROM stocks WHERE ticker = %s LIMIT 1",
            (ticker,),
            ticker=ticker,
        )
        if not rows:
            raise StockNotFoundError(ticker)
        r = rows[0]
        return Stock(id=r["id"], ticker=r["ticker"], name=r["name"])

    def resolve_stock_id(self, ticker: str) -> int:
        """Map a ticker to its stock id. Raises StockNotFoundError if absent."""
        rows = self._query(
            "getting stock ID",
            "SELECT id FROM stocks WHERE ticker = %s LIMIT 1",
            (ticker,),
            ticker=ticker,
        )
        if not rows:
            raise StockNotFoundError(ticker)
        return rows[0]["id"]

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    def get_predictions(self, stock_id: int) -> list[Prediction]:
        """All predictions for a stock with their message text, newest first.

        Rows without a matching message are kept with ``message_text=None``.
        Equal timestamps keep the order the database returned them in.
        """
        rows = self._query("querying predictions", PREDICTIONS_QUERY, (stock_id,))
        predictions = [self._row_to_prediction(r) for r in rows]
        # sorted() is stable with reverse=True, so ties stay in retrieval order
        return sorted(predictions, key=lambda p: p.predicted_at_epoch, reverse=True)

    @staticmethod
    def _row_to_prediction(r: dict) -> Prediction:
        return Prediction(
            id=r["id"],
            stock_id=r["stock_id"],
            predicted_at=r["predicted_at"],
            message_id=r.get("message_id"),
            prediction_type=r.get("prediction_type"),
            target_price=_decimal(r.get("target_price")),
            target_change_percent=_decimal(r.get("target_change_percent")),
            period=r.get("period"),
            recommendation=r.get("recommendation"),
            direction=r.get("direction"),
            justification_text=r.get("justification_text"),
            message_text=r.get("message_text"),
        )
